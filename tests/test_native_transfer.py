"""
Test suite for SOL transfer preparation.
"""

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from solprep.core.programs import SYSTEM_PROGRAM_ID, TokenProgram
from solprep.errors import (
    AddressResolutionError,
    AnchorUnavailableError,
    InvalidAccountInfoError,
    SelfTransferError,
    TransactionBuildError,
)
from solprep.ledger.interface import AccountFound, AccountLookupFailed, LedgerRequestError
from solprep.tx.builder import TransactionBuilder

from conftest import program_ids, system_account


class TestPrepareSendingNativeSol:
    """Tests for the native transfer workflow."""

    @pytest.mark.asyncio
    async def test_never_funded_destination(self, mock_ledger, test_config, sender):
        """1,000,000 lamports to an account that has never received funds."""
        destination = Pubkey.new_unique()
        builder = TransactionBuilder(mock_ledger, test_config)

        prepared = await builder.prepare_sending_native_sol(
            account=sender,
            from_wallet=str(sender.pubkey()),
            to_wallet=str(destination),
            amount=1_000_000,
        )

        assert len(prepared.message.instructions) == 1
        assert program_ids(prepared.message) == [SYSTEM_PROGRAM_ID]
        assert prepared.recent_blockhash == mock_ledger.blockhash
        assert prepared.expected_fee == 5000
        assert prepared.is_signed is True

    @pytest.mark.asyncio
    async def test_existing_system_account(self, mock_ledger, test_config, sender):
        destination = Pubkey.new_unique()
        mock_ledger.set_account(destination, system_account())
        builder = TransactionBuilder(mock_ledger, test_config)

        prepared = await builder.prepare_sending_native_sol(
            sender, str(sender.pubkey()), str(destination), 42
        )

        assert destination in prepared.message.account_keys
        assert len(prepared.message.instructions) == 1

    @pytest.mark.asyncio
    async def test_self_transfer_rejected(self, mock_ledger, test_config, sender):
        builder = TransactionBuilder(mock_ledger, test_config)
        address = str(sender.pubkey())

        with pytest.raises(SelfTransferError):
            await builder.prepare_sending_native_sol(sender, address, address, 1_000)

        assert mock_ledger.calls == []

    @pytest.mark.asyncio
    async def test_foreign_owner_rejected(self, mock_ledger, test_config, sender):
        destination = Pubkey.new_unique()
        mock_ledger.set_account(destination, AccountFound(owner=TokenProgram.TOKEN.program_id))
        builder = TransactionBuilder(mock_ledger, test_config)

        with pytest.raises(InvalidAccountInfoError) as exc_info:
            await builder.prepare_sending_native_sol(
                sender, str(sender.pubkey()), str(destination), 1_000
            )

        assert exc_info.value.owner == str(TokenProgram.TOKEN.program_id)
        assert "getLatestBlockhash" not in mock_ledger.method_calls()

    @pytest.mark.asyncio
    async def test_lookup_failure_propagates(self, mock_ledger, test_config, sender):
        destination = Pubkey.new_unique()
        error = LedgerRequestError("connection reset")
        mock_ledger.set_account(destination, AccountLookupFailed(error=error))
        builder = TransactionBuilder(mock_ledger, test_config)

        with pytest.raises(LedgerRequestError) as exc_info:
            await builder.prepare_sending_native_sol(
                sender, str(sender.pubkey()), str(destination), 1_000
            )

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_unsigned_without_account(self, mock_ledger, test_config, sender):
        builder = TransactionBuilder(mock_ledger, test_config)

        prepared = await builder.prepare_sending_native_sol(
            None, str(sender.pubkey()), str(Pubkey.new_unique()), 1_000
        )

        assert prepared.signers == ()
        assert prepared.is_signed is False
        assert prepared.required_signers == (sender.pubkey(),)

    @pytest.mark.asyncio
    async def test_custom_fee_payer(self, mock_ledger, test_config, sender):
        payer = Keypair()
        builder = TransactionBuilder(mock_ledger, test_config)

        prepared = await builder.prepare_sending_native_sol(
            sender,
            str(sender.pubkey()),
            str(Pubkey.new_unique()),
            1_000,
            fee_payer=payer.pubkey(),
        )

        assert prepared.message.account_keys[0] == payer.pubkey()
        assert set(prepared.signatures) == {sender.pubkey()}
        assert prepared.is_signed is False

    @pytest.mark.asyncio
    async def test_invalid_destination_address(self, mock_ledger, test_config, sender):
        builder = TransactionBuilder(mock_ledger, test_config)

        with pytest.raises(AddressResolutionError):
            await builder.prepare_sending_native_sol(
                sender, str(sender.pubkey()), "not-an-address", 1_000
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0, -5])
    async def test_non_positive_amount(self, mock_ledger, test_config, sender, amount):
        builder = TransactionBuilder(mock_ledger, test_config)

        with pytest.raises(TransactionBuildError, match="positive"):
            await builder.prepare_sending_native_sol(
                sender, str(sender.pubkey()), str(Pubkey.new_unique()), amount
            )

    @pytest.mark.asyncio
    async def test_blockhash_failure(self, mock_ledger, test_config, sender):
        mock_ledger.blockhash_error = TimeoutError("rpc timeout")
        builder = TransactionBuilder(mock_ledger, test_config)

        with pytest.raises(AnchorUnavailableError):
            await builder.prepare_sending_native_sol(
                sender, str(sender.pubkey()), str(Pubkey.new_unique()), 1_000
            )
