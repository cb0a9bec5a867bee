"""
Transaction Builder - prepares transactions for sending or simulation.

Resolves addresses, selects instructions, attaches a recent blockhash,
estimates the fee and signs.
"""

import asyncio
from typing import List, Optional, Sequence, Tuple, Union

import structlog

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from solprep.config import PrepConfig, get_config
from solprep.core.address import parse_address, short
from solprep.core.message import MessageDraft, serialize_message
from solprep.core.prepared import PreparedTransaction, PreparedVersionedTransaction
from solprep.core.programs import SYSTEM_PROGRAM_ID, TokenProgram
from solprep.errors import (
    AnchorUnavailableError,
    InvalidAccountInfoError,
    SelfTransferError,
    TransactionBuildError,
)
from solprep.ledger.interface import (
    AccountFound,
    AccountLookupFailed,
    AssociatedTokenResult,
    LedgerInterface,
)
from solprep.tx import encoders
from solprep.tx.signer import build_transaction, build_versioned_transaction, sign_message

logger = structlog.get_logger(__name__)

AnyPrepared = Union[PreparedTransaction, PreparedVersionedTransaction]


class TransactionBuilder:
    """
    Builds prepared transactions.

    Coordinates between the ledger, the instruction encoders and the signer
    to produce transactions ready to be sent or simulated. Holds no state
    between calls.
    """

    def __init__(
        self,
        ledger: LedgerInterface,
        config: Optional[PrepConfig] = None,
    ):
        """
        Initialize the transaction builder.

        Args:
            ledger: Ledger interface for blockhash, fee and account lookups
            config: Preparation configuration
        """
        self.ledger = ledger
        self.config = config or get_config()

    # ========================================================================
    # Generic preparation
    # ========================================================================

    async def prepare_transaction(
        self,
        instructions: Sequence[Instruction],
        signers: Sequence[Keypair],
        fee_payer: Pubkey,
    ) -> PreparedTransaction:
        """
        Prepare a legacy transaction from instructions.

        Args:
            instructions: Instructions in execution order
            signers: Keypairs to sign with; empty for an unsigned transaction
            fee_payer: Address paying the network fee

        Returns:
            PreparedTransaction that can be sent or simulated

        Raises:
            AnchorUnavailableError: If no recent blockhash can be fetched
        """
        draft = await self._anchor(MessageDraft.create(instructions, fee_payer))
        message = draft.compile()

        signatures = sign_message(message, signers) if signers else {}
        transaction = build_transaction(message, signatures)

        expected_fee = await self._estimate_fee(serialize_message(message))

        logger.info(
            "transaction_prepared",
            instructions=len(draft.instructions),
            signatures=len(signatures),
            fee_payer=short(fee_payer),
            expected_fee=expected_fee,
        )

        return PreparedTransaction(
            transaction=transaction,
            signers=tuple(signers),
            expected_fee=expected_fee,
        )

    async def prepare_versioned_transaction(
        self,
        instructions: Sequence[Instruction],
        signers: Sequence[Keypair],
        fee_payer: Pubkey,
    ) -> PreparedVersionedTransaction:
        """Prepare a v0 transaction; same steps as prepare_transaction."""
        draft = await self._anchor(MessageDraft.create(instructions, fee_payer))
        message = draft.compile_v0()

        signatures = sign_message(message, signers) if signers else {}
        transaction = build_versioned_transaction(message, signatures)

        expected_fee = await self._estimate_fee(serialize_message(message))

        logger.info(
            "versioned_transaction_prepared",
            instructions=len(draft.instructions),
            signatures=len(signatures),
            expected_fee=expected_fee,
        )

        return PreparedVersionedTransaction(
            transaction=transaction,
            signers=tuple(signers),
            expected_fee=expected_fee,
        )

    async def _anchor(self, draft: MessageDraft) -> MessageDraft:
        """Attach the latest blockhash to a draft."""
        try:
            blockhash = await self.ledger.get_latest_blockhash(self.config.commitment)
        except AnchorUnavailableError:
            raise
        except Exception as e:
            logger.error("blockhash_fetch_failed", error=str(e))
            raise AnchorUnavailableError(f"Failed to fetch recent blockhash: {e}") from e

        if blockhash is None:
            raise AnchorUnavailableError("Ledger returned no recent blockhash")

        anchored = draft.with_blockhash(blockhash)
        if not anchored.is_anchored:
            raise AnchorUnavailableError("Ledger returned an empty blockhash")

        return anchored

    async def _estimate_fee(self, serialized_message: bytes) -> Optional[int]:
        """Fee for the message, or None when the estimate cannot be obtained."""
        try:
            return await self.ledger.get_fee_for_message(
                serialized_message,
                self.config.commitment,
            )
        except Exception as e:
            logger.warning("fee_estimation_failed", error=str(e))
            return None

    # ========================================================================
    # Native SOL
    # ========================================================================

    async def prepare_sending_native_sol(
        self,
        account: Optional[Keypair],
        from_wallet: str,
        to_wallet: str,
        amount: int,
        fee_payer: Optional[Pubkey] = None,
    ) -> PreparedTransaction:
        """
        Prepare a SOL transfer.

        Args:
            account: Keypair authorizing the transfer; None for an unsigned transaction
            from_wallet: Source wallet address
            to_wallet: Destination wallet address
            amount: Lamports to send
            fee_payer: Custom fee payer, defaults to the source wallet

        Returns:
            PreparedTransaction with a single transfer instruction

        Raises:
            SelfTransferError: If source and destination are the same address
            InvalidAccountInfoError: If the destination is not a system account
        """
        _check_amount(amount)

        from_pubkey = parse_address(from_wallet, "source address")
        to_pubkey = parse_address(to_wallet, "destination address")
        fee_payer = fee_payer or from_pubkey

        if from_pubkey == to_pubkey:
            raise SelfTransferError("Cannot send SOL to the sending wallet")

        lookup = await self.ledger.get_account_info(to_pubkey, self.config.commitment)

        if isinstance(lookup, AccountLookupFailed):
            raise lookup.error
        if isinstance(lookup, AccountFound) and lookup.owner != SYSTEM_PROGRAM_ID:
            raise InvalidAccountInfoError(
                f"Destination {to_wallet} is owned by {lookup.owner}, not the System Program",
                owner=str(lookup.owner),
            )

        logger.info(
            "preparing_sol_transfer",
            source=short(from_pubkey),
            destination=short(to_pubkey),
            lamports=amount,
            destination_exists=isinstance(lookup, AccountFound),
        )

        instruction = encoders.system_transfer(from_pubkey, to_pubkey, amount)

        return await self.prepare_transaction(
            instructions=[instruction],
            signers=[account] if account is not None else [],
            fee_payer=fee_payer,
        )

    # ========================================================================
    # SPL tokens
    # ========================================================================

    async def prepare_sending_spl_tokens(
        self,
        account: Keypair,
        mint_address: str,
        token_program_id: Pubkey,
        decimals: int,
        from_wallet: str,
        to_wallet: str,
        amount: int,
        fee_payer: Optional[Pubkey] = None,
        transfer_checked: bool = False,
    ) -> Tuple[PreparedTransaction, str]:
        """
        Prepare an SPL token transfer.

        Args:
            account: Keypair owning the source token account
            mint_address: Mint of the token being sent
            token_program_id: Token or Token-2022 program id
            decimals: Decimals of the mint
            from_wallet: Source wallet (or source token account)
            to_wallet: Destination wallet (or destination token account)
            amount: Amount in base units
            fee_payer: Custom fee payer, defaults to the account
            transfer_checked: Use the checked transfer instruction

        Returns:
            (prepared transaction, real destination). The real destination is
            the destination token account when it already exists, otherwise
            to_wallet itself.

        Raises:
            SelfTransferError: If the resolved destination is the source wallet
            UnsupportedTokenProgramError: If token_program_id is not a token program
        """
        _check_amount(amount)

        program = TokenProgram.from_program_id(token_program_id)
        mint = parse_address(mint_address, "mint address")
        from_pubkey = parse_address(from_wallet, "source address")
        to_pubkey = parse_address(to_wallet, "destination address")
        fee_payer = fee_payer or account.pubkey()

        source, destination = await self._resolve_token_accounts(mint, from_pubkey, to_pubkey, program)

        if from_wallet == str(destination.address):
            raise SelfTransferError("Cannot send tokens to the sending wallet")

        instructions: List[Instruction] = []

        if destination.is_unregistered:
            instructions.append(
                encoders.create_associated_token_account(
                    program,
                    payer=fee_payer,
                    owner=to_pubkey,
                    mint=mint,
                )
            )

        if transfer_checked:
            send_instruction = encoders.token_transfer_checked(
                program,
                source=source.address,
                mint=mint,
                destination=destination.address,
                owner=account.pubkey(),
                amount=amount,
                decimals=decimals,
            )
        else:
            send_instruction = encoders.token_transfer(
                program,
                source=source.address,
                destination=destination.address,
                owner=account.pubkey(),
                amount=amount,
            )
        instructions.append(send_instruction)

        real_destination = to_wallet
        if not destination.is_unregistered:
            real_destination = str(destination.address)

        logger.info(
            "preparing_token_transfer",
            mint=short(mint),
            program=program.value,
            source=short(source.address),
            destination=short(destination.address),
            create_account=destination.is_unregistered,
            checked=transfer_checked,
        )

        prepared = await self.prepare_transaction(
            instructions=instructions,
            signers=[account],
            fee_payer=fee_payer,
        )
        return prepared, real_destination

    async def _resolve_token_accounts(
        self,
        mint: Pubkey,
        from_pubkey: Pubkey,
        to_pubkey: Pubkey,
        program: TokenProgram,
    ) -> Tuple[AssociatedTokenResult, AssociatedTokenResult]:
        """Resolve source and destination token accounts."""
        commitment = self.config.commitment
        resolve = self.ledger.resolve_associated_token_address

        if self.config.concurrent_lookups:
            tasks = [
                asyncio.ensure_future(resolve(mint, from_pubkey, program, commitment)),
                asyncio.ensure_future(resolve(mint, to_pubkey, program, commitment)),
            ]
            try:
                source, destination = await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                raise
        else:
            source = await resolve(mint, from_pubkey, program, commitment)
            destination = await resolve(mint, to_pubkey, program, commitment)

        logger.debug(
            "token_destination_resolved",
            destination=short(destination.address),
            unregistered=destination.is_unregistered,
        )
        return source, destination

    # ========================================================================
    # Sending
    # ========================================================================

    async def send(self, prepared: AnyPrepared) -> str:
        """
        Submit a fully signed prepared transaction.

        Returns:
            Transaction signature

        Raises:
            TransactionBuildError: If a required signature is missing
        """
        if not prepared.is_signed:
            missing = set(prepared.required_signers) - set(prepared.signatures)
            raise TransactionBuildError(
                f"Transaction is missing signatures from {sorted(str(p) for p in missing)}"
            )
        return await self.ledger.send_raw_transaction(prepared.serialize())

    async def simulate(self, prepared: AnyPrepared) -> dict:
        """Simulate a prepared transaction, signed or not."""
        return await self.ledger.simulate_raw_transaction(prepared.serialize())


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise TransactionBuildError(f"Amount must be a positive integer, got {amount!r}")
