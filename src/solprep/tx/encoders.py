"""
Instruction encoders.

Pure functions producing instructions for SOL transfers, token transfers and
associated token account creation. Token instructions are dispatched on the
TokenProgram variant so the two instruction families are never mixed.
"""

from typing import Callable, Dict

from solders.instruction import Instruction
from solders.pubkey import Pubkey
from solders import system_program
from spl.token import instructions as spl_token

from solprep.core.programs import TokenProgram


def system_transfer(from_pubkey: Pubkey, to_pubkey: Pubkey, lamports: int) -> Instruction:
    """System Program transfer of lamports."""
    return system_program.transfer(
        system_program.TransferParams(
            from_pubkey=from_pubkey,
            to_pubkey=to_pubkey,
            lamports=lamports,
        )
    )


# ============================================================================
# Token instruction families
# ============================================================================

def _transfer_for(program_id: Pubkey) -> Callable[..., Instruction]:
    def encode(source, destination, owner, amount) -> Instruction:
        return spl_token.transfer(
            spl_token.TransferParams(
                program_id=program_id,
                source=source,
                dest=destination,
                owner=owner,
                amount=amount,
            )
        )
    return encode


def _transfer_checked_for(program_id: Pubkey) -> Callable[..., Instruction]:
    def encode(source, mint, destination, owner, amount, decimals) -> Instruction:
        return spl_token.transfer_checked(
            spl_token.TransferCheckedParams(
                program_id=program_id,
                source=source,
                mint=mint,
                dest=destination,
                owner=owner,
                amount=amount,
                decimals=decimals,
            )
        )
    return encode


_TRANSFER: Dict[TokenProgram, Callable[..., Instruction]] = {
    program: _transfer_for(program.program_id) for program in TokenProgram
}

_TRANSFER_CHECKED: Dict[TokenProgram, Callable[..., Instruction]] = {
    program: _transfer_checked_for(program.program_id) for program in TokenProgram
}


def token_transfer(
    program: TokenProgram,
    source: Pubkey,
    destination: Pubkey,
    owner: Pubkey,
    amount: int,
) -> Instruction:
    """Unchecked token transfer between two token accounts."""
    return _TRANSFER[program](source, destination, owner, amount)


def token_transfer_checked(
    program: TokenProgram,
    source: Pubkey,
    mint: Pubkey,
    destination: Pubkey,
    owner: Pubkey,
    amount: int,
    decimals: int,
) -> Instruction:
    """Token transfer that has the mint and decimals validated on-chain."""
    return _TRANSFER_CHECKED[program](source, mint, destination, owner, amount, decimals)


def create_associated_token_account(
    program: TokenProgram,
    payer: Pubkey,
    owner: Pubkey,
    mint: Pubkey,
) -> Instruction:
    """Create the associated token account of owner for mint, funded by payer."""
    return spl_token.create_associated_token_account(
        payer=payer,
        owner=owner,
        mint=mint,
        token_program_id=program.program_id,
    )
