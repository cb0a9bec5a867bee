"""
On-chain program identities.

Exactly two token programs exist with compatible but distinct instruction
encodings, so TokenProgram is a closed enum rather than an open registry.
"""

from enum import Enum
from typing import Union

from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from spl.token.constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)
from spl.token.instructions import get_associated_token_address

from solprep.errors import UnsupportedTokenProgramError

__all__ = [
    "ASSOCIATED_TOKEN_PROGRAM_ID",
    "SYSTEM_PROGRAM_ID",
    "TokenProgram",
    "derive_associated_token_address",
]


class TokenProgram(str, Enum):
    """The two SPL token programs."""
    TOKEN = "token"
    TOKEN_2022 = "token-2022"

    @property
    def program_id(self) -> Pubkey:
        if self is TokenProgram.TOKEN:
            return TOKEN_PROGRAM_ID
        return TOKEN_2022_PROGRAM_ID

    @classmethod
    def from_program_id(cls, program_id: Union[str, Pubkey]) -> "TokenProgram":
        """
        Map a program id to its variant.

        Raises:
            UnsupportedTokenProgramError: For any other program id
        """
        if isinstance(program_id, TokenProgram):
            return program_id

        key = str(program_id)
        if key == str(TOKEN_PROGRAM_ID):
            return cls.TOKEN
        if key == str(TOKEN_2022_PROGRAM_ID):
            return cls.TOKEN_2022
        raise UnsupportedTokenProgramError(f"Unsupported token program: {key}")


def derive_associated_token_address(
    owner: Pubkey,
    mint: Pubkey,
    program: TokenProgram,
) -> Pubkey:
    """Derive the associated token account of owner for mint under the given token program."""
    return get_associated_token_address(owner, mint, token_program_id=program.program_id)
