"""
Address parsing helpers.
"""

from typing import Union

from solders.pubkey import Pubkey

from solprep.errors import AddressResolutionError


def parse_address(value: Union[str, Pubkey], label: str = "address") -> Pubkey:
    """
    Canonicalize an address given as base58 text or a Pubkey.

    Args:
        value: Base58 string or Pubkey
        label: Name used in the error message

    Returns:
        The parsed Pubkey

    Raises:
        AddressResolutionError: If the string is not a valid address
    """
    if isinstance(value, Pubkey):
        return value

    try:
        return Pubkey.from_string(value)
    except (ValueError, TypeError) as e:
        raise AddressResolutionError(f"Invalid {label}: {value!r}") from e


def short(address: Union[str, Pubkey]) -> str:
    """Truncate an address for log output."""
    text = str(address)
    return text[:8] + "..." if len(text) > 8 else text
