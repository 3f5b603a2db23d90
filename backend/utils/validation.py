"""
Input validation utilities for security.
"""
from decimal import Decimal, InvalidOperation
from typing import Tuple, Union

from web3 import Web3

from config import MIN_CHANCE, MAX_CHANCE
from utils.formatting import to_wei

# Sentinel for "withdraw everything minus gas"
WITHDRAW_ALL = "all"

MAX_DECIMALS = 18


def is_valid_evm_address(address: str) -> Tuple[bool, str]:
    """Validate EVM address format.

    Accepts lowercase, uppercase or correctly checksummed hex addresses.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not address:
        return False, "Wallet address is required"

    if not isinstance(address, str):
        return False, "Wallet address must be a string"

    if not address.startswith("0x") or len(address) != 42:
        return False, "Address must be 0x followed by 40 hex characters"

    if not Web3.is_address(address):
        return False, "Invalid address (bad characters or checksum)"

    return True, ""


def parse_amount(text: str, allow_all: bool = False) -> Union[int, str]:
    """Parse a decimal ether amount into wei.

    Args:
        text: User input such as "0.1"
        allow_all: Accept the "all" sentinel (withdrawals)

    Returns:
        Amount in wei, or WITHDRAW_ALL

    Raises:
        ValueError: malformed, non-positive or too precise
    """
    if text is None:
        raise ValueError("Amount is required")

    text = text.strip()
    if allow_all and text.lower() == WITHDRAW_ALL:
        return WITHDRAW_ALL

    try:
        value = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Invalid amount format: {text}")

    if not value.is_finite():
        raise ValueError(f"Invalid amount format: {text}")

    if value <= 0:
        raise ValueError("Amount must be greater than 0")

    if -value.normalize().as_tuple().exponent > MAX_DECIMALS:
        raise ValueError(f"Amount has more than {MAX_DECIMALS} decimal places")

    return to_wei(text)


def parse_chance(text: str) -> int:
    """Parse the win chance percentage.

    Only whole numbers are accepted. Range checks happen in preflight so the
    rejection carries the allowed bounds.

    Raises:
        ValueError: not an integer
    """
    if text is None:
        raise ValueError("Chance is required")

    text = text.strip()
    if text.startswith("+"):
        text = text[1:]
    if not text.lstrip("-").isdigit():
        raise ValueError(f"Chance must be a whole number between {MIN_CHANCE} and {MAX_CHANCE}")

    return int(text)
