"""Utility modules for Dice Casino."""
from .encryption import generate_encryption_key, encrypt_secret, decrypt_secret
from .formatting import (
    format_amount,
    to_wei,
    format_tx_link,
    format_address_link,
    truncate_address,
)
from .validation import (
    WITHDRAW_ALL,
    is_valid_evm_address,
    parse_amount,
    parse_chance,
)

__all__ = [
    "generate_encryption_key",
    "encrypt_secret",
    "decrypt_secret",
    "format_amount",
    "to_wei",
    "format_tx_link",
    "format_address_link",
    "truncate_address",
    "WITHDRAW_ALL",
    "is_valid_evm_address",
    "parse_amount",
    "parse_chance",
]
