"""
Formatting utilities for display.
"""
from decimal import Decimal

from web3 import Web3

from config import EXPLORER_URL


def format_amount(wei: int) -> str:
    """Format a wei amount as an ether string without trailing zeros.

    1960000000000000000 -> "1.96", 0 -> "0"
    """
    value = Decimal(wei) / Decimal(10 ** 18)
    text = format(value.normalize(), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def to_wei(ether: str) -> int:
    """Convert a decimal ether string to wei (exact, no floats)."""
    return int(Web3.to_wei(Decimal(ether), "ether"))


def format_tx_link(tx_hash: str, explorer_url: str = EXPLORER_URL) -> str:
    """Format transaction explorer link."""
    if not tx_hash.startswith("0x"):
        tx_hash = f"0x{tx_hash}"
    return f"{explorer_url.rstrip('/')}/tx/{tx_hash}"


def format_address_link(address: str, explorer_url: str = EXPLORER_URL) -> str:
    """Format wallet explorer link."""
    return f"{explorer_url.rstrip('/')}/address/{address}"


def truncate_address(address: str, start: int = 6, end: int = 4) -> str:
    """Truncate wallet address for display."""
    if len(address) <= start + end:
        return address
    return f"{address[:start]}...{address[-end:]}"
