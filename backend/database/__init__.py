"""Database module for Dice Casino."""
from .models import Wallet
from .repo import WalletStore

__all__ = ["Wallet", "WalletStore"]
