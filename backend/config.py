"""
Dice Casino configuration.

Values come from the environment (a .env file is loaded if present).
"""
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# SECRETS
# =============================================================================

BOT_TOKEN = os.getenv("BOT_TOKEN")
ENCRYPTION_KEY = os.getenv("ENCRYPTION_KEY")  # Fernet key for wallet secrets at rest

# =============================================================================
# CHAIN
# =============================================================================

RPC_URL = os.getenv("RPC_URL", "https://data-seed-prebsc-1-s1.binance.org:8545")
CHAIN_ID: Optional[int] = int(os.getenv("CHAIN_ID")) if os.getenv("CHAIN_ID") else None  # None = ask the node
CASINO_ADDRESS = os.getenv("CASINO_ADDRESS", "0x68f4C2c51464d25d5a50E995af55775534a21d29")
CASINO_ABI_PATH = os.getenv("CASINO_ABI_PATH")  # Optional Hardhat artifact

CONFIRMATION_TIMEOUT = int(os.getenv("CONFIRMATION_TIMEOUT", "120"))  # seconds
POLL_LATENCY = float(os.getenv("POLL_LATENCY", "2"))  # seconds between receipt polls

NATIVE_SYMBOL = os.getenv("NATIVE_SYMBOL", "BNB")
EXPLORER_URL = os.getenv("EXPLORER_URL", "https://testnet.bscscan.com")

# Fixed gas limits
WITHDRAW_GAS_LIMIT = 21_000  # plain value transfer
BET_GAS_LIMIT = 300_000      # placeBet() call

# =============================================================================
# GAME
# =============================================================================

MIN_CHANCE = 1
MAX_CHANCE = 99
HOUSE_EDGE_PERCENT = 2  # Display only, enforced by the contract
BET_HISTORY_LIMIT = 10

# =============================================================================
# STORAGE
# =============================================================================

WALLET_DB_PATH = os.getenv("WALLET_DB_PATH", "wallets.db")


def require(name: str) -> str:
    """Return a required environment value or fail loudly."""
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value
