"""
Wallet store for Dice Casino.
Backed by SQLite; the database is the only source of truth for wallets.
"""
import logging
import secrets
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from cryptography.fernet import InvalidToken
from eth_account import Account
from eth_account.signers.local import LocalAccount

from casino.errors import WalletAlreadyExists, WalletCorrupted
from utils.encryption import encrypt_secret, decrypt_secret
from .models import Wallet

logger = logging.getLogger(__name__)


class WalletStore:
    """Durable mapping of user id -> custodial wallet."""

    def __init__(self, db_path: str = "wallets.db", encryption_key: Optional[str] = None):
        if not encryption_key:
            raise ValueError("encryption_key is required to store wallet secrets")

        self.db_path = db_path
        self._encryption_key = encryption_key

        # Per-user creation locks; reads never take them
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

        self._init_db()

    def _init_db(self):
        """Initialize database schema."""
        parent = Path(self.db_path).parent
        parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS wallets (
                    user_id TEXT PRIMARY KEY,
                    address TEXT NOT NULL UNIQUE,
                    encrypted_secret TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()

        logger.info(f"Wallet store initialized at {self.db_path}")

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[user_id] = lock
            return lock

    # === Wallet Operations ===

    def get(self, user_id) -> Optional[Wallet]:
        """Get a user's wallet, or None if they have not created one."""
        user_id = str(user_id)

        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM wallets WHERE user_id = ?", (user_id,))
            row = cursor.fetchone()
        finally:
            conn.close()

        if not row:
            return None

        return self._row_to_wallet(row)

    def create(self, user_id) -> Wallet:
        """Create the user's wallet.

        The row is committed before this returns, so a wallet that was shown
        to the user always exists on disk.

        Raises:
            WalletAlreadyExists: the user already has a wallet
        """
        user_id = str(user_id)

        with self._lock_for(user_id):
            if self.get(user_id) is not None:
                raise WalletAlreadyExists(user_id)

            # Account.create draws from os.urandom; extra entropy from secrets
            account = Account.create(extra_entropy=secrets.token_hex(32))
            wallet = Wallet(
                user_id=user_id,
                address=account.address,
                encrypted_secret=encrypt_secret(account.key.hex(), self._encryption_key),
                created_at=datetime.utcnow(),
            )
            del account

            conn = sqlite3.connect(self.db_path)
            try:
                cursor = conn.cursor()
                cursor.execute(
                    "INSERT INTO wallets (user_id, address, encrypted_secret, created_at) VALUES (?, ?, ?, ?)",
                    (wallet.user_id, wallet.address, wallet.encrypted_secret, wallet.created_at.isoformat()),
                )
                conn.commit()
            except sqlite3.IntegrityError:
                # Another process got there first
                raise WalletAlreadyExists(user_id)
            finally:
                conn.close()

        logger.info(f"[WALLET] Created wallet {wallet.address} for user {user_id}")
        return wallet

    def load_account(self, wallet: Wallet) -> LocalAccount:
        """Decrypt the wallet key into a signer.

        Callers must drop the returned account as soon as they have signed.

        Raises:
            WalletCorrupted: key cannot be decrypted or does not match the address
        """
        try:
            account = Account.from_key(decrypt_secret(wallet.encrypted_secret, self._encryption_key))
        except InvalidToken:
            raise WalletCorrupted(wallet.user_id, "wallet secret cannot be decrypted")

        if account.address != wallet.address:
            raise WalletCorrupted(wallet.user_id, "stored address does not match wallet key")

        return account

    def reveal_secret(self, wallet: Wallet) -> str:
        """Return the hex private key for the one-time backup message."""
        account = self.load_account(wallet)
        secret = account.key.hex()
        if not secret.startswith("0x"):
            secret = f"0x{secret}"
        return secret

    def count(self) -> int:
        """Number of wallets in the store."""
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM wallets")
            return cursor.fetchone()[0]
        finally:
            conn.close()

    def _row_to_wallet(self, row: sqlite3.Row) -> Wallet:
        """Convert database row to Wallet object."""
        return Wallet(
            user_id=row["user_id"],
            address=row["address"],
            encrypted_secret=row["encrypted_secret"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
