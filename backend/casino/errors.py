"""
Error taxonomy for the custodial transaction engine.

Each exception carries an ErrorKind tag assigned where the failure is
detected (store, transport, receipt), so callers branch on the tag instead
of on message text.
"""
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Structured failure kinds."""
    ALREADY_EXISTS = "already_exists"
    WALLET_CORRUPTED = "wallet_corrupted"
    CHAIN_UNAVAILABLE = "chain_unavailable"  # Network/node failure, nothing sent
    NODE_REJECTED = "node_rejected"          # Node refused the broadcast, nothing sent
    REVERTED = "reverted"                    # Mined with status 0, gas spent
    TIMEOUT = "timeout"                      # Possibly broadcast, outcome unknown
    CONTRACT_REJECTED = "contract_rejected"  # A view call or gas estimate hit a require()


class CasinoError(Exception):
    """Base class for engine failures."""
    kind: ErrorKind = ErrorKind.CHAIN_UNAVAILABLE


class WalletAlreadyExists(CasinoError):
    kind = ErrorKind.ALREADY_EXISTS

    def __init__(self, user_id: str):
        super().__init__(f"User {user_id} already has a wallet")
        self.user_id = user_id


class WalletCorrupted(CasinoError):
    kind = ErrorKind.WALLET_CORRUPTED

    def __init__(self, user_id: str, reason: str):
        super().__init__(f"Wallet for user {user_id} is unusable: {reason}")
        self.user_id = user_id


class ChainUnavailable(CasinoError):
    """The node could not be reached or answered with an error."""
    kind = ErrorKind.CHAIN_UNAVAILABLE

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


class NodeRejected(ChainUnavailable):
    """The node refused to accept a signed transaction."""
    kind = ErrorKind.NODE_REJECTED


class TransactionReverted(CasinoError):
    """Mined but failed on-chain. Gas was spent."""
    kind = ErrorKind.REVERTED

    def __init__(self, tx_hash: str):
        super().__init__(f"Transaction {tx_hash} reverted")
        self.tx_hash = tx_hash


class ConfirmationTimeout(CasinoError):
    """Stopped waiting for a receipt. The transaction may still be mined."""
    kind = ErrorKind.TIMEOUT

    def __init__(self, tx_hash: str, timeout: float):
        super().__init__(f"No receipt for {tx_hash} after {timeout}s")
        self.tx_hash = tx_hash
        self.timeout = timeout


class BroadcastInterrupted(ConfirmationTimeout):
    """The broadcast request failed after it left this process.

    The node may already hold the transaction, so the outcome is unknown
    and tx_hash is the locally computed hash of the signed bytes.
    """

    def __init__(self, tx_hash: str, reason: str):
        CasinoError.__init__(self, f"Broadcast of {tx_hash} interrupted ({reason})")
        self.tx_hash = tx_hash
        self.timeout = 0


class ContractRejected(CasinoError):
    """The contract reverted a read or an estimate. Nothing was sent."""
    kind = ErrorKind.CONTRACT_REJECTED

    def __init__(self, operation: str, reason: str):
        super().__init__(f"{operation} reverted: {reason}")
        self.operation = operation
        self.reason = reason
