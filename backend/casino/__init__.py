"""Dice Casino transaction engine."""
from .errors import (
    ErrorKind,
    CasinoError,
    WalletAlreadyExists,
    WalletCorrupted,
    ChainUnavailable,
    NodeRejected,
    TransactionReverted,
    ConfirmationTimeout,
    BroadcastInterrupted,
    ContractRejected,
)
from .models import (
    ActionKind,
    RejectReason,
    PendingAction,
    FeeEstimate,
    Authorized,
    Rejected,
    BetQuote,
    BetOutcome,
    PlayerStats,
    BetRecord,
)
from .chain import ChainGateway
from .preflight import validate_withdraw, validate_bet, quote_bet
from .executor import TransactionExecutor
from .decoder import decode_bet_outcome
from .orchestrator import CasinoOrchestrator

__all__ = [
    "ErrorKind",
    "CasinoError",
    "WalletAlreadyExists",
    "WalletCorrupted",
    "ChainUnavailable",
    "NodeRejected",
    "TransactionReverted",
    "ConfirmationTimeout",
    "BroadcastInterrupted",
    "ContractRejected",
    "ActionKind",
    "RejectReason",
    "PendingAction",
    "FeeEstimate",
    "Authorized",
    "Rejected",
    "BetQuote",
    "BetOutcome",
    "PlayerStats",
    "BetRecord",
    "ChainGateway",
    "validate_withdraw",
    "validate_bet",
    "quote_bet",
    "TransactionExecutor",
    "decode_bet_outcome",
    "CasinoOrchestrator",
]
