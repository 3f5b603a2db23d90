"""
Value types passed between preflight, executor, decoder and orchestrator.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union


class ActionKind(Enum):
    """Funds-moving actions."""
    WITHDRAW = "withdraw"
    BET = "bet"


class RejectReason(Enum):
    """Why preflight refused an action. No funds moved in any of these."""
    NO_WALLET = "no_wallet"
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INVALID_ADDRESS = "invalid_address"
    CHANCE_OUT_OF_RANGE = "chance_out_of_range"
    BET_AMOUNT_OUT_OF_RANGE = "bet_amount_out_of_range"
    PAYOUT_TOO_HIGH = "payout_too_high"


@dataclass(frozen=True)
class PendingAction:
    """A requested withdrawal or bet, alive for one orchestrated call.

    extra is the destination address for withdrawals and the chance
    percentage for bets.
    """
    kind: ActionKind
    amount: int  # wei
    extra: Union[str, int]


@dataclass(frozen=True)
class FeeEstimate:
    gas_price: int
    gas_limit: int

    @property
    def total(self) -> int:
        return self.gas_price * self.gas_limit


@dataclass(frozen=True)
class Authorized:
    """Preflight passed. amount is final (resolved for "all" withdrawals)."""
    action: PendingAction
    fee: FeeEstimate
    expected_payout: Optional[int] = None  # bets only, for the progress message

    @property
    def amount(self) -> int:
        return self.action.amount


@dataclass(frozen=True)
class Rejected:
    reason: RejectReason
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BetQuote:
    """Live contract limits for a prospective bet."""
    amount: int
    chance: int
    payout: int
    max_payout: int
    min_bet: int
    max_bet: int

    @property
    def amount_in_range(self) -> bool:
        return self.min_bet <= self.amount <= self.max_bet

    @property
    def payout_allowed(self) -> bool:
        return self.payout <= self.max_payout


@dataclass(frozen=True)
class BetOutcome:
    """Result of a confirmed bet, decoded from the contract event."""
    bet_amount: int
    chance: int
    won: bool
    roll: int
    payout: int
    bet_id: Optional[int] = None
    tx_hash: Optional[str] = None


@dataclass(frozen=True)
class PlayerStats:
    total_bets: int
    total_wagered: int
    total_payout: int

    @property
    def net_result(self) -> int:
        return self.total_payout - self.total_wagered


@dataclass(frozen=True)
class BetRecord:
    """One entry of the contract's bet history."""
    bet_id: int
    amount: int
    chance: int
    outcome: int
    won: bool
    payout: int
