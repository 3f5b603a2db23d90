"""
Pre-flight checks for withdrawals and bets.

Everything here is read-only: balances, gas price and the contract's
current limits, all fetched fresh on every call so a change by the
contract owner takes effect immediately. A Rejected result means no
transaction was built.
"""
import logging
from typing import Union

from web3 import Web3

from config import BET_GAS_LIMIT, MAX_CHANCE, MIN_CHANCE, WITHDRAW_GAS_LIMIT
from database.models import Wallet
from utils.validation import WITHDRAW_ALL, is_valid_evm_address
from .models import (
    ActionKind,
    Authorized,
    BetQuote,
    FeeEstimate,
    PendingAction,
    RejectReason,
    Rejected,
)

logger = logging.getLogger(__name__)

PreflightResult = Union[Authorized, Rejected]


def _reject(reason: RejectReason, **details) -> Rejected:
    logger.info(f"[PREFLIGHT] Rejected: {reason.value} {details}")
    return Rejected(reason=reason, details=details)


async def validate_withdraw(gateway, wallet: Wallet, amount: Union[int, str], destination: str) -> PreflightResult:
    """Check a withdrawal can be paid including gas.

    Args:
        gateway: ChainGateway
        wallet: Sender wallet
        amount: Amount in wei, or WITHDRAW_ALL to send balance minus gas
        destination: Recipient address
    """
    is_valid, error_msg = is_valid_evm_address(destination)
    if not is_valid:
        return _reject(RejectReason.INVALID_ADDRESS, address=destination, error=error_msg)

    if amount != WITHDRAW_ALL and (not isinstance(amount, int) or amount <= 0):
        return _reject(RejectReason.INVALID_AMOUNT, amount=amount)

    balance = await gateway.get_balance(wallet.address)
    fee = FeeEstimate(gas_price=await gateway.get_fee_rate(), gas_limit=WITHDRAW_GAS_LIMIT)

    if amount == WITHDRAW_ALL:
        amount = balance - fee.total
        if amount <= 0:
            return _reject(
                RejectReason.INSUFFICIENT_FUNDS,
                withdraw_all=True,
                balance=balance,
                fee=fee.total,
            )
    elif balance < amount + fee.total:
        return _reject(
            RejectReason.INSUFFICIENT_FUNDS,
            amount=amount,
            fee=fee.total,
            total_needed=amount + fee.total,
            balance=balance,
        )

    action = PendingAction(
        kind=ActionKind.WITHDRAW,
        amount=amount,
        extra=Web3.to_checksum_address(destination),
    )
    logger.info(f"[PREFLIGHT] Withdrawal authorized: {amount} wei to {action.extra} (fee {fee.total} wei)")
    return Authorized(action=action, fee=fee)


async def validate_bet(gateway, wallet: Wallet, amount: int, chance: int) -> PreflightResult:
    """Check a bet is affordable and inside the contract's live limits.

    Chance is checked before any chain read.
    """
    if chance < MIN_CHANCE or chance > MAX_CHANCE:
        return _reject(RejectReason.CHANCE_OUT_OF_RANGE, chance=chance, min=MIN_CHANCE, max=MAX_CHANCE)

    if not isinstance(amount, int) or amount <= 0:
        return _reject(RejectReason.INVALID_AMOUNT, amount=amount)

    balance = await gateway.get_balance(wallet.address)
    fee = FeeEstimate(gas_price=await gateway.get_fee_rate(), gas_limit=BET_GAS_LIMIT)
    total_needed = amount + fee.total

    if balance < total_needed:
        return _reject(
            RejectReason.INSUFFICIENT_FUNDS,
            amount=amount,
            fee=fee.total,
            total_needed=total_needed,
            balance=balance,
        )

    min_bet = await gateway.min_bet()
    max_bet = await gateway.max_bet()
    if amount < min_bet or amount > max_bet:
        return _reject(RejectReason.BET_AMOUNT_OUT_OF_RANGE, amount=amount, min_bet=min_bet, max_bet=max_bet)

    max_payout = await gateway.max_payout()
    payout = await gateway.calculate_payout(amount, chance)
    if payout > max_payout:
        return _reject(RejectReason.PAYOUT_TOO_HIGH, payout=payout, max_payout=max_payout)

    action = PendingAction(kind=ActionKind.BET, amount=amount, extra=chance)
    logger.info(f"[PREFLIGHT] Bet authorized: {amount} wei at {chance}% (payout {payout}, fee {fee.total})")
    return Authorized(action=action, fee=fee, expected_payout=payout)


async def quote_bet(gateway, amount: int, chance: int) -> BetQuote:
    """Fetch live limits and the payout for a prospective bet."""
    return BetQuote(
        amount=amount,
        chance=chance,
        payout=await gateway.calculate_payout(amount, chance),
        max_payout=await gateway.max_payout(),
        min_bet=await gateway.min_bet(),
        max_bet=await gateway.max_bet(),
    )
