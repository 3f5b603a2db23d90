"""
Action orchestrator: one entry point from chat commands to the engine.

Every path ends in a user-facing reply. Wallet problems, preflight
rejections and chain failures are turned into text here; anything else
is a bug and propagates.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

import messages
from config import BET_HISTORY_LIMIT, MAX_CHANCE, MIN_CHANCE
from database.models import Wallet
from security.audit import AuditEventType, AuditSeverity
from utils.validation import parse_amount, parse_chance
from .chain import to_hex_hash
from .decoder import decode_bet_outcome
from .errors import (
    BroadcastInterrupted,
    ChainUnavailable,
    ConfirmationTimeout,
    ContractRejected,
    NodeRejected,
    TransactionReverted,
    WalletAlreadyExists,
    WalletCorrupted,
)
from .models import ActionKind, Authorized, RejectReason, Rejected
from .preflight import quote_bet, validate_bet, validate_withdraw

logger = logging.getLogger(__name__)

Notify = Callable[[str], Awaitable[None]]


class CasinoOrchestrator:
    """Dispatches user actions to the wallet store, preflight and executor."""

    def __init__(self, store, gateway, executor, audit=None):
        self.store = store
        self.gateway = gateway
        self.executor = executor
        self.audit = audit
        self._wallet_locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        self._actions = {
            "createwallet": self.create_wallet,
            "deposit": self.deposit,
            "mywallet": self.my_wallet,
            "balance": self.balance,
            "withdraw": self.withdraw,
            "bet": self.bet,
            "mybets": self.my_bets,
            "calc": self.calc,
            "rules": self.rules,
        }

    @property
    def actions(self) -> List[str]:
        return list(self._actions)

    async def invoke(
        self,
        user_id,
        action: str,
        args: Sequence[str] = (),
        notify: Optional[Notify] = None,
    ) -> str:
        """Run one action for a user and return the final reply.

        Args:
            user_id: Chat user ID
            action: Command name without the slash
            args: Command arguments
            notify: Awaited with progress text once a transaction is broadcast

        Raises:
            ValueError: unknown action
        """
        handler = self._actions.get(action)
        if handler is None:
            raise ValueError(f"Unknown action: {action}")

        user_id = str(user_id)
        args = [str(a) for a in args]

        expected = messages.ARITY.get(action)
        if expected is not None and len(args) != expected:
            return messages.USAGE[action]

        try:
            return await handler(user_id, args, notify)
        except NodeRejected as e:
            self._audit(AuditEventType.CHAIN_UNAVAILABLE, user_id, f"{action}: {e}", AuditSeverity.WARNING)
            return messages.node_rejected()
        except ChainUnavailable as e:
            self._audit(AuditEventType.CHAIN_UNAVAILABLE, user_id, f"{action}: {e}", AuditSeverity.WARNING)
            return messages.chain_unavailable()
        except ContractRejected as e:
            self._audit(AuditEventType.CONTRACT_REJECTED, user_id, f"{action}: {e}", AuditSeverity.WARNING)
            return messages.contract_rejected(e.reason)
        except WalletCorrupted as e:
            logger.critical(f"[WALLET] {e}")
            return messages.wallet_corrupted()

    def _audit(self, event_type, user_id: str, details: str, severity=AuditSeverity.INFO):
        if self.audit is not None:
            self.audit.log(event_type, severity=severity, user_id=user_id, details=details)

    @asynccontextmanager
    async def _wallet_lock(self, address: str):
        """Hold the wallet's lock. The lock is dropped once nobody holds or awaits it."""
        lock = self._wallet_locks.get(address)
        if lock is None:
            lock = self._wallet_locks[address] = asyncio.Lock()
        self._lock_users[address] = self._lock_users.get(address, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[address] -= 1
            if self._lock_users[address] == 0:
                del self._lock_users[address]
                del self._wallet_locks[address]

    def _rejected(self, user_id: str, kind: ActionKind, rejected: Rejected) -> str:
        self._audit(
            AuditEventType.PREFLIGHT_REJECTED,
            user_id,
            f"{kind.value}: {rejected.reason.value}",
        )
        return messages.rejection(rejected)

    # ===== WALLET =====

    async def create_wallet(self, user_id: str, args, notify) -> str:
        try:
            wallet = self.store.create(user_id)
        except WalletAlreadyExists:
            return messages.wallet_exists()

        self._audit(AuditEventType.WALLET_CREATED, user_id, f"address={wallet.address}")
        return messages.wallet_created(wallet.address, self.store.reveal_secret(wallet))

    async def deposit(self, user_id: str, args, notify) -> str:
        wallet = self.store.get(user_id)
        if wallet is None:
            return messages.no_wallet()
        return messages.deposit(wallet.address)

    async def my_wallet(self, user_id: str, args, notify) -> str:
        wallet = self.store.get(user_id)
        if wallet is None:
            return messages.no_wallet()
        balance = await self.gateway.get_balance(wallet.address)
        return messages.wallet_info(wallet.address, balance)

    async def balance(self, user_id: str, args, notify) -> str:
        wallet = self.store.get(user_id)
        if wallet is None:
            return messages.no_wallet()
        balance = await self.gateway.get_balance(wallet.address)
        stats = await self.gateway.player_stats(wallet.address)
        return messages.balance_stats(balance, stats)

    # ===== FUNDS-MOVING ACTIONS =====

    async def withdraw(self, user_id: str, args, notify) -> str:
        wallet = self.store.get(user_id)
        if wallet is None:
            return self._rejected(user_id, ActionKind.WITHDRAW, Rejected(RejectReason.NO_WALLET))

        try:
            amount = parse_amount(args[0], allow_all=True)
        except ValueError as e:
            return self._rejected(user_id, ActionKind.WITHDRAW, Rejected(RejectReason.INVALID_AMOUNT, {"error": str(e)}))
        destination = args[1].strip()

        async with self._wallet_lock(wallet.address):
            result = await validate_withdraw(self.gateway, wallet, amount, destination)
            if isinstance(result, Rejected):
                return self._rejected(user_id, ActionKind.WITHDRAW, result)

            async def on_submitted(tx_hash: str):
                self._audit(
                    AuditEventType.WITHDRAWAL_SUBMITTED,
                    user_id,
                    f"amount={result.amount} to={result.action.extra} tx={tx_hash}",
                )
                if notify is not None:
                    await notify(messages.withdraw_sent(result.amount, result.action.extra, tx_hash))

            receipt, reply = await self._execute(user_id, wallet, result, on_submitted)
            if reply is not None:
                return reply

        tx_hash = _receipt_hash(receipt)
        logger.info(f"[WITHDRAW] user={user_id} {result.amount} wei to {result.action.extra} confirmed: {tx_hash}")
        self._audit(AuditEventType.WITHDRAWAL_CONFIRMED, user_id, f"amount={result.amount} tx={tx_hash}")

        try:
            new_balance = await self.gateway.get_balance(wallet.address)
        except ChainUnavailable:
            new_balance = None

        return messages.withdraw_success(result.amount, result.action.extra, new_balance, tx_hash)

    async def bet(self, user_id: str, args, notify) -> str:
        wallet = self.store.get(user_id)
        if wallet is None:
            return self._rejected(user_id, ActionKind.BET, Rejected(RejectReason.NO_WALLET))

        try:
            amount = parse_amount(args[0])
        except ValueError as e:
            return self._rejected(user_id, ActionKind.BET, Rejected(RejectReason.INVALID_AMOUNT, {"error": str(e)}))
        try:
            chance = parse_chance(args[1])
        except ValueError as e:
            return self._rejected(user_id, ActionKind.BET, Rejected(RejectReason.CHANCE_OUT_OF_RANGE, {"error": str(e)}))

        async with self._wallet_lock(wallet.address):
            result = await validate_bet(self.gateway, wallet, amount, chance)
            if isinstance(result, Rejected):
                return self._rejected(user_id, ActionKind.BET, result)

            async def on_submitted(tx_hash: str):
                self._audit(
                    AuditEventType.BET_SUBMITTED,
                    user_id,
                    f"amount={amount} chance={chance} tx={tx_hash}",
                )
                if notify is not None:
                    await notify(messages.bet_sent(amount, chance, result.expected_payout, tx_hash))

            receipt, reply = await self._execute(user_id, wallet, result, on_submitted)
            if reply is not None:
                return reply

        tx_hash = _receipt_hash(receipt)
        outcome = decode_bet_outcome(self.gateway.contract, receipt)
        logger.info(f"[BET] user={user_id} bet {amount} wei at {chance}% settled: {tx_hash}")
        if outcome is None:
            self._audit(AuditEventType.DECODE_MISMATCH, user_id, f"tx={tx_hash}", AuditSeverity.WARNING)
            return messages.bet_no_event(tx_hash)

        self._audit(
            AuditEventType.BET_SETTLED,
            user_id,
            f"bet_id={outcome.bet_id} roll={outcome.roll} won={outcome.won} payout={outcome.payout} tx={tx_hash}",
        )
        return messages.bet_result(outcome)

    async def _execute(self, user_id: str, wallet: Wallet, authorized: Authorized, on_submitted):
        """Run the executor. Returns (receipt, None), or (None, reply) when the
        transaction was broadcast but did not settle cleanly."""
        try:
            receipt = await self.executor.execute(wallet, authorized, on_submitted=on_submitted)
        except TransactionReverted as e:
            self._audit(AuditEventType.TX_REVERTED, user_id, f"tx={e.tx_hash}", AuditSeverity.WARNING)
            return None, messages.reverted(e.tx_hash)
        except BroadcastInterrupted as e:
            self._audit(AuditEventType.TX_TIMEOUT, user_id, f"tx={e.tx_hash} broadcast interrupted", AuditSeverity.WARNING)
            return None, messages.broadcast_interrupted(e.tx_hash)
        except ConfirmationTimeout as e:
            self._audit(AuditEventType.TX_TIMEOUT, user_id, f"tx={e.tx_hash}", AuditSeverity.WARNING)
            return None, messages.timeout(e.tx_hash)
        return receipt, None

    # ===== READ-ONLY =====

    async def my_bets(self, user_id: str, args, notify) -> str:
        wallet = self.store.get(user_id)
        if wallet is None:
            return messages.no_wallet()

        bet_ids = await self.gateway.player_bets(wallet.address)
        if not bet_ids:
            return messages.no_bets()

        latest = bet_ids[-BET_HISTORY_LIMIT:]
        records = [await self.gateway.bet_details(bet_id) for bet_id in reversed(latest)]
        return messages.bet_history(records, total=len(bet_ids))

    async def calc(self, user_id: str, args, notify) -> str:
        try:
            amount = parse_amount(args[0])
        except ValueError as e:
            return messages.rejection(Rejected(RejectReason.INVALID_AMOUNT, {"error": str(e)}))
        try:
            chance = parse_chance(args[1])
        except ValueError as e:
            return messages.rejection(Rejected(RejectReason.CHANCE_OUT_OF_RANGE, {"error": str(e)}))

        if chance < MIN_CHANCE or chance > MAX_CHANCE:
            return messages.rejection(Rejected(RejectReason.CHANCE_OUT_OF_RANGE, {"chance": chance}))

        quote = await quote_bet(self.gateway, amount, chance)
        contract_balance = await self.gateway.contract_balance()
        return messages.calc_quote(quote, contract_balance)

    async def rules(self, user_id: str, args, notify) -> str:
        return messages.rules()


def _receipt_hash(receipt) -> str:
    return to_hex_hash(receipt["transactionHash"])
