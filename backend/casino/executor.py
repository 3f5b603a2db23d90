"""
Transaction executor: build, sign, broadcast and confirm one transaction.
"""
import logging
from typing import Awaitable, Callable, Optional

from database.models import Wallet
from .errors import ChainUnavailable, ConfirmationTimeout
from .models import ActionKind, Authorized

logger = logging.getLogger(__name__)

SubmittedCallback = Callable[[str], Awaitable[None]]


class TransactionExecutor:
    """Executes authorized actions for custodial wallets.

    One call = one transaction. Callers must not run two executions for the
    same wallet at once (nonces are read from the node's pending count).
    """

    def __init__(self, gateway, store, confirmation_timeout: float = 120, poll_latency: float = 2):
        self.gateway = gateway
        self.store = store
        self.confirmation_timeout = confirmation_timeout
        self.poll_latency = poll_latency

    async def execute(
        self,
        wallet: Wallet,
        authorized: Authorized,
        on_submitted: Optional[SubmittedCallback] = None,
    ):
        """Sign, submit and wait for the receipt.

        Args:
            wallet: Paying wallet
            authorized: Result of preflight for this wallet
            on_submitted: Awaited with the tx hash right after broadcast

        Returns:
            The transaction receipt (status 1)

        Raises:
            ChainUnavailable / NodeRejected: before broadcast, nothing sent
            TransactionReverted: mined and failed
            ConfirmationTimeout: broadcast, outcome unknown
            BroadcastInterrupted: broadcast request cut off, outcome unknown
            ContractRejected: the contract refused the bet while building, nothing sent
        """
        action = authorized.action
        tx = await self._build(wallet, authorized)
        raw_transaction = self._sign(wallet, tx)

        tx_hash = await self.gateway.submit(raw_transaction)
        logger.info(f"[TX] {action.kind.value} {action.amount} wei from {wallet.address} sent: {tx_hash}")

        if on_submitted is not None:
            try:
                await on_submitted(tx_hash)
            except Exception as notify_error:
                logger.warning(f"[TX] Failed to send progress message for {tx_hash}: {notify_error}")

        try:
            return await self.gateway.await_confirmation(
                tx_hash,
                timeout=self.confirmation_timeout,
                poll_latency=self.poll_latency,
            )
        except ConfirmationTimeout:
            raise
        except ChainUnavailable as e:
            # Already broadcast: losing the node now leaves the outcome unknown
            logger.warning(f"[TX] Lost track of {tx_hash}: {e}")
            raise ConfirmationTimeout(tx_hash, self.confirmation_timeout) from e

    async def _build(self, wallet: Wallet, authorized: Authorized) -> dict:
        action = authorized.action
        params = {
            "value": action.amount,
            "gas": authorized.fee.gas_limit,
            "gasPrice": authorized.fee.gas_price,
            "nonce": await self.gateway.get_nonce(wallet.address),
            "chainId": await self.gateway.get_chain_id(),
        }

        if action.kind == ActionKind.WITHDRAW:
            return {**params, "to": action.extra}

        return await self.gateway.build_bet_transaction(action.extra, {**params, "from": wallet.address})

    def _sign(self, wallet: Wallet, tx: dict) -> bytes:
        """Sign with the wallet key; the key does not outlive this call."""
        account = self.store.load_account(wallet)
        try:
            signed = account.sign_transaction(tx)
        finally:
            del account
        return bytes(signed.raw_transaction)
