"""
Blockchain gateway for Dice Casino.

Thin typed transport over web3: reads, contract calls, broadcast and
receipt waiting. It never retries and never interprets results. Remote
failures are re-raised by the exception type web3 or aiohttp produced:
contract reverts as ContractRejected, node error replies as NodeRejected,
transport failures as ChainUnavailable.
"""
import asyncio
import logging
from typing import Any, Awaitable, List, Optional, Sequence

import aiohttp
from web3 import AsyncWeb3, Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception, Web3RPCError

from .abi import DICE_CASINO_ABI
from .errors import (
    BroadcastInterrupted,
    ChainUnavailable,
    ConfirmationTimeout,
    ContractRejected,
    NodeRejected,
    TransactionReverted,
)
from .models import BetRecord, PlayerStats

logger = logging.getLogger(__name__)

TRANSPORT_ERRORS = (Web3Exception, aiohttp.ClientError, asyncio.TimeoutError, OSError)

# Raised before any request bytes reach the node
CONNECT_ERRORS = (aiohttp.ClientConnectorError, ConnectionRefusedError)


def to_hex_hash(tx_hash) -> str:
    text = tx_hash.hex() if hasattr(tx_hash, "hex") else str(tx_hash)
    return text if text.startswith("0x") else f"0x{text}"


def _unpack(result) -> Sequence[Any]:
    """Normalize multi-value returns; artifacts may wrap them in one struct."""
    if isinstance(result, (list, tuple)) and len(result) == 1 and isinstance(result[0], (list, tuple)):
        return result[0]
    return result


class ChainGateway:
    """Read/write access to the chain and the DiceCasino contract."""

    def __init__(
        self,
        rpc_url: str,
        casino_address: str,
        abi: Optional[list] = None,
        chain_id: Optional[int] = None,
        request_timeout: float = 30,
    ):
        provider = AsyncWeb3.AsyncHTTPProvider(
            rpc_url,
            request_kwargs={"timeout": aiohttp.ClientTimeout(total=request_timeout)},
            exception_retry_configuration=None,
        )
        self.w3 = AsyncWeb3(provider)
        self.casino_address = AsyncWeb3.to_checksum_address(casino_address)
        self._abi = abi or DICE_CASINO_ABI
        self._contract = self.w3.eth.contract(address=self.casino_address, abi=self._abi)
        self._chain_id = chain_id

    @property
    def contract(self):
        return self._contract

    async def _guard(self, operation: str, awaitable: Awaitable):
        try:
            return await awaitable
        except ContractLogicError as e:
            reason = e.message or "execution reverted"
            logger.warning(f"[CHAIN] {operation} reverted by contract: {reason}")
            raise ContractRejected(operation, reason) from e
        except TRANSPORT_ERRORS as e:
            logger.warning(f"[CHAIN] {operation} failed: {type(e).__name__}: {e}")
            raise ChainUnavailable(f"{operation} failed ({type(e).__name__})", operation) from e

    # ===== READS =====

    async def get_balance(self, address: str) -> int:
        balance = await self._guard("get_balance", self.w3.eth.get_balance(address))
        logger.info(f"[BALANCE] {address}: {balance} wei")
        return int(balance)

    async def get_fee_rate(self) -> int:
        """Current gas price in wei. Always fetched fresh."""
        return int(await self._guard("gas_price", self.w3.eth.gas_price))

    async def get_nonce(self, address: str) -> int:
        return int(await self._guard("get_nonce", self.w3.eth.get_transaction_count(address, "pending")))

    async def get_chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = int(await self._guard("chain_id", self.w3.eth.chain_id))
        return self._chain_id

    def _output_names(self, method: str) -> List[str]:
        """Output names of a view function, looking through a single struct return."""
        for entry in self._abi:
            if entry.get("type") == "function" and entry.get("name") == method:
                outputs = entry.get("outputs", [])
                if len(outputs) == 1 and outputs[0].get("components"):
                    outputs = outputs[0]["components"]
                return [output.get("name", "") for output in outputs]
        return []

    async def _call_named(self, method: str, *args) -> dict:
        """Call a multi-value view function and key the result by output name."""
        values = _unpack(await self.call_contract(method, *args))
        return dict(zip(self._output_names(method), values))

    async def call_contract(self, method: str, *args):
        """Call a view function on the casino contract."""
        fn = getattr(self._contract.functions, method)(*args)
        return await self._guard(method, fn.call())

    async def min_bet(self) -> int:
        return int(await self.call_contract("minBet"))

    async def max_bet(self) -> int:
        return int(await self.call_contract("maxBet"))

    async def max_payout(self) -> int:
        return int(await self.call_contract("getMaxPayout"))

    async def calculate_payout(self, amount: int, chance: int) -> int:
        return int(await self.call_contract("calculatePayout", amount, chance))

    async def player_stats(self, address: str) -> PlayerStats:
        stats = await self._call_named("playerStats", address)
        return PlayerStats(int(stats["totalBets"]), int(stats["totalWagered"]), int(stats["totalPayout"]))

    async def player_bets(self, address: str) -> List[int]:
        return [int(bet_id) for bet_id in await self.call_contract("getPlayerBets", address)]

    async def bet_details(self, bet_id: int) -> BetRecord:
        bet = await self._call_named("getBetDetails", bet_id)
        return BetRecord(
            bet_id=bet_id,
            amount=int(bet["amount"]),
            chance=int(bet["chance"]),
            outcome=int(bet["outcome"]),
            won=bool(bet["won"]),
            payout=int(bet["payout"]),
        )

    async def contract_balance(self) -> int:
        return await self.get_balance(self.casino_address)

    # ===== WRITES =====

    async def build_bet_transaction(self, chance: int, tx_params: dict) -> dict:
        """Unsigned placeBet() transaction with the caller's gas, value and nonce."""
        fn = self._contract.functions.placeBet(chance)
        return await self._guard("build_transaction", fn.build_transaction(tx_params))

    async def submit(self, raw_transaction: bytes) -> str:
        """Broadcast a signed transaction. Returns the tx hash.

        Raises:
            NodeRejected: the node answered with an error, nothing accepted
            ChainUnavailable: the connection was never established, nothing sent
            BroadcastInterrupted: the request failed in flight, outcome unknown
        """
        expected_hash = to_hex_hash(Web3.keccak(raw_transaction))
        try:
            tx_hash = await self.w3.eth.send_raw_transaction(raw_transaction)
        except Web3RPCError as e:
            logger.warning(f"[TX] Node rejected transaction: {e}")
            raise NodeRejected(f"Node rejected transaction: {e}", "submit") from e
        except CONNECT_ERRORS as e:
            logger.warning(f"[TX] Broadcast failed before sending: {type(e).__name__}: {e}")
            raise ChainUnavailable(f"submit failed ({type(e).__name__})", "submit") from e
        except TRANSPORT_ERRORS as e:
            logger.warning(f"[TX] Broadcast of {expected_hash} interrupted: {type(e).__name__}: {e}")
            raise BroadcastInterrupted(expected_hash, type(e).__name__) from e

        tx_hash = to_hex_hash(tx_hash)
        logger.info(f"[TX] Broadcast {tx_hash}")
        return tx_hash

    async def await_confirmation(self, tx_hash: str, timeout: float = 120, poll_latency: float = 2):
        """Block until the transaction is mined.

        Raises:
            ConfirmationTimeout: no receipt within timeout (tx may still land)
            TransactionReverted: mined with status 0
            ChainUnavailable: node failed while polling
        """
        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=timeout, poll_latency=poll_latency
            )
        except TimeExhausted:
            logger.warning(f"[TX] No receipt for {tx_hash} after {timeout}s")
            raise ConfirmationTimeout(tx_hash, timeout)
        except TRANSPORT_ERRORS as e:
            logger.warning(f"[TX] Polling receipt for {tx_hash} failed: {type(e).__name__}: {e}")
            raise ChainUnavailable(f"receipt polling failed ({type(e).__name__})", "await_confirmation") from e

        if receipt.get("status") != 1:
            logger.warning(f"[TX] {tx_hash} reverted in block {receipt.get('blockNumber')}")
            raise TransactionReverted(tx_hash)

        logger.info(f"[TX] {tx_hash} confirmed in block {receipt.get('blockNumber')}")
        return receipt
