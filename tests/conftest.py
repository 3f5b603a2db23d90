"""Shared fixtures: temp wallet store, in-memory chain gateway, receipt builders."""
import pytest
from eth_abi import encode
from hexbytes import HexBytes
from web3 import AsyncWeb3, Web3

from casino.abi import BET_PLACED_TOPIC, DICE_CASINO_ABI
from casino.errors import ChainUnavailable
from casino.models import BetRecord, PlayerStats
from database import WalletStore
from security import AuditLogger
from utils import generate_encryption_key

CASINO_ADDRESS = Web3.to_checksum_address("0x68f4c2c51464d25d5a50e995af55775534a21d29")
OTHER_ADDRESS = Web3.to_checksum_address("0x" + "ab" * 20)
DESTINATION = Web3.to_checksum_address("0x" + "12" * 20)
TX_HASH = "0x" + "cd" * 32

ETHER = 10 ** 18
GWEI = 10 ** 9


def make_contract(address: str = CASINO_ADDRESS):
    """Real web3 contract object; never touches the network."""
    w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider("http://127.0.0.1:8545"))
    return w3.eth.contract(address=address, abi=DICE_CASINO_ABI)


def bet_placed_log(
    bet_id=7,
    player=OTHER_ADDRESS,
    amount=ETHER // 10,
    chance=45,
    outcome=30,
    won=True,
    payout=217_777_777_777_777_777,
    address=CASINO_ADDRESS,
    log_index=0,
    topic0=BET_PLACED_TOPIC,
):
    return {
        "address": address,
        "topics": [
            HexBytes(topic0),
            HexBytes(encode(["uint256"], [bet_id])),
            HexBytes(encode(["address"], [player])),
        ],
        "data": HexBytes(
            encode(
                ["uint256", "uint256", "uint256", "bool", "uint256"],
                [amount, chance, outcome, won, payout],
            )
        ),
        "blockHash": HexBytes("0x" + "11" * 32),
        "blockNumber": 100,
        "transactionHash": HexBytes(TX_HASH),
        "transactionIndex": 0,
        "logIndex": log_index,
        "removed": False,
    }


def foreign_log(log_index=0):
    """Transfer-like event from an unrelated contract."""
    return {
        "address": OTHER_ADDRESS,
        "topics": [HexBytes(Web3.keccak(text="Transfer(address,address,uint256)"))],
        "data": HexBytes(encode(["uint256"], [5])),
        "blockHash": HexBytes("0x" + "11" * 32),
        "blockNumber": 100,
        "transactionHash": HexBytes(TX_HASH),
        "transactionIndex": 0,
        "logIndex": log_index,
        "removed": False,
    }


def make_receipt(logs=None, status=1, tx_hash=TX_HASH):
    return {
        "status": status,
        "transactionHash": HexBytes(tx_hash),
        "blockNumber": 100,
        "logs": logs or [],
    }


class FakeGateway:
    """In-memory ChainGateway. Records every read and write by name."""

    def __init__(
        self,
        balance=ETHER,
        gas_price=5 * GWEI,
        min_bet=ETHER // 100,
        max_bet=ETHER,
        max_payout=5 * ETHER,
        payout=None,
    ):
        self.balances = {}
        self.default_balance = balance
        self.gas_price = gas_price
        self.limits = {"min_bet": min_bet, "max_bet": max_bet, "max_payout": max_payout}
        self.payout = payout
        self.casino_address = CASINO_ADDRESS
        self.contract = make_contract()
        self.chain_id = 97
        self.nonce = 0

        self.stats = PlayerStats(0, 0, 0)
        self.bets = {}  # address -> [BetRecord]

        self.receipt = make_receipt(logs=[bet_placed_log()])
        self.confirmation_error = None
        self.submit_error = None
        self.unavailable = False

        self.reads = []
        self.writes = []
        self.submitted = []

    def _read(self, name):
        if self.unavailable:
            raise ChainUnavailable(f"{name} failed (ClientConnectorError)", name)
        self.reads.append(name)

    @property
    def contract_reads(self):
        return [r for r in self.reads if r in ("min_bet", "max_bet", "max_payout", "calculate_payout")]

    async def get_balance(self, address):
        self._read("get_balance")
        return self.balances.get(address, self.default_balance)

    async def get_fee_rate(self):
        self._read("get_fee_rate")
        return self.gas_price

    async def get_nonce(self, address):
        self._read("get_nonce")
        return self.nonce

    async def get_chain_id(self):
        return self.chain_id

    async def min_bet(self):
        self._read("min_bet")
        return self.limits["min_bet"]

    async def max_bet(self):
        self._read("max_bet")
        return self.limits["max_bet"]

    async def max_payout(self):
        self._read("max_payout")
        return self.limits["max_payout"]

    async def calculate_payout(self, amount, chance):
        self._read("calculate_payout")
        if self.payout is not None:
            return self.payout
        return amount * 98 // chance

    async def player_stats(self, address):
        self._read("player_stats")
        return self.stats

    async def player_bets(self, address):
        self._read("player_bets")
        return [bet.bet_id for bet in self.bets.get(address, [])]

    async def bet_details(self, bet_id):
        self._read("bet_details")
        for records in self.bets.values():
            for bet in records:
                if bet.bet_id == bet_id:
                    return bet
        return BetRecord(bet_id, 0, 0, 0, False, 0)

    async def contract_balance(self):
        return await self.get_balance(self.casino_address)

    async def build_bet_transaction(self, chance, tx_params):
        self.writes.append("build_bet_transaction")
        return {
            **tx_params,
            "to": self.casino_address,
            "data": self.contract.encode_abi("placeBet", args=[chance]),
        }

    async def submit(self, raw_transaction):
        self.writes.append("submit")
        if self.submit_error is not None:
            raise self.submit_error
        self.submitted.append(raw_transaction)
        return TX_HASH

    async def await_confirmation(self, tx_hash, timeout=120, poll_latency=2):
        self.writes.append("await_confirmation")
        if self.confirmation_error is not None:
            raise self.confirmation_error
        return self.receipt


@pytest.fixture
def encryption_key():
    return generate_encryption_key()


@pytest.fixture
def store(tmp_path, encryption_key):
    return WalletStore(str(tmp_path / "wallets.db"), encryption_key=encryption_key)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def audit(tmp_path):
    return AuditLogger(str(tmp_path / "audit.db"))


@pytest.fixture
def wallet(store):
    return store.create("1001")
