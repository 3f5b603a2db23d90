"""
DiceCasino contract ABI.

Only the surface the bot uses. A full Hardhat artifact can be supplied
through CASINO_ABI_PATH instead.
"""
import json
from pathlib import Path
from typing import List

from web3 import Web3

BET_PLACED_EVENT = "BetPlaced"
BET_PLACED_SIGNATURE = "BetPlaced(uint256,address,uint256,uint256,uint256,bool,uint256)"
BET_PLACED_TOPIC = Web3.keccak(text=BET_PLACED_SIGNATURE)


def _view(name: str, inputs: List[dict], outputs: List[dict]) -> dict:
    return {
        "type": "function",
        "name": name,
        "stateMutability": "view",
        "inputs": inputs,
        "outputs": outputs,
    }


def _uint(name: str = "") -> dict:
    return {"name": name, "type": "uint256", "internalType": "uint256"}


DICE_CASINO_ABI = [
    _view("minBet", [], [_uint()]),
    _view("maxBet", [], [_uint()]),
    _view("getMaxPayout", [], [_uint()]),
    _view("calculatePayout", [_uint("amount"), _uint("chance")], [_uint()]),
    _view(
        "playerStats",
        [{"name": "", "type": "address", "internalType": "address"}],
        [_uint("totalBets"), _uint("totalWagered"), _uint("totalPayout")],
    ),
    _view(
        "getPlayerBets",
        [{"name": "player", "type": "address", "internalType": "address"}],
        [{"name": "", "type": "uint256[]", "internalType": "uint256[]"}],
    ),
    _view(
        "getBetDetails",
        [_uint("betId")],
        [
            {"name": "player", "type": "address", "internalType": "address"},
            _uint("amount"),
            _uint("chance"),
            _uint("outcome"),
            {"name": "won", "type": "bool", "internalType": "bool"},
            _uint("payout"),
            _uint("timestamp"),
        ],
    ),
    {
        "type": "function",
        "name": "placeBet",
        "stateMutability": "payable",
        "inputs": [_uint("chance")],
        "outputs": [],
    },
    {
        "type": "event",
        "name": BET_PLACED_EVENT,
        "anonymous": False,
        "inputs": [
            {"name": "betId", "type": "uint256", "indexed": True, "internalType": "uint256"},
            {"name": "player", "type": "address", "indexed": True, "internalType": "address"},
            {"name": "amount", "type": "uint256", "indexed": False, "internalType": "uint256"},
            {"name": "chance", "type": "uint256", "indexed": False, "internalType": "uint256"},
            {"name": "outcome", "type": "uint256", "indexed": False, "internalType": "uint256"},
            {"name": "won", "type": "bool", "indexed": False, "internalType": "bool"},
            {"name": "payout", "type": "uint256", "indexed": False, "internalType": "uint256"},
        ],
    },
]


def load_abi(path: str) -> list:
    """Load the ABI from a Hardhat artifact (or a bare ABI list)."""
    data = json.loads(Path(path).read_text())
    if isinstance(data, dict):
        return data["abi"]
    return data
