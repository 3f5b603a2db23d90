import asyncio
import json

import aiohttp
import pytest
from eth_account import Account
from hexbytes import HexBytes
from web3.exceptions import ContractLogicError, TimeExhausted, Web3RPCError

from casino.abi import BET_PLACED_SIGNATURE, BET_PLACED_TOPIC, DICE_CASINO_ABI, load_abi
from casino.chain import ChainGateway, _unpack, to_hex_hash
from casino.errors import (
    BroadcastInterrupted,
    ChainUnavailable,
    ConfirmationTimeout,
    ContractRejected,
    ErrorKind,
    NodeRejected,
    TransactionReverted,
)
from conftest import CASINO_ADDRESS, DESTINATION, GWEI, TX_HASH


def test_to_hex_hash_always_prefixed():
    raw = "ab" * 32
    assert to_hex_hash(raw) == "0x" + raw
    assert to_hex_hash("0x" + raw) == "0x" + raw
    assert to_hex_hash(HexBytes("0x" + raw)) == "0x" + raw


def test_unpack_struct_wrapped_results():
    assert _unpack([(1, 2, 3)]) == (1, 2, 3)
    assert _unpack((1, 2, 3)) == (1, 2, 3)


def test_event_topic_matches_signature():
    assert BET_PLACED_SIGNATURE == "BetPlaced(uint256,address,uint256,uint256,uint256,bool,uint256)"
    assert len(bytes(BET_PLACED_TOPIC)) == 32


def test_load_abi_from_artifact_or_list(tmp_path):
    artifact = tmp_path / "DiceCasino.json"
    artifact.write_text(json.dumps({"contractName": "DiceCasino", "abi": DICE_CASINO_ABI}))
    bare = tmp_path / "abi.json"
    bare.write_text(json.dumps(DICE_CASINO_ABI))

    assert load_abi(str(artifact)) == DICE_CASINO_ABI
    assert load_abi(str(bare)) == DICE_CASINO_ABI


def test_gateway_checksums_casino_address():
    gateway = ChainGateway("http://127.0.0.1:1", CASINO_ADDRESS.lower(), chain_id=97)

    assert gateway.casino_address == CASINO_ADDRESS
    assert gateway.contract.address == CASINO_ADDRESS


async def test_unreachable_node_is_chain_unavailable():
    gateway = ChainGateway("http://127.0.0.1:1", CASINO_ADDRESS, request_timeout=2)

    with pytest.raises(ChainUnavailable) as exc_info:
        await gateway.get_balance(CASINO_ADDRESS)

    assert exc_info.value.kind == ErrorKind.CHAIN_UNAVAILABLE
    assert exc_info.value.operation == "get_balance"
    assert not isinstance(exc_info.value, NodeRejected)


async def test_cached_chain_id_needs_no_request():
    gateway = ChainGateway("http://127.0.0.1:1", CASINO_ADDRESS, chain_id=97)

    assert await gateway.get_chain_id() == 97


async def test_bet_details_keyed_by_output_name(monkeypatch):
    gateway = ChainGateway("http://127.0.0.1:1", CASINO_ADDRESS, chain_id=97)
    player = "0x" + "12" * 20

    async def fake_call(method, *args):
        assert method == "getBetDetails"
        return [player, 10 ** 17, 45, 30, True, 2 * 10 ** 17, 1700000000]

    monkeypatch.setattr(gateway, "call_contract", fake_call)

    bet = await gateway.bet_details(4)

    assert (bet.bet_id, bet.amount, bet.chance, bet.outcome, bet.won, bet.payout) == (
        4, 10 ** 17, 45, 30, True, 2 * 10 ** 17,
    )


async def test_player_stats_from_struct_return(monkeypatch):
    abi = [entry for entry in DICE_CASINO_ABI if entry.get("name") != "playerStats"] + [{
        "type": "function",
        "name": "playerStats",
        "stateMutability": "view",
        "inputs": [{"name": "", "type": "address"}],
        "outputs": [{
            "name": "",
            "type": "tuple",
            "components": [
                {"name": "totalBets", "type": "uint256"},
                {"name": "totalWagered", "type": "uint256"},
                {"name": "totalPayout", "type": "uint256"},
            ],
        }],
    }]
    gateway = ChainGateway("http://127.0.0.1:1", CASINO_ADDRESS, abi=abi, chain_id=97)

    async def fake_call(method, *args):
        return [(3, 10 ** 18, 5 * 10 ** 17)]

    monkeypatch.setattr(gateway, "call_contract", fake_call)

    stats = await gateway.player_stats(CASINO_ADDRESS)

    assert (stats.total_bets, stats.total_wagered, stats.total_payout) == (3, 10 ** 18, 5 * 10 ** 17)
    assert stats.net_result == -5 * 10 ** 17


# ===== BROADCAST AND CONFIRMATION =====

def offline_gateway():
    return ChainGateway("http://127.0.0.1:1", CASINO_ADDRESS, chain_id=97, request_timeout=2)


def signed_transfer():
    return Account.create().sign_transaction({
        "to": DESTINATION,
        "value": 10 ** 17,
        "gas": 21_000,
        "gasPrice": 5 * GWEI,
        "nonce": 0,
        "chainId": 97,
    })


async def test_submit_returns_node_hash(monkeypatch):
    gateway = offline_gateway()
    signed = signed_transfer()

    async def accept(raw):
        return HexBytes(signed.hash)

    monkeypatch.setattr(gateway.w3.eth, "send_raw_transaction", accept)

    assert await gateway.submit(bytes(signed.raw_transaction)) == to_hex_hash(signed.hash)


@pytest.mark.parametrize("error", [asyncio.TimeoutError(), aiohttp.ServerDisconnectedError()])
async def test_submit_cut_off_in_flight_is_unknown_outcome(monkeypatch, error):
    gateway = offline_gateway()
    signed = signed_transfer()

    async def cut_off(raw):
        raise error

    monkeypatch.setattr(gateway.w3.eth, "send_raw_transaction", cut_off)

    with pytest.raises(BroadcastInterrupted) as exc_info:
        await gateway.submit(bytes(signed.raw_transaction))

    assert isinstance(exc_info.value, ConfirmationTimeout)
    assert not isinstance(exc_info.value, ChainUnavailable)
    assert exc_info.value.kind == ErrorKind.TIMEOUT
    assert exc_info.value.tx_hash == to_hex_hash(signed.hash)


async def test_submit_refused_connection_sends_nothing():
    gateway = offline_gateway()

    with pytest.raises(ChainUnavailable) as exc_info:
        await gateway.submit(bytes(signed_transfer().raw_transaction))

    assert exc_info.value.kind == ErrorKind.CHAIN_UNAVAILABLE
    assert exc_info.value.operation == "submit"


async def test_submit_node_error_is_rejection(monkeypatch):
    gateway = offline_gateway()

    async def refuse(raw):
        raise Web3RPCError("nonce too low")

    monkeypatch.setattr(gateway.w3.eth, "send_raw_transaction", refuse)

    with pytest.raises(NodeRejected) as exc_info:
        await gateway.submit(bytes(signed_transfer().raw_transaction))

    assert exc_info.value.kind == ErrorKind.NODE_REJECTED
    assert "nonce too low" in str(exc_info.value)


async def test_no_receipt_in_time_is_confirmation_timeout(monkeypatch):
    gateway = offline_gateway()

    async def never_mined(tx_hash, timeout=120, poll_latency=0.1):
        raise TimeExhausted(f"Transaction {tx_hash} is not in the chain after {timeout} seconds")

    monkeypatch.setattr(gateway.w3.eth, "wait_for_transaction_receipt", never_mined)

    with pytest.raises(ConfirmationTimeout) as exc_info:
        await gateway.await_confirmation(TX_HASH, timeout=5, poll_latency=1)

    assert exc_info.value.kind == ErrorKind.TIMEOUT
    assert exc_info.value.tx_hash == TX_HASH
    assert exc_info.value.timeout == 5
    assert not isinstance(exc_info.value, BroadcastInterrupted)


async def test_status_zero_receipt_is_reverted(monkeypatch):
    gateway = offline_gateway()

    async def mined_failed(tx_hash, timeout=120, poll_latency=0.1):
        return {"status": 0, "blockNumber": 12, "transactionHash": HexBytes(tx_hash)}

    monkeypatch.setattr(gateway.w3.eth, "wait_for_transaction_receipt", mined_failed)

    with pytest.raises(TransactionReverted) as exc_info:
        await gateway.await_confirmation(TX_HASH)

    assert exc_info.value.kind == ErrorKind.REVERTED
    assert exc_info.value.tx_hash == TX_HASH


async def test_status_one_receipt_is_returned(monkeypatch):
    gateway = offline_gateway()
    receipt = {"status": 1, "blockNumber": 12, "transactionHash": HexBytes(TX_HASH)}

    async def mined(tx_hash, timeout=120, poll_latency=0.1):
        return receipt

    monkeypatch.setattr(gateway.w3.eth, "wait_for_transaction_receipt", mined)

    assert await gateway.await_confirmation(TX_HASH) is receipt


# ===== CONTRACT REVERTS =====

async def test_view_call_revert_is_contract_rejection(monkeypatch):
    gateway = offline_gateway()

    async def reverting_call(*args, **kwargs):
        raise ContractLogicError("execution reverted: Betting is paused")

    monkeypatch.setattr(gateway.w3.eth, "call", reverting_call)

    with pytest.raises(ContractRejected) as exc_info:
        await gateway.min_bet()

    assert exc_info.value.kind == ErrorKind.CONTRACT_REJECTED
    assert exc_info.value.operation == "minBet"
    assert exc_info.value.reason == "execution reverted: Betting is paused"
    assert not isinstance(exc_info.value, ChainUnavailable)
