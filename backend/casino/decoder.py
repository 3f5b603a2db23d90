"""
Bet outcome decoding from transaction receipts.
"""
import logging
from typing import Optional

from eth_abi.exceptions import DecodingError
from web3 import Web3
from web3.exceptions import LogTopicError, MismatchedABI

from .abi import BET_PLACED_EVENT, BET_PLACED_TOPIC
from .chain import to_hex_hash
from .models import BetOutcome

logger = logging.getLogger(__name__)

DECODE_ERRORS = (MismatchedABI, LogTopicError, DecodingError)


def _first_topic(log) -> Optional[bytes]:
    topics = log.get("topics") or []
    if not topics:
        return None
    topic = topics[0]
    if isinstance(topic, str):
        return bytes(Web3.to_bytes(hexstr=topic))
    return bytes(topic)


def decode_bet_outcome(contract, receipt) -> Optional[BetOutcome]:
    """Extract the bet result from a confirmed placeBet() receipt.

    Logs from other contracts, other events and entries that fail to decode
    are skipped. The first BetPlaced entry wins.

    Returns:
        BetOutcome, or None if the receipt holds no BetPlaced event
    """
    event = getattr(contract.events, BET_PLACED_EVENT)()
    casino_address = Web3.to_checksum_address(contract.address)
    tx_hash = receipt.get("transactionHash")
    tx_hash = to_hex_hash(tx_hash) if tx_hash is not None else None

    for log in receipt.get("logs", []):
        address = log.get("address")
        if not address or Web3.to_checksum_address(address) != casino_address:
            continue

        if _first_topic(log) != bytes(BET_PLACED_TOPIC):
            continue

        try:
            decoded = event.process_log(log)
        except DECODE_ERRORS as e:
            logger.debug(f"[DECODE] Skipping undecodable log {log.get('logIndex')}: {e}")
            continue

        args = decoded["args"]
        outcome = BetOutcome(
            bet_amount=int(args["amount"]),
            chance=int(args["chance"]),
            won=bool(args["won"]),
            roll=int(args["outcome"]),
            payout=int(args["payout"]),
            bet_id=int(args["betId"]),
            tx_hash=tx_hash,
        )
        logger.info(f"[DECODE] Bet {outcome.bet_id}: roll {outcome.roll}, won={outcome.won}, payout {outcome.payout}")
        return outcome

    logger.warning(f"[DECODE] No {BET_PLACED_EVENT} event in receipt {tx_hash}")
    return None
