"""
Reply texts for the Dice Casino bot.

Plain text only; every outcome of a funds-moving action says whether
anything happened on-chain.
"""
from typing import List, Optional

from casino.models import BetOutcome, BetQuote, BetRecord, PlayerStats, Rejected, RejectReason
from config import HOUSE_EDGE_PERCENT, MAX_CHANCE, MIN_CHANCE, NATIVE_SYMBOL
from utils.formatting import format_address_link, format_amount, format_tx_link, truncate_address


def _amt(wei: int) -> str:
    return f"{format_amount(wei)} {NATIVE_SYMBOL}"


WELCOME = (
    "Welcome to Dice Casino Bot! 🎲\n\n"
    "Available commands:\n"
    "/createwallet - Create your wallet\n"
    "/deposit - Get deposit address\n"
    "/withdraw - Withdraw your funds\n"
    "/mywallet - View wallet details\n"
    "/bet <amount> <chance> - Place a bet\n"
    "/mybets - View bet history\n"
    "/balance - Check balance and stats\n"
    "/calc <amount> <chance> - Preview a bet\n"
    "/rules - Game rules"
)

USAGE = {
    "withdraw": (
        "Usage: /withdraw <amount> <address>\n"
        "Example: /withdraw 0.1 0x1234...\n"
        "Use \"all\" as amount to withdraw entire balance"
    ),
    "bet": "Usage: /bet <amount> <chance>\nExample: /bet 0.1 45",
    "calc": "Usage: /calc <amount> <chance>\nExample: /calc 0.1 45",
}

ARITY = {"withdraw": 2, "bet": 2, "calc": 2}


def rules() -> str:
    return (
        "🎲 Dice Casino Rules:\n\n"
        f"1. Choose your bet amount and chance ({MIN_CHANCE}-{MAX_CHANCE})\n"
        "2. The higher your chance, the lower your potential payout\n"
        "3. If the dice roll is less than or equal to your chosen number, you win!\n"
        f"4. House edge: {HOUSE_EDGE_PERCENT}%\n\n"
        f"Example Payouts (1 {NATIVE_SYMBOL} bet):\n"
        f"- 50% chance: 1.96 {NATIVE_SYMBOL}\n"
        f"- 25% chance: 3.92 {NATIVE_SYMBOL}\n"
        f"- 10% chance: 9.8 {NATIVE_SYMBOL}\n\n"
        "🔒 Provably Fair:\n"
        "• Results are generated using blockchain data\n"
        "• Every bet can be verified on the block explorer"
    )


# ===== WALLET =====

def no_wallet() -> str:
    return "You don't have a wallet yet! Use /createwallet to create one."


def wallet_exists() -> str:
    return "You already have a wallet! Use /mywallet to view details."


def wallet_created(address: str, private_key: str) -> str:
    return (
        "Your new wallet has been created!\n\n"
        f"Address: {address}\n"
        f"Private Key: {private_key}\n\n"
        "⚠️ IMPORTANT: Save your private key securely! It will only be shown once!"
    )


def deposit(address: str) -> str:
    return (
        f"To deposit funds, send {NATIVE_SYMBOL} to your wallet address:\n\n"
        f"{address}\n\n"
        "Your balance will update automatically after the transaction is confirmed."
    )


def wallet_info(address: str, balance: int) -> str:
    return (
        f"Wallet Address: {address}\n"
        f"Current Balance: {_amt(balance)}\n\n"
        f"🔍 {format_address_link(address)}"
    )


def balance_stats(balance: int, stats: PlayerStats) -> str:
    net = stats.net_result
    sign = "-" if net < 0 else ""
    return (
        f"💰 Balance: {_amt(balance)}\n"
        f"🎲 Total Bets: {stats.total_bets}\n"
        f"💸 Total Wagered: {_amt(stats.total_wagered)}\n"
        f"💵 Total Payouts: {_amt(stats.total_payout)}\n"
        f"📊 Net Result: {sign}{_amt(abs(net))}"
    )


# ===== REJECTIONS =====

def rejection(rejected: Rejected) -> str:
    """Explain a preflight rejection. Nothing was sent in any of these cases."""
    d = rejected.details
    reason = rejected.reason

    if reason == RejectReason.NO_WALLET:
        return no_wallet()

    if reason == RejectReason.INVALID_AMOUNT:
        return f"❌ Invalid amount: {d.get('error', 'amount must be a positive number')}"

    if reason == RejectReason.INVALID_ADDRESS:
        return f"❌ Invalid withdrawal address\n\n{d.get('error', '')}".rstrip()

    if reason == RejectReason.CHANCE_OUT_OF_RANGE:
        return f"❌ Chance must be between {MIN_CHANCE} and {MAX_CHANCE}"

    if reason == RejectReason.INSUFFICIENT_FUNDS:
        if d.get("withdraw_all"):
            return (
                "❌ Insufficient balance to cover gas fees\n\n"
                f"Your balance: {_amt(d['balance'])}\n"
                f"Estimated gas: {_amt(d['fee'])}"
            )
        return (
            "❌ Insufficient funds\n\n"
            f"Amount: {_amt(d['amount'])}\n"
            f"Estimated gas: {_amt(d['fee'])}\n"
            f"Total needed: {_amt(d['total_needed'])}\n"
            f"Your balance: {_amt(d['balance'])}"
        )

    if reason == RejectReason.BET_AMOUNT_OUT_OF_RANGE:
        return (
            "❌ Invalid bet amount\n\n"
            f"Minimum: {_amt(d['min_bet'])}\n"
            f"Maximum: {_amt(d['max_bet'])}"
        )

    if reason == RejectReason.PAYOUT_TOO_HIGH:
        return (
            "❌ Potential payout exceeds maximum\n\n"
            f"Your payout: {_amt(d['payout'])}\n"
            f"Maximum allowed: {_amt(d['max_payout'])}\n\n"
            "Try reducing your bet amount or increasing your chance"
        )

    return f"❌ Request rejected: {reason.value}"


# ===== FAILURES =====

def chain_unavailable() -> str:
    return (
        "❌ Network error: could not reach the blockchain.\n\n"
        "Nothing was sent and no funds moved. Please try again in a moment."
    )


def node_rejected() -> str:
    return (
        "❌ Transaction rejected by the network.\n\n"
        "Nothing was sent and no funds moved. Please try again."
    )


def contract_rejected(reason: str) -> str:
    return (
        "❌ The casino contract refused the request.\n\n"
        f"{reason}\n\n"
        "Nothing was sent and no funds moved."
    )


def wallet_corrupted() -> str:
    return "❌ Your wallet could not be unlocked. Nothing was sent. Please contact support."


def reverted(tx_hash: str) -> str:
    return (
        "❌ Transaction failed on-chain.\n\n"
        "It was mined but reverted: your funds stayed in your wallet, "
        "but the gas fee was spent.\n\n"
        f"🔍 {format_tx_link(tx_hash)}"
    )


def timeout(tx_hash: str) -> str:
    return (
        "⏳ Transaction sent, but confirmation is taking longer than expected.\n\n"
        "The result is UNKNOWN: it may still succeed. Do not resend; "
        "check the status on the explorer and use /balance or /mybets later.\n\n"
        f"🔍 {format_tx_link(tx_hash)}"
    )


def broadcast_interrupted(tx_hash: str) -> str:
    return (
        "⏳ The connection to the network dropped while your transaction was being sent.\n\n"
        "The result is UNKNOWN: the network may have received it. Do not resend; "
        "check the status on the explorer and use /balance or /mybets later.\n\n"
        f"🔍 {format_tx_link(tx_hash)}"
    )


# ===== WITHDRAW =====

def withdraw_sent(amount: int, destination: str, tx_hash: str) -> str:
    return (
        f"💸 Withdrawing {_amt(amount)} to {truncate_address(destination)}...\n\n"
        "Transaction sent, waiting for confirmation...\n"
        f"🔍 {format_tx_link(tx_hash)}"
    )


def withdraw_success(amount: int, destination: str, new_balance: Optional[int], tx_hash: str) -> str:
    balance_line = _amt(new_balance) if new_balance is not None else "unavailable (check /mywallet)"
    return (
        "✅ Withdrawal successful!\n\n"
        f"Amount: {_amt(amount)}\n"
        f"To: {destination}\n"
        f"New balance: {balance_line}\n\n"
        f"🔍 {format_tx_link(tx_hash)}"
    )


# ===== BET =====

def bet_sent(amount: int, chance: int, payout: Optional[int], tx_hash: str) -> str:
    msg = (
        "🎲 Placing your bet...\n\n"
        f"Amount: {_amt(amount)}\n"
        f"Chance: {chance}%\n"
    )
    if payout is not None:
        msg += f"Potential win: {_amt(payout)}\n"
    msg += f"\nTransaction sent, waiting for confirmation...\n🔍 {format_tx_link(tx_hash)}"
    return msg


def bet_result(outcome: BetOutcome) -> str:
    if outcome.won:
        msg = (
            "🎉 You won!\n\n"
            f"Dice roll: {outcome.roll}\n"
            f"Payout: {_amt(outcome.payout)}"
        )
    else:
        msg = (
            "😢 You lost\n\n"
            f"Dice roll: {outcome.roll}\n"
            "Better luck next time!"
        )
    if outcome.tx_hash:
        msg += f"\n\n🔍 {format_tx_link(outcome.tx_hash)}"
    return msg


def bet_no_event(tx_hash: str) -> str:
    return (
        "✅ Your bet transaction was confirmed, but its result could not be read "
        "from the receipt.\n\n"
        "Use /mybets to see the outcome.\n\n"
        f"🔍 {format_tx_link(tx_hash)}"
    )


def no_bets() -> str:
    return "You haven't placed any bets yet!"


def bet_history(records: List[BetRecord], total: int) -> str:
    msg = "Your Bet History:\n\n"
    if total > len(records):
        msg = f"Your Bet History (latest {len(records)} of {total}):\n\n"

    for bet in records:
        result = f"Won (Payout: {_amt(bet.payout)})" if bet.won else "Lost"
        msg += (
            f"Bet ID {bet.bet_id}:\n"
            f"Amount: {_amt(bet.amount)}\n"
            f"Chance: {bet.chance}\n"
            f"Outcome: {bet.outcome}\n"
            f"{result}\n\n"
        )
    return msg.rstrip()


def calc_quote(quote: BetQuote, contract_balance: int) -> str:
    if not quote.amount_in_range:
        side = "below minimum" if quote.amount < quote.min_bet else "above maximum"
        verdict = f"❌ Bet amount {side}!"
    elif not quote.payout_allowed:
        verdict = "❌ Potential payout exceeds maximum!"
    else:
        verdict = "✅ This bet is within all limits!"

    return (
        f"💰 Contract Balance: {_amt(contract_balance)}\n"
        f"🎯 Chance: {quote.chance}%\n"
        f"💵 Bet Amount: {_amt(quote.amount)}\n"
        f"🏆 Potential Payout: {_amt(quote.payout)}\n"
        f"📊 Max Allowed Payout: {_amt(quote.max_payout)}\n"
        f"📈 Bet Limits: {format_amount(quote.min_bet)} - {_amt(quote.max_bet)}\n\n"
        f"{verdict}"
    )
