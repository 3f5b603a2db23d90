#!/usr/bin/env python3
"""
Verify the Dice Casino setup before running the bot with real funds.
"""
import os
import sys
import asyncio
import tempfile
from pathlib import Path
from dotenv import load_dotenv

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent / "backend"))

# Load environment
load_dotenv()


def print_header(text):
    """Print a formatted header."""
    print("\n" + "="*60)
    print(f"  {text}")
    print("="*60 + "\n")


def print_test(name, status, message=""):
    """Print a check result."""
    icon = "✅" if status else "❌"
    print(f"{icon} {name}")
    if message:
        print(f"   → {message}")


async def check_environment():
    """Required and optional environment variables."""
    print_header("Checking Environment Configuration")

    all_present = True
    for var in ["BOT_TOKEN", "ENCRYPTION_KEY"]:
        if os.getenv(var):
            # Secrets: only report presence
            print_test(var, True, "Set")
        else:
            print_test(var, False, "NOT SET!")
            all_present = False

    for var in ["RPC_URL", "CHAIN_ID", "CASINO_ADDRESS", "CASINO_ABI_PATH", "WALLET_DB_PATH"]:
        value = os.getenv(var)
        print_test(var, True, value if value else "using default")

    return all_present


async def check_imports():
    """Third-party packages and project modules import."""
    print_header("Checking Python Imports")

    checks = [
        ("python-telegram-bot", "telegram.ext"),
        ("web3", "web3"),
        ("eth-account", "eth_account"),
        ("cryptography", "cryptography.fernet"),
        ("aiohttp", "aiohttp"),
        ("Wallet store", "database"),
        ("Casino engine", "casino"),
        ("Audit log", "security"),
    ]

    results = []
    for name, module in checks:
        try:
            __import__(module)
            print_test(name, True)
            results.append(True)
        except ImportError as e:
            print_test(name, False, str(e))
            results.append(False)

    return all(results)


async def check_encryption():
    """Fernet key is valid and round-trips."""
    print_header("Checking Encryption")

    from utils import encrypt_secret, decrypt_secret, generate_encryption_key

    key = os.getenv("ENCRYPTION_KEY")
    if not key:
        print_test("ENCRYPTION_KEY", False, f"Generate one with: {generate_encryption_key()}")
        return False

    try:
        encrypted = encrypt_secret("setup-check", key)
        ok = decrypt_secret(encrypted, key) == "setup-check"
        print_test("Encrypt / decrypt", ok)
        return ok
    except ValueError as e:
        print_test("ENCRYPTION_KEY", False, f"Invalid Fernet key: {e}")
        return False


async def check_wallet_store():
    """Wallet creation and signing-key recovery in a scratch database."""
    print_header("Checking Wallet Store")

    from database import WalletStore
    from utils import generate_encryption_key

    with tempfile.TemporaryDirectory() as tmp:
        store = WalletStore(os.path.join(tmp, "check.db"), encryption_key=generate_encryption_key())
        wallet = store.create("setup-check")
        print_test("Create wallet", True, f"Address: {wallet.address}")

        account = store.load_account(wallet)
        ok = account.address == wallet.address
        print_test("Recover signing key", ok)
        return ok


async def check_chain():
    """RPC reachability and casino contract limits."""
    print_header("Checking Blockchain Connection")

    import config
    from casino import ChainGateway, ChainUnavailable, ContractRejected
    from casino.abi import load_abi

    abi = load_abi(config.CASINO_ABI_PATH) if config.CASINO_ABI_PATH else None
    gateway = ChainGateway(config.RPC_URL, config.CASINO_ADDRESS, abi=abi, chain_id=config.CHAIN_ID)

    try:
        chain_id = await gateway.get_chain_id()
        print_test("RPC connection", True, f"{config.RPC_URL} (chain {chain_id})")

        gas_price = await gateway.get_fee_rate()
        print_test("Gas price", True, f"{gas_price} wei")

        min_bet = await gateway.min_bet()
        max_bet = await gateway.max_bet()
        max_payout = await gateway.max_payout()
        balance = await gateway.contract_balance()
        print_test("Casino contract", True, f"{gateway.casino_address}")
        print(f"   → Bet limits: {min_bet} - {max_bet} wei")
        print(f"   → Max payout: {max_payout} wei")
        print(f"   → Contract balance: {balance} wei")
        return True
    except ContractRejected as e:
        print_test("Casino contract", False, str(e))
        return False
    except ChainUnavailable as e:
        print_test("Blockchain", False, str(e))
        return False


async def check_audit_log():
    """Recent activity from the audit log, if the bot has run before."""
    print_header("Checking Audit Log")

    import config
    from security import AuditLogger

    if not os.path.exists(config.WALLET_DB_PATH):
        print_test("Audit log", True, f"{config.WALLET_DB_PATH} not created yet")
        return True

    summary = AuditLogger(config.WALLET_DB_PATH).get_summary(hours=24)
    print_test("Audit log", True, f"{sum(summary['events'].values())} event(s) in the last 24h")
    print(f"   → Warnings: {summary['total_warnings']}")
    print(f"   → Critical: {summary['total_critical']}")
    if summary["unknown_outcomes"]:
        print(f"   → ⚠️  {summary['unknown_outcomes']} transaction(s) with unknown outcome, check them on the explorer")
    return summary["total_critical"] == 0


async def main():
    """Run all checks."""
    print_header("🎲 Dice Casino - Setup Verification")

    results = [
        await check_environment(),
        await check_imports(),
    ]
    if results[-1]:
        results.append(await check_encryption())
        results.append(await check_wallet_store())
        results.append(await check_chain())
        results.append(await check_audit_log())

    # Summary
    print_header("Summary")
    passed = sum(results)
    total = len(results)

    print(f"Checks Passed: {passed}/{total}")

    if passed == total:
        print("\n✅ All checks passed! You're ready to run the bot.")
        print("\nNext steps:")
        print("  1. cd backend")
        print("  2. python bot.py")
        print("  3. Test on Telegram with small testnet amounts")
        return 0

    print(f"\n❌ {total - passed} check(s) failed. Please fix the issues above.")
    print("\nCommon fixes:")
    print("  • Missing .env file: copy .env.example to .env and fill it in")
    print("  • Missing packages: pip install -e .")
    print("  • RPC errors: set RPC_URL to a reachable endpoint")
    return 1


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
