"""
Telegram bot for the Dice Casino.

Handlers only translate chat updates into orchestrator calls; all wallet,
chain and game logic lives in the casino package.
"""
import logging

from telegram import Update
from telegram.ext import (
    Application,
    CommandHandler,
    CallbackQueryHandler,
    ContextTypes,
)

import config
import menus
import messages
from casino import CasinoOrchestrator, ChainGateway, TransactionExecutor
from casino.abi import load_abi
from database import WalletStore
from security import AuditLogger

# Logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO
)
# httpx logs every Telegram poll at INFO, including the bot token in the URL
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

# Commands forwarded to the orchestrator as-is
ACTION_COMMANDS = [
    "createwallet",
    "deposit",
    "withdraw",
    "mywallet",
    "bet",
    "mybets",
    "balance",
    "calc",
    "rules",
]


def get_orchestrator(context: ContextTypes.DEFAULT_TYPE) -> CasinoOrchestrator:
    return context.application.bot_data["orchestrator"]


# ===== COMMAND HANDLERS =====

async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /start command."""
    await update.message.reply_text(messages.WELCOME, reply_markup=menus.main_menu())


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /help command."""
    await update.message.reply_text(messages.WELCOME)


async def action_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Forward /<action> [args...] to the orchestrator."""
    message = update.message
    action = message.text.split()[0].lstrip("/").split("@")[0].lower()
    user_id = update.effective_user.id

    async def notify(text: str):
        await message.reply_text(text)

    logger.info(f"[CMD] user={user_id} /{action} args={len(context.args or [])}")
    reply = await get_orchestrator(context).invoke(user_id, action, context.args or [], notify=notify)
    await message.reply_text(reply)


# ===== CALLBACK HANDLERS =====

async def button_callback(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle main menu buttons."""
    query = update.callback_query
    await query.answer()

    data = query.data

    if data == "back":
        await query.edit_message_text("🎲 Dice Casino\n\nChoose an option:", reply_markup=menus.main_menu())
        return

    action = menus.MENU_ACTIONS.get(data)
    if action is None:
        logger.warning(f"[CMD] Unknown callback data: {data}")
        return

    reply = await get_orchestrator(context).invoke(update.effective_user.id, action, [])
    await query.edit_message_text(reply, reply_markup=menus.back_menu())


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE):
    """Log unexpected handler errors."""
    logger.error(f"Unhandled error while processing update: {context.error}", exc_info=context.error)


# ===== MAIN =====

def build_orchestrator() -> CasinoOrchestrator:
    """Wire store, gateway, executor and audit log from configuration."""
    encryption_key = config.require("ENCRYPTION_KEY")
    abi = load_abi(config.CASINO_ABI_PATH) if config.CASINO_ABI_PATH else None

    store = WalletStore(config.WALLET_DB_PATH, encryption_key=encryption_key)
    gateway = ChainGateway(
        config.RPC_URL,
        config.CASINO_ADDRESS,
        abi=abi,
        chain_id=config.CHAIN_ID,
    )
    executor = TransactionExecutor(
        gateway,
        store,
        confirmation_timeout=config.CONFIRMATION_TIMEOUT,
        poll_latency=config.POLL_LATENCY,
    )
    audit = AuditLogger(config.WALLET_DB_PATH)

    logger.info(f"Wallet store: {config.WALLET_DB_PATH} ({store.count()} wallets)")
    logger.info(f"RPC: {config.RPC_URL}")
    logger.info(f"Casino contract: {gateway.casino_address}")

    summary = audit.get_summary(hours=24)
    if summary["unknown_outcomes"]:
        logger.warning(
            f"[AUDIT] {summary['unknown_outcomes']} transaction(s) in the last 24h "
            f"ended with unknown status, check them on the explorer"
        )
    return CasinoOrchestrator(store, gateway, executor, audit=audit)


def main():
    """Start the bot."""
    logger.info("="*50)
    logger.info("Dice Casino Bot Starting...")
    logger.info("="*50)

    bot_token = config.require("BOT_TOKEN")
    orchestrator = build_orchestrator()

    # Create application; concurrent updates so one slow bet does not block other users
    app = Application.builder().token(bot_token).concurrent_updates(True).build()
    app.bot_data["orchestrator"] = orchestrator

    # Add handlers
    app.add_handler(CommandHandler("start", start_command))
    app.add_handler(CommandHandler("help", help_command))
    app.add_handler(CommandHandler(ACTION_COMMANDS, action_command))
    app.add_handler(CallbackQueryHandler(button_callback))
    app.add_error_handler(error_handler)

    # Start bot
    logger.info("✅ Dice Casino Bot is ready!")
    logger.info("Press Ctrl+C to stop")
    logger.info("="*50)

    app.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
