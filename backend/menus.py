"""
Telegram bot keyboard menus.
"""
from telegram import InlineKeyboardButton, InlineKeyboardMarkup

# Button callback data -> orchestrator action. Only argument-free actions
# can be driven from buttons.
MENU_ACTIONS = {
    "createwallet": "createwallet",
    "deposit": "deposit",
    "mywallet": "mywallet",
    "balance": "balance",
    "mybets": "mybets",
    "rules": "rules",
}


def main_menu() -> InlineKeyboardMarkup:
    """Main menu with wallet and game shortcuts."""
    keyboard = [
        [
            InlineKeyboardButton("Create Wallet", callback_data="createwallet"),
            InlineKeyboardButton("Deposit", callback_data="deposit"),
        ],
        [
            InlineKeyboardButton("My Wallet", callback_data="mywallet"),
            InlineKeyboardButton("Balance & Stats", callback_data="balance"),
        ],
        [InlineKeyboardButton("My Bets", callback_data="mybets")],
        [InlineKeyboardButton("Rules", callback_data="rules")],
    ]
    return InlineKeyboardMarkup(keyboard)


def back_menu() -> InlineKeyboardMarkup:
    """Single button back to the main menu."""
    keyboard = [[InlineKeyboardButton("Back", callback_data="back")]]
    return InlineKeyboardMarkup(keyboard)
