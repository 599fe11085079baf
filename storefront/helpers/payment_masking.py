import re
from typing import Optional

VISIBLE_ACCOUNT_CHARS = 4
VISIBLE_EMAIL_CHARS = 2


def mask_account(account: Optional[str]) -> Optional[str]:
    if account is None or len(account) <= VISIBLE_ACCOUNT_CHARS:
        return account
    hidden = len(account) - VISIBLE_ACCOUNT_CHARS
    return "*" * hidden + account[-VISIBLE_ACCOUNT_CHARS:]


def mask_email(email: Optional[str]) -> Optional[str]:
    if email is None or "@" not in email:
        return email
    username, domain = email.split("@", 1)
    if len(username) <= VISIBLE_EMAIL_CHARS:
        return email
    return username[:VISIBLE_EMAIL_CHARS] + "*" * (len(username) - VISIBLE_EMAIL_CHARS) + "@" + domain


def last_four(card_number: Optional[str]) -> Optional[str]:
    if card_number is None:
        return None
    digits = re.sub(r"[^0-9]", "", card_number)
    if len(digits) < 4:
        return digits or card_number
    return digits[-4:]


def detect_card_type(card_number: Optional[str]) -> str:
    if not card_number:
        return "Unknown"

    cleaned = re.sub(r"[^0-9]", "", card_number)

    if cleaned.startswith("4"):
        return "Visa"
    if cleaned.startswith(("5", "2")):
        return "Mastercard"
    if cleaned.startswith("3"):
        return "American Express"
    if cleaned.startswith("6"):
        return "Discover"
    return "Unknown"
