"""Card number and display helpers"""

import re

_DIGITS_RE = re.compile(r"^\d{13,19}$")
_EXPIRY_RE = re.compile(r"^(0[1-9]|1[0-2])/(\d{2}|\d{4})$")
_CVC_RE = re.compile(r"^\d{3,4}$")


def validate_card_number(card_number: str) -> bool:
    """13-19 digits (spaces ignored) passing the Luhn checksum"""
    cleaned = re.sub(r"\s", "", card_number)
    if not _DIGITS_RE.match(cleaned):
        return False

    total = 0
    double = False
    for ch in reversed(cleaned):
        digit = int(ch)
        if double:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
        double = not double

    return total % 10 == 0


def format_card_number(value: str) -> str:
    """Group digits in fours: '4242424242424242' -> '4242 4242 4242 4242'"""
    cleaned = re.sub(r"\s", "", value)
    return " ".join(cleaned[i:i + 4] for i in range(0, len(cleaned), 4))


def format_expiry(value: str) -> str:
    """'1227' -> '12/27'; non-digits are dropped"""
    cleaned = re.sub(r"\D", "", value)
    if len(cleaned) >= 2:
        return cleaned[:2] + "/" + cleaned[2:6]
    return cleaned


def is_valid_expiry(value: str) -> bool:
    return bool(_EXPIRY_RE.match(value.strip()))


def is_valid_cvc(value: str) -> bool:
    return bool(_CVC_RE.match(value.strip()))


def format_currency(amount: float) -> str:
    """USD display string, e.g. 1234.5 -> '$1,234.50'"""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"
