# Validation and formatting helpers

from .validation import check_password, is_password_valid, is_email_like
from .cards import validate_card_number, format_card_number, format_expiry, format_currency

__all__ = [
    "check_password",
    "is_password_valid",
    "is_email_like",
    "validate_card_number",
    "format_card_number",
    "format_expiry",
    "format_currency",
]
