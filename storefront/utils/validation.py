"""Client-side form validation

These checks are advisory: they keep obviously bad input off the network.
The API remains the authority on what it accepts.
"""

import re
from dataclasses import dataclass
from typing import Callable

PASSWORD_SYMBOLS = '!@#$%^&*(),.?":{}|<>'
MIN_PASSWORD_LENGTH = 8

_SYMBOL_RE = re.compile("[" + re.escape(PASSWORD_SYMBOLS) + "]")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class PasswordRule:
    label: str
    check: Callable[[str], bool]


@dataclass(frozen=True)
class RuleResult:
    label: str
    valid: bool


PASSWORD_RULES = (
    PasswordRule(f"At least {MIN_PASSWORD_LENGTH} characters", lambda p: len(p) >= MIN_PASSWORD_LENGTH),
    PasswordRule("Contains uppercase letter", lambda p: re.search(r"[A-Z]", p) is not None),
    PasswordRule("Contains lowercase letter", lambda p: re.search(r"[a-z]", p) is not None),
    PasswordRule("Contains a number", lambda p: re.search(r"[0-9]", p) is not None),
    PasswordRule("Contains special character (!@#$%^&*)", lambda p: _SYMBOL_RE.search(p) is not None),
)


def check_password(password: str) -> list[RuleResult]:
    """Evaluate every password rule, for a live checklist"""
    return [RuleResult(rule.label, rule.check(password)) for rule in PASSWORD_RULES]


def is_password_valid(password: str) -> bool:
    return all(result.valid for result in check_password(password))


def is_email_like(value: str) -> bool:
    return bool(_EMAIL_RE.match(value.strip()))
