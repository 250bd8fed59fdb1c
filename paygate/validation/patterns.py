"""
patterns.py — Whitelist grammars for every field kind
======================================================
Each FieldKind carries its own grammar, length bounds, normalizer and
message. Every rule is a positive whitelist: a value is accepted only if
it matches, everything else is rejected.

Regexes use fullmatch with explicit ASCII classes ([0-9] rather than \\d)
so Unicode digits and trailing newlines are never accepted.
"""
from __future__ import annotations

import re
import sys
import unicodedata
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Callable, Dict, Optional, Tuple


class FieldKind(str, Enum):
    NAME = "name"
    NATIONAL_ID = "national_id"
    ACCOUNT_NUMBER = "account_number"
    SWIFT_CODE = "swift_code"
    AMOUNT = "amount"
    BOUNDED_AMOUNT = "bounded_amount"
    CURRENCY = "currency"
    MEMO = "memo"
    USERNAME = "username"
    PASSWORD = "password"
    SECRET = "secret"


ALLOWED_CURRENCIES: Tuple[str, ...] = ("ZAR", "USD", "EUR", "GBP")

MAX_BOUNDED_AMOUNT = Decimal("10000")

PASSWORD_SYMBOLS = "@$!%*?&#^()_+=[]{}|;:'\",.<>\\/-"

# bcrypt reads at most 72 bytes of input.
BCRYPT_MAX_BYTES = 72

_NATIONAL_ID_RE = re.compile(r"[0-9]{13}")
_ACCOUNT_NUMBER_RE = re.compile(r"[0-9]{8,18}")
_SWIFT_CODE_RE = re.compile(r"[A-Z0-9]{8}(?:[A-Z0-9]{3})?")
_AMOUNT_RE = re.compile(r"[0-9]{1,14}(?:\.[0-9]{1,2})?")
_USERNAME_RE = re.compile(r"[A-Za-z0-9]{5,20}")
_ASCII_ALNUM = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789")


def _utf8_length(value: str) -> int:
    try:
        return len(value.encode("utf-8"))
    except UnicodeEncodeError:
        # Lone surrogates cannot reach bcrypt at all
        return sys.maxsize


def _is_name(value: str) -> bool:
    # Letters, combining marks, separators, numbers
    return all(unicodedata.category(ch)[0] in "LMZN" for ch in value)


def _is_memo(value: str) -> bool:
    return all(
        ch in _ASCII_ALNUM or ch.isspace() or unicodedata.category(ch).startswith("P")
        for ch in value
    )


def _is_amount(value: str) -> bool:
    return _AMOUNT_RE.fullmatch(value) is not None


def _is_bounded_amount(value: str) -> bool:
    if not _is_amount(value):
        return False
    try:
        amount = Decimal(value)
    except InvalidOperation:
        return False
    return Decimal(0) < amount <= MAX_BOUNDED_AMOUNT


def _is_strong_password(value: str) -> bool:
    has_lower = has_upper = has_digit = has_symbol = False
    for ch in value:
        if ch in _ASCII_ALNUM:
            has_lower = has_lower or ch.islower()
            has_upper = has_upper or ch.isupper()
            has_digit = has_digit or ch.isdigit()
        elif ch in PASSWORD_SYMBOLS:
            has_symbol = True
        else:
            return False
    return has_lower and has_upper and has_digit and has_symbol


@dataclass(frozen=True)
class FieldPattern:
    """Grammar + bounds for one field kind."""

    kind: FieldKind
    min_len: int
    max_len: int
    predicate: Callable[[str], bool]
    message: str
    trim: bool = True
    uppercase: bool = False
    max_bytes: Optional[int] = None

    def matches(self, value: str) -> bool:
        if not isinstance(value, str):
            return False
        if not self.min_len <= len(value) <= self.max_len:
            return False
        if self.max_bytes is not None and _utf8_length(value) > self.max_bytes:
            return False
        return self.predicate(value)

    def normalize(self, value: str) -> str:
        if self.trim:
            value = value.strip()
        if self.uppercase:
            value = value.upper()
        return value


class PatternRegistry:
    """Lookup of FieldPattern by FieldKind. Unknown kinds are rejected."""

    def __init__(self, patterns: Dict[FieldKind, FieldPattern]) -> None:
        self._patterns = dict(patterns)

    def pattern(self, kind: FieldKind) -> FieldPattern:
        try:
            return self._patterns[kind]
        except KeyError:
            raise KeyError(f"No pattern registered for field kind {kind!r}") from None

    def matches(self, kind: FieldKind, value: str) -> bool:
        """Pure predicate on the raw value. No trimming or case folding."""
        if kind not in self._patterns:
            return False
        return self._patterns[kind].matches(value)

    def normalize(self, kind: FieldKind, value: str) -> str:
        return self.pattern(kind).normalize(value)

    def bounds(self, kind: FieldKind) -> Tuple[int, int]:
        p = self.pattern(kind)
        return p.min_len, p.max_len

    def message(self, kind: FieldKind) -> str:
        return self.pattern(kind).message

    def __contains__(self, kind: object) -> bool:
        return kind in self._patterns


DEFAULT_PATTERNS: Dict[FieldKind, FieldPattern] = {
    FieldKind.NAME: FieldPattern(
        kind=FieldKind.NAME,
        min_len=2,
        max_len=100,
        predicate=_is_name,
        message="Name must be 2-100 characters and contain only letters, numbers, and spaces.",
    ),
    FieldKind.NATIONAL_ID: FieldPattern(
        kind=FieldKind.NATIONAL_ID,
        min_len=13,
        max_len=13,
        predicate=lambda v: _NATIONAL_ID_RE.fullmatch(v) is not None,
        message="South African ID number must be exactly 13 digits.",
    ),
    FieldKind.ACCOUNT_NUMBER: FieldPattern(
        kind=FieldKind.ACCOUNT_NUMBER,
        min_len=8,
        max_len=18,
        predicate=lambda v: _ACCOUNT_NUMBER_RE.fullmatch(v) is not None,
        message="Account number must be between 8 and 18 digits with no spaces or special characters.",
    ),
    FieldKind.SWIFT_CODE: FieldPattern(
        kind=FieldKind.SWIFT_CODE,
        min_len=8,
        max_len=11,
        predicate=lambda v: _SWIFT_CODE_RE.fullmatch(v) is not None,
        message="SWIFT code must be 8 or 11 uppercase alphanumeric characters.",
        uppercase=True,
    ),
    FieldKind.AMOUNT: FieldPattern(
        kind=FieldKind.AMOUNT,
        min_len=1,
        max_len=17,
        predicate=_is_amount,
        message="Amount must be a valid number with up to 2 decimal places (e.g., 1234.56).",
    ),
    FieldKind.BOUNDED_AMOUNT: FieldPattern(
        kind=FieldKind.BOUNDED_AMOUNT,
        min_len=1,
        max_len=17,
        predicate=_is_bounded_amount,
        message="Payment amount must be between 0.01 and 10000.00 with up to 2 decimal places.",
    ),
    FieldKind.CURRENCY: FieldPattern(
        kind=FieldKind.CURRENCY,
        min_len=3,
        max_len=3,
        predicate=lambda v: v in ALLOWED_CURRENCIES,
        message=f"Currency must be one of: {', '.join(ALLOWED_CURRENCIES)}.",
    ),
    FieldKind.MEMO: FieldPattern(
        kind=FieldKind.MEMO,
        min_len=0,
        max_len=150,
        predicate=_is_memo,
        message="Memo/Reference must be 0-150 characters and contain only alphanumeric characters and basic punctuation.",
    ),
    FieldKind.USERNAME: FieldPattern(
        kind=FieldKind.USERNAME,
        min_len=5,
        max_len=20,
        predicate=lambda v: _USERNAME_RE.fullmatch(v) is not None,
        message="Username must be alphanumeric and between 5-20 characters.",
    ),
    FieldKind.PASSWORD: FieldPattern(
        kind=FieldKind.PASSWORD,
        min_len=8,
        max_len=BCRYPT_MAX_BYTES,
        predicate=_is_strong_password,
        message="Password needs 8-72 chars, 1 uppercase, 1 lowercase, 1 number, & 1 symbol.",
        trim=False,
        max_bytes=BCRYPT_MAX_BYTES,
    ),
    FieldKind.SECRET: FieldPattern(
        kind=FieldKind.SECRET,
        min_len=1,
        max_len=BCRYPT_MAX_BYTES,
        predicate=lambda v: True,
        message="Password must be between 1 and 72 bytes.",
        trim=False,
        max_bytes=BCRYPT_MAX_BYTES,
    ),
}

default_registry = PatternRegistry(DEFAULT_PATTERNS)
