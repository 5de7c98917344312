"""
Field Validators

DESIGN DECISION: Every field type has its own independent syntactic contract.
Each validator either returns the parsed value or raises
FieldValidationError. None of them touch any state.

Lengths are measured in UTF-8 bytes, not characters, because the limits
describe the stored form of the record.

IMPORTANT: Validation NEVER silently fixes input.
A value that does not match its contract exactly is rejected.
"""

import re

from bookstore.errors import CommandRejected, RejectReason


MAX_IDENTIFIER_BYTES = 30
MAX_USERNAME_BYTES = 30
MAX_ISBN_BYTES = 20
MAX_TEXT_BYTES = 60
MAX_INTEGER_DIGITS = 10
MAX_INTEGER_VALUE = 2_147_483_647
MAX_CURRENCY_BYTES = 13
MAX_CURRENCY_WHOLE = 90_000_000_000

KEYWORD_SEPARATOR = "|"
ALLOWED_PRIVILEGES = frozenset({1, 3, 7})

_IDENTIFIER_RE = re.compile(r"[A-Za-z0-9_]+")
_DIGITS_RE = re.compile(r"[0-9]+")


class FieldValidationError(CommandRejected, ValueError):
    """
    A field failed its syntactic contract.

    Also a ValueError so that pydantic models can reuse these
    validators and report failures as ordinary validation errors.
    """
    reason = RejectReason.VALIDATION

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field


def byte_length(value: str) -> int:
    # surrogatepass: undecodable input bytes arrive as lone surrogates
    return len(value.encode("utf-8", "surrogatepass"))


def _has_surrogates(value: str) -> bool:
    return any(0xD800 <= ord(c) <= 0xDFFF for c in value)


def _has_control_chars(value: str) -> bool:
    return any(ord(c) < 32 for c in value) or _has_surrogates(value)


def _check_length(value: str, field: str, max_bytes: int, allow_empty: bool = False) -> None:
    if _has_surrogates(value):
        raise FieldValidationError(field, "not valid UTF-8")
    size = byte_length(value)
    if size == 0 and not allow_empty:
        raise FieldValidationError(field, "must not be empty")
    if size > max_bytes:
        raise FieldValidationError(field, f"longer than {max_bytes} bytes")


def validate_identifier(value: str, field: str = "user_id") -> str:
    """User ids and passwords: 1-30 bytes of letters, digits and underscore."""
    _check_length(value, field, MAX_IDENTIFIER_BYTES)
    if not _IDENTIFIER_RE.fullmatch(value):
        raise FieldValidationError(field, "only letters, digits and '_' are allowed")
    return value


def validate_username(value: str, field: str = "username") -> str:
    """Display names: 1-30 bytes, no control characters."""
    _check_length(value, field, MAX_USERNAME_BYTES)
    if _has_control_chars(value):
        raise FieldValidationError(field, "contains control characters")
    return value


def validate_isbn(value: str, field: str = "ISBN") -> str:
    """ISBNs: 1-20 bytes, no control characters."""
    _check_length(value, field, MAX_ISBN_BYTES)
    if _has_control_chars(value):
        raise FieldValidationError(field, "contains control characters")
    return value


def validate_free_text(value: str, field: str = "text") -> str:
    """Book name, author or keyword text: up to 60 bytes, no control characters, no quotes."""
    _check_length(value, field, MAX_TEXT_BYTES, allow_empty=True)
    if _has_control_chars(value):
        raise FieldValidationError(field, "contains control characters")
    if '"' in value:
        raise FieldValidationError(field, "contains a double quote")
    return value


def validate_keywords(value: str, field: str = "keyword") -> list[str]:
    """
    Parse a '|'-separated keyword list.

    Segments must be non-empty and pairwise distinct; their order is kept.
    """
    validate_free_text(value, field)
    segments = value.split(KEYWORD_SEPARATOR)
    seen = set()
    for segment in segments:
        if not segment:
            raise FieldValidationError(field, "empty keyword segment")
        if segment in seen:
            raise FieldValidationError(field, f"duplicate keyword segment {segment!r}")
        seen.add(segment)
    return segments


def validate_single_keyword(value: str, field: str = "keyword") -> str:
    """A query keyword names exactly one tag."""
    validate_free_text(value, field)
    if KEYWORD_SEPARATOR in value:
        raise FieldValidationError(field, "only one keyword may be queried at a time")
    return value


def parse_integer(value: str, field: str = "quantity") -> int:
    """1-10 decimal digits, at most 2,147,483,647."""
    if not value or len(value) > MAX_INTEGER_DIGITS:
        raise FieldValidationError(field, f"expected 1 to {MAX_INTEGER_DIGITS} digits")
    if not _DIGITS_RE.fullmatch(value):
        raise FieldValidationError(field, "not a decimal integer")
    number = int(value)
    if number > MAX_INTEGER_VALUE:
        raise FieldValidationError(field, "too large")
    return number


def parse_currency(value: str, field: str = "price") -> int:
    """
    Parse a decimal amount into integer cents.

    Accepts "12", "12.5", "12.50" and ".5"; rejects "12.", "1.234",
    "1.2.3", signs and anything longer than 13 bytes.
    """
    if not value or byte_length(value) > MAX_CURRENCY_BYTES:
        raise FieldValidationError(field, f"expected 1 to {MAX_CURRENCY_BYTES} bytes")

    whole_text, dot, frac_text = value.partition(".")
    if whole_text and not _DIGITS_RE.fullmatch(whole_text):
        raise FieldValidationError(field, "not a decimal amount")
    if dot:
        if not frac_text:
            raise FieldValidationError(field, "a decimal point must be followed by a digit")
        if not _DIGITS_RE.fullmatch(frac_text):
            raise FieldValidationError(field, "not a decimal amount")
        if len(frac_text) > 2:
            raise FieldValidationError(field, "more than two fractional digits")

    whole = int(whole_text) if whole_text else 0
    if whole > MAX_CURRENCY_WHOLE:
        raise FieldValidationError(field, "amount too large")
    return whole * 100 + int(frac_text.ljust(2, "0") if dot else "0")


def parse_privilege(value: str, field: str = "privilege") -> int:
    """A single digit naming one of the assignable privileges 1, 3 or 7."""
    if value not in {str(p) for p in ALLOWED_PRIVILEGES}:
        raise FieldValidationError(field, "must be one of 1, 3, 7")
    return int(value)
