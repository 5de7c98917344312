"""Field validation package."""

from bookstore.validation.validator import (
    ALLOWED_PRIVILEGES,
    FieldValidationError,
    KEYWORD_SEPARATOR,
    byte_length,
    parse_currency,
    parse_integer,
    parse_privilege,
    validate_free_text,
    validate_identifier,
    validate_isbn,
    validate_keywords,
    validate_single_keyword,
    validate_username,
)

__all__ = [
    "ALLOWED_PRIVILEGES",
    "FieldValidationError",
    "KEYWORD_SEPARATOR",
    "byte_length",
    "parse_currency",
    "parse_integer",
    "parse_privilege",
    "validate_free_text",
    "validate_identifier",
    "validate_isbn",
    "validate_keywords",
    "validate_single_keyword",
    "validate_username",
]
