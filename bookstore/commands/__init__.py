"""Command parsing and dispatch package."""

from bookstore.commands.dispatcher import (
    AccountInUseError,
    CommandDispatcher,
    CommandResult,
)
from bookstore.commands.tokenizer import (
    OptionError,
    Token,
    TokenizeError,
    is_blank,
    parse_options,
    tokenize,
)

__all__ = [
    "AccountInUseError",
    "CommandDispatcher",
    "CommandResult",
    "OptionError",
    "Token",
    "TokenizeError",
    "is_blank",
    "parse_options",
    "tokenize",
]
