"""
Command Rejection Errors

DESIGN DECISION: Externally there is exactly one failure signal, the
"Invalid" line. Internally every rejection is a CommandRejected carrying a
RejectReason, so the cause is visible in logs and tests without changing
what the user sees.

Rejections are raised BEFORE any mutation happens. There is no rollback
machinery because nothing has been written when a rejection is raised.
"""

from enum import Enum
from typing import Optional


class RejectReason(str, Enum):
    """Why a command was rejected."""
    FORMAT = "format"                   # tokenization, argument count, options
    VALIDATION = "validation"           # a field failed its syntactic contract
    PERMISSION = "permission"           # privilege too low or no selection
    AUTHENTICATION = "authentication"   # bad credentials or empty session stack
    NOT_FOUND = "not_found"             # unknown account or book
    CONFLICT = "conflict"               # duplicate key, account in use
    INSUFFICIENT_STOCK = "insufficient_stock"
    OUT_OF_RANGE = "out_of_range"       # ledger count beyond its length
    UNKNOWN_COMMAND = "unknown_command"
    STORAGE = "storage"                 # audit trail unreadable during a query


class CommandRejected(Exception):
    """Base exception for every rejected command."""

    reason: RejectReason = RejectReason.FORMAT

    def __init__(self, message: str, reason: Optional[RejectReason] = None):
        super().__init__(message)
        self.message = message
        if reason is not None:
            self.reason = reason


class FormatError(CommandRejected):
    """Wrong argument count, malformed token or option."""
    reason = RejectReason.FORMAT


class PermissionDenied(CommandRejected):
    """The current session may not run this command."""
    reason = RejectReason.PERMISSION


class UnknownCommandError(CommandRejected):
    """The command word is not recognised."""
    reason = RejectReason.UNKNOWN_COMMAND
