"""
Data Models Package

This package contains all Pydantic models used in the Bookstore Console.
All data flowing through the system must conform to these schemas.
"""

from bookstore.models.records import (
    Account,
    Book,
    Privilege,
    RecordSnapshot,
    SessionContext,
    format_currency,
)
from bookstore.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record models
    "Account",
    "Book",
    "Privilege",
    "RecordSnapshot",
    "SessionContext",
    "format_currency",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
