"""
Audit Models for Bookstore Console

Every successful command is recorded for audit purposes.
This provides:
1. Complete traceability of who changed what
2. Debugging information when things go wrong
3. The raw material for the owner's `log` and `report employee` listings

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
Passwords never appear in an audit event.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    One event type per command family.
    """
    # Session
    LOGIN = "login"
    LOGOUT = "logout"

    # Accounts
    ACCOUNT_REGISTERED = "account_registered"
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_DELETED = "account_deleted"
    PASSWORD_CHANGED = "password_changed"

    # Books
    BOOK_SELECTED = "book_selected"
    BOOK_MODIFIED = "book_modified"
    BOOK_IMPORTED = "book_imported"
    BOOK_SOLD = "book_sold"

    # Queries
    QUERY_EXECUTED = "query_executed"

    # Rejections and system events
    COMMAND_REJECTED = "command_rejected"
    RECORDS_SAVED = "records_saved"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Who did it
    actor: Optional[str] = Field(
        default=None,
        description="User id of the active session, None when anonymous"
    )
    actor_privilege: int = Field(
        default=0,
        description="Privilege snapshot of the active session"
    )

    # What was done
    command: str = Field(
        default="",
        description="Command word, e.g. 'buy'"
    )
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Rejection / error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "actor": self.actor,
            "actor_privilege": self.actor_privilege,
            "command": self.command,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }

    def to_json_line(self) -> str:
        """One line of the JSON-lines audit file."""
        return json.dumps(self.model_dump(mode="json"), ensure_ascii=False)

    def to_listing_row(self) -> str:
        """Row printed by the `log` command."""
        return "\t".join([
            self.timestamp.isoformat(timespec="seconds"),
            self.actor or "-",
            self.description,
        ])


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.login(actor="root", actor_privilege=7, ...)
        event = AuditEventBuilder.book_sold(actor, privilege, isbn, 3, "37.50")
    """

    @staticmethod
    def login(
        actor: str,
        actor_privilege: int,
        previous_actor: Optional[str],
        with_password: bool,
    ) -> AuditEvent:
        """The new session is the actor; the one it was opened from goes in details."""
        return AuditEvent(
            event_type=AuditEventType.LOGIN,
            actor=actor,
            actor_privilege=actor_privilege,
            command="su",
            description=f"Logged in as {actor}",
            details={
                "previous_actor": previous_actor,
                "with_password": with_password,
            },
        )

    @staticmethod
    def logout(actor: str, actor_privilege: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGOUT,
            actor=actor,
            actor_privilege=actor_privilege,
            command="logout",
            description=f"Logged out {actor}",
        )

    @staticmethod
    def account_registered(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_REGISTERED,
            command="register",
            description=f"Registered account {user_id}",
            details={"user_id": user_id},
        )

    @staticmethod
    def account_created(
        actor: str,
        actor_privilege: int,
        user_id: str,
        privilege: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            actor=actor,
            actor_privilege=actor_privilege,
            command="useradd",
            description=f"Created account {user_id} with privilege {privilege}",
            details={
                "user_id": user_id,
                "privilege": privilege,
            },
        )

    @staticmethod
    def account_deleted(actor: str, actor_privilege: int, user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_DELETED,
            severity=AuditSeverity.WARNING,
            actor=actor,
            actor_privilege=actor_privilege,
            command="delete",
            description=f"Deleted account {user_id}",
            details={"user_id": user_id},
        )

    @staticmethod
    def password_changed(
        actor: Optional[str],
        actor_privilege: int,
        user_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PASSWORD_CHANGED,
            actor=actor,
            actor_privilege=actor_privilege,
            command="passwd",
            description=f"Changed password of {user_id}",
            details={"user_id": user_id},
        )

    @staticmethod
    def book_selected(
        actor: str,
        actor_privilege: int,
        isbn: str,
        created: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BOOK_SELECTED,
            actor=actor,
            actor_privilege=actor_privilege,
            command="select",
            description=f"{'Created and selected' if created else 'Selected'} book {isbn}",
            details={
                "isbn": isbn,
                "created": created,
            },
        )

    @staticmethod
    def book_modified(
        actor: str,
        actor_privilege: int,
        isbn: str,
        changes: dict[str, Any],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BOOK_MODIFIED,
            actor=actor,
            actor_privilege=actor_privilege,
            command="modify",
            description=f"Modified book {isbn}: {', '.join(sorted(changes))}",
            details={
                "isbn": isbn,
                "changes": changes,
            },
        )

    @staticmethod
    def book_imported(
        actor: str,
        actor_privilege: int,
        isbn: str,
        quantity: int,
        cost: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BOOK_IMPORTED,
            actor=actor,
            actor_privilege=actor_privilege,
            command="import",
            description=f"Imported {quantity} of {isbn} for {cost}",
            details={
                "isbn": isbn,
                "quantity": quantity,
                "cost": cost,
            },
        )

    @staticmethod
    def book_sold(
        actor: str,
        actor_privilege: int,
        isbn: str,
        quantity: int,
        total: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BOOK_SOLD,
            actor=actor,
            actor_privilege=actor_privilege,
            command="buy",
            description=f"Sold {quantity} of {isbn} for {total}",
            details={
                "isbn": isbn,
                "quantity": quantity,
                "total": total,
            },
        )

    @staticmethod
    def query_executed(
        actor: Optional[str],
        actor_privilege: int,
        command: str,
        result_count: int,
        query_description: str = "",
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.QUERY_EXECUTED,
            severity=AuditSeverity.DEBUG,
            actor=actor,
            actor_privilege=actor_privilege,
            command=command,
            description=f"Query {command} returned {result_count} rows",
            details={
                "result_count": result_count,
                "query": query_description,
            },
        )

    @staticmethod
    def command_rejected(
        actor: Optional[str],
        actor_privilege: int,
        command: str,
        reason: str,
        message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMAND_REJECTED,
            severity=AuditSeverity.WARNING,
            actor=actor,
            actor_privilege=actor_privilege,
            command=command,
            description=f"Rejected {command or 'empty command'}: {reason}",
            error_code=reason,
            error_message=message,
        )

    @staticmethod
    def records_saved(accounts: int, books: int, ledger_entries: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORDS_SAVED,
            severity=AuditSeverity.DEBUG,
            description="Records saved",
            details={
                "accounts": accounts,
                "books": books,
                "ledger_entries": ledger_entries,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
