"""
Audit Logger

DESIGN DECISION: Every command is logged.
This provides:
1. Complete traceability of state changes
2. Debugging capability (rejections carry their internal reason)
3. The data behind the owner's `log` and `report employee` commands

The audit logger:
- Writes every event to the structured local log (stderr, never stdout)
- Persists only events that describe a state change; rejections and
  queries stay local so that a rejected command leaves no trace in
  persisted state
- Gracefully handles storage failures (doesn't crash the interpreter)
"""

import logging
import sys
from typing import Any, Optional

import structlog

from bookstore.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from bookstore.services.storage import AuditStorageInterface, StorageError


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "WARNING") -> None:
    """
    Route the structured log to stderr at the given level.

    Command output owns stdout; nothing from the log may end up there.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper())


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for the owner's reports), state changes only
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("bookstore.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent, persist: bool = True) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available and requested.

        Returns True if storage write succeeded (or nothing was persisted).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if persist and self._storage:
            try:
                return self._storage.append_event(event)
            except StorageError as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_login(
        self,
        actor: str,
        actor_privilege: int,
        previous_actor: Optional[str],
        with_password: bool,
    ) -> None:
        self.log(AuditEventBuilder.login(actor, actor_privilege, previous_actor, with_password))

    def log_logout(self, actor: str, actor_privilege: int) -> None:
        self.log(AuditEventBuilder.logout(actor, actor_privilege))

    def log_account_registered(self, user_id: str) -> None:
        self.log(AuditEventBuilder.account_registered(user_id))

    def log_account_created(
        self,
        actor: str,
        actor_privilege: int,
        user_id: str,
        privilege: int,
    ) -> None:
        self.log(AuditEventBuilder.account_created(actor, actor_privilege, user_id, privilege))

    def log_account_deleted(self, actor: str, actor_privilege: int, user_id: str) -> None:
        self.log(AuditEventBuilder.account_deleted(actor, actor_privilege, user_id))

    def log_password_changed(
        self,
        actor: Optional[str],
        actor_privilege: int,
        user_id: str,
    ) -> None:
        self.log(AuditEventBuilder.password_changed(actor, actor_privilege, user_id))

    def log_book_selected(
        self,
        actor: str,
        actor_privilege: int,
        isbn: str,
        created: bool,
    ) -> None:
        self.log(AuditEventBuilder.book_selected(actor, actor_privilege, isbn, created))

    def log_book_modified(
        self,
        actor: str,
        actor_privilege: int,
        isbn: str,
        changes: dict[str, Any],
    ) -> None:
        self.log(AuditEventBuilder.book_modified(actor, actor_privilege, isbn, changes))

    def log_book_imported(
        self,
        actor: str,
        actor_privilege: int,
        isbn: str,
        quantity: int,
        cost: str,
    ) -> None:
        self.log(AuditEventBuilder.book_imported(actor, actor_privilege, isbn, quantity, cost))

    def log_book_sold(
        self,
        actor: str,
        actor_privilege: int,
        isbn: str,
        quantity: int,
        total: str,
    ) -> None:
        self.log(AuditEventBuilder.book_sold(actor, actor_privilege, isbn, quantity, total))

    def log_query_executed(
        self,
        actor: Optional[str],
        actor_privilege: int,
        command: str,
        result_count: int,
        query_description: str = "",
    ) -> None:
        """Queries are not state changes; local log only."""
        event = AuditEventBuilder.query_executed(
            actor, actor_privilege, command, result_count, query_description)
        self.log(event, persist=False)

    def log_command_rejected(
        self,
        actor: Optional[str],
        actor_privilege: int,
        command: str,
        reason: str,
        message: str,
    ) -> None:
        """Rejections must leave persisted state untouched; local log only."""
        event = AuditEventBuilder.command_rejected(actor, actor_privilege, command, reason, message)
        self.log(event, persist=False)

    def log_records_saved(self, accounts: int, books: int, ledger_entries: int) -> None:
        self.log(AuditEventBuilder.records_saved(accounts, books, ledger_entries), persist=False)

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        )
        self.log(event, persist=False)
