"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the JSON files for a real database later
2. Use in-memory storage for testing
3. Keep the command core decoupled from file formats

The record interface is intentionally coarse: the whole record store is
loaded at startup and written back at shutdown. Round-trip fidelity is
the only contract.
"""

from abc import ABC, abstractmethod
from typing import Optional

from bookstore.config import get_settings
from bookstore.models.audit import AuditEvent
from bookstore.models.records import Account, Privilege, RecordSnapshot


class RecordStorageInterface(ABC):
    """
    Abstract interface for the three persistent record sets.

    Any storage implementation (JSON files, SQLite, etc.)
    must implement these methods.
    """

    @abstractmethod
    def load(self) -> RecordSnapshot:
        """
        Load accounts, books and ledger.

        Returns:
            The stored snapshot. When no account store exists yet the
            snapshot holds exactly the bootstrap account.

        Raises:
            StorageError: If stored data cannot be read or parsed
        """
        pass

    @abstractmethod
    def save(self, snapshot: RecordSnapshot) -> None:
        """
        Persist the full current state of all three record sets.

        Raises:
            StorageError: If the write fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(self, limit: Optional[int] = None) -> list[AuditEvent]:
        """
        Get audit events in chronological order.

        Args:
            limit: Only the newest `limit` events; None means all of them
        """
        pass

    @abstractmethod
    def get_events_by_actor(
        self,
        actor: Optional[str] = None,
        actor_privilege: Optional[int] = None,
    ) -> list[AuditEvent]:
        """
        Get events filtered by who performed them.

        Args:
            actor: Only events of this user id
            actor_privilege: Only events performed at this privilege level

        Returns:
            Matching events in chronological order
        """
        pass


def bootstrap_account() -> Account:
    """The account a brand-new installation starts with."""
    app = get_settings().app
    return Account(
        user_id=app.root_user_id,
        password=app.root_password,
        username=app.root_username,
        privilege=Privilege.OWNER,
    )


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDataError(StorageError):
    """Stored data exists but cannot be parsed."""
    pass
