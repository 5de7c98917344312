"""
Shared fixtures.

Every fixture runs against in-memory storage; no test touches the
working directory unless it asks for tmp_path.
"""

import pytest

from bookstore.audit import AuditLogger
from bookstore.commands import CommandDispatcher
from bookstore.models.records import Account, Privilege
from bookstore.services.storage import InMemoryAuditStorage, InMemoryRecordStorage
from bookstore.store import RecordStore


@pytest.fixture
def store():
    """A fresh store holding only the bootstrap root account."""
    return RecordStore.from_snapshot(InMemoryRecordStorage().load())


@pytest.fixture
def staffed_store(store):
    """The bootstrap store plus one staff member and one customer."""
    store.add_account(Account(user_id="clerk", password="pw3", username="Clerk", privilege=Privilege.STAFF))
    store.add_account(Account(user_id="alice", password="pw1", username="Alice", privilege=Privilege.CUSTOMER))
    return store


@pytest.fixture
def audit_storage():
    """Audit storage that keeps events in a list."""
    return InMemoryAuditStorage()


@pytest.fixture
def dispatcher(staffed_store, audit_storage):
    """A dispatcher over the staffed store."""
    return CommandDispatcher(staffed_store, audit_logger=AuditLogger(audit_storage))


@pytest.fixture
def run(dispatcher):
    """Execute lines in order; return the printed lines of the last one."""
    def _run(*lines):
        printed = []
        for line in lines:
            result = dispatcher.execute(line)
            printed = result.output_lines() if result else []
        return printed
    return _run
