"""
Tests for Bookstore Console

Test strategy:
1. Unit tests for individual components (models, validators)
2. Integration tests for command flows (with in-memory storage)
3. No real files in tests except under pytest's tmp_path
"""

import json

import pytest
from pydantic import ValidationError

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


class TestRecordModels:
    """Tests for account and book Pydantic models."""

    def test_account_creation(self):
        """Test Account model creation."""
        account = Account(user_id="alice_1", password="secret", username="Alice", privilege=Privilege.CUSTOMER)
        assert account.user_id == "alice_1"
        assert account.privilege == Privilege.CUSTOMER

    def test_account_rejects_bad_identifier(self):
        """Test that user ids follow the identifier contract."""
        with pytest.raises(ValidationError):
            Account(user_id="bad id", password="secret", username="Alice")

    def test_account_rejects_unassignable_privilege(self):
        """Privilege 0 is a session state, never an account level."""
        with pytest.raises(ValidationError):
            Account(user_id="alice", password="secret", username="Alice", privilege=Privilege.ANONYMOUS)

    def test_account_password_assignment_is_validated(self):
        """validate_assignment keeps stored passwords well-formed."""
        account = Account(user_id="alice", password="secret", username="Alice")
        with pytest.raises(ValidationError):
            account.password = "has space"
        assert account.password == "secret"

    def test_new_book_is_empty(self):
        """Test that a freshly selected book has empty fields."""
        book = Book(isbn="978-7-111")
        assert book.name == ""
        assert book.author == ""
        assert book.keywords == []
        assert book.price == 0
        assert book.stock == 0

    def test_book_rejects_duplicate_keywords(self):
        """Test that keyword segments must be distinct."""
        with pytest.raises(ValidationError):
            Book(isbn="1", keywords=["a", "a"])

    def test_book_rejects_negative_stock(self):
        """Test that stock cannot go below zero."""
        with pytest.raises(ValidationError):
            Book(isbn="1", stock=-1)

    def test_book_row(self):
        """Test the tab-separated listing row."""
        book = Book(isbn="111", name="Dune", author="Herbert", keywords=["sf", "classic"], price=1250, stock=3)
        assert book.to_row() == "111\tDune\tHerbert\tsf|classic\t12.50\t3"

    def test_book_row_with_empty_fields(self):
        """Test the listing row of an empty book."""
        assert Book(isbn="111").to_row() == "111\t\t\t\t0.00\t0"

    def test_has_keyword_matches_whole_segments(self):
        """Test that keyword membership never matches a substring."""
        book = Book(isbn="1", keywords=["science", "fiction"])
        assert book.has_keyword("fiction")
        assert not book.has_keyword("sci")

    def test_session_context_starts_without_selection(self):
        """Test that a new login has no selected book."""
        ctx = SessionContext(user_id="root", privilege=Privilege.OWNER)
        assert ctx.selected_isbn is None

    def test_snapshot_serializes(self):
        """Snapshots survive a JSON dump and reload unchanged."""
        snapshot = RecordSnapshot(
            accounts=[Account(user_id="root", password="sjtu", username="root", privilege=Privilege.OWNER)],
            books=[Book(isbn="1", price=999, stock=2)],
            ledger=[50000, -20000],
        )
        reloaded = RecordSnapshot.model_validate(json.loads(snapshot.model_dump_json()))
        assert reloaded == snapshot


class TestFormatCurrency:
    """Tests for cent formatting."""

    @pytest.mark.parametrize("cents, text", [
        (0, "0.00"),
        (5, "0.05"),
        (3750, "37.50"),
        (100000, "1000.00"),
        (-2000, "-20.00"),
    ])
    def test_format(self, cents, text):
        """Test that cents always render with two decimals."""
        assert format_currency(cents) == text


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.BOOK_SOLD,
            actor="alice",
            actor_privilege=1,
            command="buy",
            description="Sold 3 of 111 for 37.50",
        )
        assert event.event_id is not None
        assert event.timestamp is not None
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_builder_login(self):
        """Test that a login is attributed to the account logged into."""
        event = AuditEventBuilder.login(actor="root", actor_privilege=7, previous_actor=None, with_password=True)
        assert event.event_type == AuditEventType.LOGIN
        assert event.actor == "root"
        assert event.actor_privilege == 7
        assert event.details["previous_actor"] is None
        assert event.description == "Logged in as root"

    def test_audit_event_builder_book_modified(self):
        """Test AuditEventBuilder for book modifications."""
        event = AuditEventBuilder.book_modified("clerk", 3, "222", {"price": "9.99", "isbn": "222"})
        assert event.event_type == AuditEventType.BOOK_MODIFIED
        assert event.actor_privilege == 3
        assert event.details["changes"]["price"] == "9.99"

    def test_audit_event_builder_rejection(self):
        """Test AuditEventBuilder for rejected commands."""
        event = AuditEventBuilder.command_rejected("alice", 1, "buy", "insufficient_stock", "not enough")
        assert event.event_type == AuditEventType.COMMAND_REJECTED
        assert event.severity == AuditSeverity.WARNING
        assert event.error_code == "insufficient_stock"

    def test_audit_event_builder_system_error(self):
        """Test AuditEventBuilder for storage failures."""
        event = AuditEventBuilder.system_error("CorruptDataError", "bad line", {"command": "log"})
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.severity == AuditSeverity.ERROR
        assert event.details == {"command": "log"}

    def test_query_event_carries_description(self):
        """Test that query events record what was asked."""
        event = AuditEventBuilder.query_executed("root", 7, "show", 2, "Listing all books")
        assert event.details == {"result_count": 2, "query": "Listing all books"}

    def test_json_line_round_trip(self):
        """Test that the audit file line parses back to the same event."""
        event = AuditEventBuilder.book_sold("alice", 1, "111", 3, "37.50")
        assert AuditEvent.model_validate_json(event.to_json_line()) == event

    def test_listing_row(self):
        """Test the row printed by the log command."""
        event = AuditEventBuilder.account_registered("bob")
        row = event.to_listing_row()
        assert row.split("\t")[1] == "-"
        assert row.endswith("Registered account bob")
