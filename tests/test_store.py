"""Tests for the record store and the ledger."""

import pytest

from bookstore.models.records import Account, Book, Privilege
from bookstore.store import (
    DuplicateKeyError,
    InsufficientStockError,
    Ledger,
    LedgerRangeError,
    RecordNotFoundError,
    RecordStore,
)


@pytest.fixture
def shelf():
    """A store with two books and no accounts."""
    return RecordStore(books=[
        Book(isbn="111", name="Dune", price=1250, stock=5),
        Book(isbn="333", name="Emma"),
    ])


class TestAccounts:
    """Tests for account records."""

    def test_add_and_require(self, store):
        """Test adding an account and looking it up."""
        store.add_account(Account(user_id="bob", password="pw", username="Bob"))
        assert store.require_account("bob").username == "Bob"
        assert store.account_count() == 2

    def test_duplicate_account(self, store):
        """Test that user ids are unique."""
        with pytest.raises(DuplicateKeyError):
            store.add_account(Account(user_id="root", password="x", username="x"))

    def test_missing_account(self, store):
        """Test looking up an unknown account."""
        with pytest.raises(RecordNotFoundError):
            store.require_account("ghost")

    def test_delete(self, store):
        """Test removing an account."""
        store.add_account(Account(user_id="bob", password="pw", username="Bob"))
        store.delete_account("bob")
        assert not store.has_account("bob")

    def test_change_password(self, store):
        """Test replacing a stored password."""
        store.change_password("root", "newpw")
        assert store.require_account("root").password == "newpw"


class TestBooks:
    """Tests for book records."""

    def test_upsert_creates_then_reuses(self, shelf):
        """Test that selecting twice creates one book."""
        book, created = shelf.upsert_book("222")
        assert created and book.isbn == "222"
        again, created = shelf.upsert_book("222")
        assert not created and again is book
        assert shelf.book_count() == 3

    def test_books_sorted_by_isbn(self, shelf):
        """Test listing order."""
        shelf.upsert_book("222")
        assert [b.isbn for b in shelf.books_sorted()] == ["111", "222", "333"]

    def test_replace_book_rekeys(self, shelf):
        """Test moving a book to a new ISBN."""
        updated = shelf.require_book("111").model_copy(update={"isbn": "999"})
        shelf.replace_book("111", updated)
        assert not shelf.has_book("111")
        assert shelf.require_book("999").name == "Dune"
        assert shelf.book_count() == 2

    def test_replace_book_into_taken_key(self, shelf):
        """Test that a failed re-key changes neither book."""
        updated = shelf.require_book("111").model_copy(update={"isbn": "333", "price": 1})
        with pytest.raises(DuplicateKeyError):
            shelf.replace_book("111", updated)
        assert shelf.require_book("111").price == 1250
        assert shelf.require_book("333").name == "Emma"

    def test_replace_book_same_key(self, shelf):
        """Test an update that keeps the ISBN."""
        updated = shelf.require_book("111").model_copy(update={"price": 999})
        shelf.replace_book("111", updated)
        assert shelf.require_book("111").price == 999


class TestStockAndMoney:
    """Tests for stock movements and their ledger entries."""

    def test_receive_stock_records_expenditure(self, shelf):
        """Test that importing spends money."""
        book = shelf.receive_stock("333", 4, 2000)
        assert book.stock == 4
        assert shelf.ledger.entries() == [-2000]

    def test_sell_records_income(self, shelf):
        """Test that selling earns price times quantity."""
        total = shelf.sell("111", 3)
        assert total == 3750
        assert shelf.require_book("111").stock == 2
        assert shelf.ledger.entries() == [3750]

    def test_sell_more_than_stock(self, shelf):
        """Test that an oversell changes nothing."""
        with pytest.raises(InsufficientStockError):
            shelf.sell("111", 10)
        assert shelf.require_book("111").stock == 5
        assert len(shelf.ledger) == 0

    def test_sell_unknown_book(self, shelf):
        """Test selling a book that does not exist."""
        with pytest.raises(RecordNotFoundError):
            shelf.sell("000", 1)


class TestSnapshot:
    """Tests for snapshot export and import."""

    def test_snapshot_is_a_copy(self, shelf):
        """Test that snapshots do not alias live records."""
        snapshot = shelf.snapshot()
        snapshot.books[0].stock = 0
        assert shelf.require_book("111").stock == 5

    def test_round_trip(self, shelf):
        """Test rebuilding a store from its snapshot."""
        shelf.sell("111", 1)
        restored = RecordStore.from_snapshot(shelf.snapshot())
        assert restored.snapshot() == shelf.snapshot()


class TestLedger:
    """Income and expenditure aggregation."""

    @pytest.fixture
    def ledger(self):
        """Two incomes and one expenditure."""
        return Ledger([50000, -20000, 30000])

    def test_whole_ledger(self, ledger):
        """Test the summary over every entry."""
        assert ledger.summarize().to_line() == "+ 800.00 - 200.00"

    def test_suffix(self, ledger):
        """Test the summary over the latest entries."""
        summary = ledger.summarize(2)
        assert summary.to_line() == "+ 300.00 - 200.00"
        assert summary.entry_count == 2

    def test_zero_entries(self, ledger):
        """Test a summary of nothing."""
        assert ledger.summarize(0).to_line() == "+ 0.00 - 0.00"

    def test_count_beyond_length(self, ledger):
        """Test asking for more entries than exist."""
        with pytest.raises(LedgerRangeError):
            ledger.summarize(4)

    def test_empty_ledger(self):
        """Test the summary of a new ledger."""
        assert Ledger().summarize().to_line() == "+ 0.00 - 0.00"

    def test_expenditure_is_stored_negative(self):
        """Test the sign convention of entries."""
        ledger = Ledger()
        ledger.record_expenditure(500)
        ledger.record_income(700)
        assert ledger.entries() == [-500, 700]

    def test_negative_amounts_are_refused(self):
        """Test that amounts are given unsigned."""
        with pytest.raises(ValueError):
            Ledger().record_income(-1)


class TestPrivilegeOrdering:
    """Tests for privilege comparison."""

    def test_levels_are_ordered(self):
        """Test that higher levels compare greater."""
        assert Privilege.ANONYMOUS < Privilege.CUSTOMER < Privilege.STAFF < Privilege.OWNER
