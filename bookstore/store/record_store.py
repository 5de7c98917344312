"""
Record Store

DESIGN DECISION: One object owns all three record sets. It is built from
a storage snapshot at startup, handed to the dispatcher, and turned back
into a snapshot at shutdown. Nothing else mutates accounts, books or the
ledger.

Every public mutation checks its preconditions first and only then
writes, so a failed call leaves the store exactly as it was.
"""

from typing import Optional

from bookstore.errors import CommandRejected, RejectReason
from bookstore.models.records import Account, Book, RecordSnapshot
from bookstore.store.ledger import Ledger


class RecordNotFoundError(CommandRejected):
    """No account or book under that key."""
    reason = RejectReason.NOT_FOUND


class DuplicateKeyError(CommandRejected):
    """An account or book already exists under that key."""
    reason = RejectReason.CONFLICT


class InsufficientStockError(CommandRejected):
    """Not enough copies on hand."""
    reason = RejectReason.INSUFFICIENT_STOCK


class RecordStore:
    """
    Accounts by user id, books by ISBN, and the ledger.
    """

    def __init__(
        self,
        accounts: Optional[list[Account]] = None,
        books: Optional[list[Book]] = None,
        ledger: Optional[list[int]] = None,
    ):
        self._accounts: dict[str, Account] = {a.user_id: a for a in accounts or []}
        self._books: dict[str, Book] = {b.isbn: b for b in books or []}
        self._ledger = Ledger(ledger)

    @classmethod
    def from_snapshot(cls, snapshot: RecordSnapshot) -> "RecordStore":
        copy = snapshot.model_copy(deep=True)
        return cls(accounts=copy.accounts, books=copy.books, ledger=copy.ledger)

    def snapshot(self) -> RecordSnapshot:
        """Deep copy of the current state, in a stable order."""
        return RecordSnapshot(
            accounts=[self._accounts[k].model_copy() for k in sorted(self._accounts)],
            books=[self._books[k].model_copy(deep=True) for k in sorted(self._books)],
            ledger=self._ledger.entries(),
        )

    # ---- accounts

    def get_account(self, user_id: str) -> Optional[Account]:
        return self._accounts.get(user_id)

    def has_account(self, user_id: str) -> bool:
        return user_id in self._accounts

    def require_account(self, user_id: str) -> Account:
        account = self._accounts.get(user_id)
        if account is None:
            raise RecordNotFoundError(f"No account {user_id!r}")
        return account

    def add_account(self, account: Account) -> None:
        if account.user_id in self._accounts:
            raise DuplicateKeyError(f"Account {account.user_id!r} already exists")
        self._accounts[account.user_id] = account

    def delete_account(self, user_id: str) -> Account:
        account = self.require_account(user_id)
        del self._accounts[user_id]
        return account

    def change_password(self, user_id: str, new_password: str) -> None:
        account = self.require_account(user_id)
        # validate_assignment re-checks the identifier contract
        account.password = new_password

    def account_count(self) -> int:
        return len(self._accounts)

    # ---- books

    def get_book(self, isbn: str) -> Optional[Book]:
        return self._books.get(isbn)

    def has_book(self, isbn: str) -> bool:
        return isbn in self._books

    def require_book(self, isbn: str) -> Book:
        book = self._books.get(isbn)
        if book is None:
            raise RecordNotFoundError(f"No book {isbn!r}")
        return book

    def upsert_book(self, isbn: str) -> tuple[Book, bool]:
        """
        Return the book under isbn, creating an empty one if needed.

        Returns:
            (book, created)
        """
        book = self._books.get(isbn)
        if book is not None:
            return book, False
        book = Book(isbn=isbn)
        self._books[isbn] = book
        return book, True

    def replace_book(self, current_isbn: str, updated: Book) -> None:
        """
        Install `updated` in place of the book at `current_isbn`.

        If updated.isbn differs from current_isbn the book is re-keyed:
        the old key disappears and the new one appears in the same step.

        Raises:
            RecordNotFoundError: If there is no book at current_isbn
            DuplicateKeyError: If the new ISBN is already taken
        """
        self.require_book(current_isbn)
        if updated.isbn != current_isbn and updated.isbn in self._books:
            raise DuplicateKeyError(f"Book {updated.isbn!r} already exists")

        if updated.isbn != current_isbn:
            del self._books[current_isbn]
        self._books[updated.isbn] = updated

    def books_sorted(self) -> list[Book]:
        """All books in ascending ISBN order."""
        return [self._books[k] for k in sorted(self._books)]

    def book_count(self) -> int:
        return len(self._books)

    # ---- stock and money

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    def receive_stock(self, isbn: str, quantity: int, cost: int) -> Book:
        """Add copies bought in for `cost` cents and record the expenditure."""
        if quantity <= 0 or cost <= 0:
            raise ValueError("Quantity and cost must be positive")
        book = self.require_book(isbn)
        updated = book.model_copy(update={"stock": book.stock + quantity})
        self._books[isbn] = updated
        self._ledger.record_expenditure(cost)
        return updated

    def sell(self, isbn: str, quantity: int) -> int:
        """
        Sell copies at the current price and record the income.

        Returns:
            The sale total in cents
        """
        if quantity <= 0:
            raise ValueError("Quantity must be positive")
        book = self.require_book(isbn)
        if book.stock < quantity:
            raise InsufficientStockError(
                f"Book {isbn!r} has {book.stock} copies, {quantity} requested"
            )
        total = book.price * quantity
        self._books[isbn] = book.model_copy(update={"stock": book.stock - quantity})
        self._ledger.record_income(total)
        return total
