"""
Query Execution Engine

DESIGN DECISION: Queries never mutate anything. They read the record store
(and, for the owner's reports, the audit trail) and return a QueryResult
whose rows are exactly the lines to print.

An empty result is not an error: it prints a single blank line.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from bookstore.models.records import Book, Privilege, format_currency
from bookstore.services.storage import AuditStorageInterface
from bookstore.store import RecordStore


class BookFilter(str, Enum):
    """Fields a book listing can be filtered on. Values are the option keys."""
    ISBN = "ISBN"
    NAME = "name"
    AUTHOR = "author"
    KEYWORD = "keyword"


class BookQuery(BaseModel):
    """At most one equality / membership filter."""

    filter_by: Optional[BookFilter] = None
    value: Optional[str] = None

    def matches(self, book: Book) -> bool:
        if self.filter_by is None:
            return True
        if self.filter_by == BookFilter.ISBN:
            return book.isbn == self.value
        if self.filter_by == BookFilter.NAME:
            return book.name == self.value
        if self.filter_by == BookFilter.AUTHOR:
            return book.author == self.value
        return book.has_keyword(self.value)

    def describe(self) -> str:
        if self.filter_by is None:
            return "all books"
        return f"books with {self.filter_by.value} = {self.value!r}"


class QueryResult(BaseModel):
    """Result of executing a query: the rows to print and what was asked."""

    result_count: int = Field(ge=0)
    rows: list[str] = Field(default_factory=list)
    query_description: str

    def to_output(self) -> str:
        """Rows joined by newlines; no rows gives the empty (blank) line."""
        return "\n".join(self.rows)


class QueryExecutor:
    """
    Executes read-only queries against the record store.

    GUARANTEES:
    - Only returns real stored data
    - Books always come back in ascending ISBN order
    - Clear blank result if nothing matches
    """

    def __init__(
        self,
        store: RecordStore,
        audit_storage: Optional[AuditStorageInterface] = None,
    ):
        self._store = store
        self._audit_storage = audit_storage

    def find_books(self, query: BookQuery) -> list[Book]:
        if query.filter_by == BookFilter.ISBN:
            book = self._store.get_book(query.value)
            return [book] if book else []
        return [book for book in self._store.books_sorted() if query.matches(book)]

    def execute_show(self, query: BookQuery) -> QueryResult:
        books = self.find_books(query)
        return QueryResult(
            result_count=len(books),
            rows=[book.to_row() for book in books],
            query_description=f"Listing {query.describe()}",
        )

    def execute_finance(self, count: Optional[int] = None) -> QueryResult:
        """
        Income/expenditure summary of the whole ledger or its last `count` entries.

        A count of zero yields the blank line rather than a zero summary.
        """
        if count == 0:
            return QueryResult(result_count=0, query_description="Finance over no entries")

        summary = self._store.ledger.summarize(count)
        scope = "the whole ledger" if count is None else f"the last {count} entries"
        return QueryResult(
            result_count=1,
            rows=[summary.to_line()],
            query_description=f"Finance over {scope}",
        )

    def execute_finance_report(self) -> QueryResult:
        """Every ledger entry in order, then the overall summary."""
        entries = self._store.ledger.entries()
        if not entries:
            return QueryResult(result_count=0, query_description="Finance report (empty ledger)")

        rows = []
        for n, amount in enumerate(entries, start=1):
            sign = "+" if amount >= 0 else "-"
            rows.append(f"{n}\t{sign} {format_currency(abs(amount))}")
        rows.append(self._store.ledger.summarize().to_line())
        return QueryResult(
            result_count=len(entries),
            rows=rows,
            query_description="Finance report",
        )

    def execute_employee_report(self) -> QueryResult:
        """Audited commands performed by staff sessions."""
        events = []
        if self._audit_storage is not None:
            events = self._audit_storage.get_events_by_actor(actor_privilege=int(Privilege.STAFF))
        return QueryResult(
            result_count=len(events),
            rows=[f"{event.actor}\t{event.description}" for event in events],
            query_description="Employee report",
        )

    def execute_log(self) -> QueryResult:
        """The whole audit trail."""
        events = []
        if self._audit_storage is not None:
            events = self._audit_storage.get_recent_events()
        return QueryResult(
            result_count=len(events),
            rows=[event.to_listing_row() for event in events],
            query_description="Audit log",
        )
