"""
Financial Ledger

An append-only sequence of signed cent amounts: every sale adds a
positive entry, every import a negative one. Entries are never edited
or removed.
"""

from typing import Iterable, Iterator, Optional

from pydantic import BaseModel, Field

from bookstore.errors import CommandRejected, RejectReason
from bookstore.models.records import format_currency


class LedgerRangeError(CommandRejected):
    """Asked for more entries than the ledger holds."""
    reason = RejectReason.OUT_OF_RANGE


class FinanceSummary(BaseModel):
    """Income and expenditure totals over a run of ledger entries."""

    income: int = Field(default=0, ge=0, description="Sum of positive entries, in cents")
    expenditure: int = Field(default=0, ge=0, description="Sum of negative entries as a positive number, in cents")
    entry_count: int = Field(default=0, ge=0)

    def to_line(self) -> str:
        return f"+ {format_currency(self.income)} - {format_currency(self.expenditure)}"


class Ledger:
    """Append-only list of signed amounts."""

    def __init__(self, entries: Optional[Iterable[int]] = None):
        self._entries: list[int] = list(entries or [])

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    def record_income(self, amount: int) -> None:
        if amount < 0:
            raise ValueError("Income cannot be negative")
        self._entries.append(amount)

    def record_expenditure(self, amount: int) -> None:
        if amount < 0:
            raise ValueError("Expenditure cannot be negative")
        self._entries.append(-amount)

    def summarize(self, count: Optional[int] = None) -> FinanceSummary:
        """
        Sum income and expenditure.

        Args:
            count: Only the newest `count` entries; None means the whole ledger.

        Raises:
            LedgerRangeError: If count exceeds the number of entries
        """
        if count is None:
            window = self._entries
        elif count < 0 or count > len(self._entries):
            raise LedgerRangeError(
                f"Requested {count} entries but the ledger holds {len(self._entries)}"
            )
        else:
            window = self._entries[len(self._entries) - count:]

        income = sum(v for v in window if v >= 0)
        expenditure = -sum(v for v in window if v < 0)
        return FinanceSummary(income=income, expenditure=expenditure, entry_count=len(window))

    def entries(self) -> list[int]:
        return list(self._entries)
