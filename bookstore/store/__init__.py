"""Record store package."""

from bookstore.store.ledger import FinanceSummary, Ledger, LedgerRangeError
from bookstore.store.record_store import (
    DuplicateKeyError,
    InsufficientStockError,
    RecordNotFoundError,
    RecordStore,
)

__all__ = [
    "DuplicateKeyError",
    "FinanceSummary",
    "InsufficientStockError",
    "Ledger",
    "LedgerRangeError",
    "RecordNotFoundError",
    "RecordStore",
]
