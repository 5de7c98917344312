"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
JSON files are the default backend, in-memory storage serves tests.
"""

from bookstore.services.storage.interface import (
    AuditStorageInterface,
    CorruptDataError,
    RecordStorageInterface,
    StorageError,
    bootstrap_account,
)
from bookstore.services.storage.json_files import (
    JsonFileClient,
    JsonFileRecordStorage,
    JsonLinesAuditStorage,
)
from bookstore.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryRecordStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "RecordStorageInterface",
    "bootstrap_account",
    # Exceptions
    "CorruptDataError",
    "StorageError",
    # JSON file implementation
    "JsonFileClient",
    "JsonFileRecordStorage",
    "JsonLinesAuditStorage",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryRecordStorage",
]
