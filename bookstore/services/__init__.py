"""Services package."""

from bookstore.services.storage import (
    AuditStorageInterface,
    CorruptDataError,
    InMemoryAuditStorage,
    InMemoryRecordStorage,
    JsonFileClient,
    JsonFileRecordStorage,
    JsonLinesAuditStorage,
    RecordStorageInterface,
    StorageError,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "CorruptDataError",
    "InMemoryAuditStorage",
    "InMemoryRecordStorage",
    "JsonFileClient",
    "JsonFileRecordStorage",
    "JsonLinesAuditStorage",
    "RecordStorageInterface",
    "StorageError",
]
