"""
JSON File Storage Implementation

DESIGN DECISION: Plain JSON files in one data directory are the default
storage backend because:
1. The owner can inspect the data with any text editor
2. No database setup required
3. A whole-store snapshot is tiny for a single bookstore

TRADEOFFS:
- Whole files are rewritten on every save (fine at this scale)
- No transactions across files (each file is replaced atomically)

Files:
- accounts.json  list of accounts
- books.json     list of books
- finance.json   list of signed cent amounts
- audit.jsonl    one audit event per line, append-only

The implementation follows the abstract interface, so we can swap
to SQLite later without changing the command core.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from bookstore.config import StorageSettings, get_settings
from bookstore.models.audit import AuditEvent
from bookstore.models.records import Account, Book, RecordSnapshot
from bookstore.services.storage.interface import (
    AuditStorageInterface,
    CorruptDataError,
    RecordStorageInterface,
    StorageError,
    bootstrap_account,
)


class JsonFileClient:
    """
    Low-level file access for the data directory.

    Handles atomic replacement and provides retry logic for writes.
    """

    def __init__(self, settings: Optional[StorageSettings] = None):
        self._settings = settings or get_settings().storage

    @property
    def settings(self) -> StorageSettings:
        return self._settings

    @property
    def data_dir(self) -> Path:
        return self._settings.data_path

    def path_for(self, file_name: str) -> Path:
        return self.data_dir / file_name

    def exists(self, file_name: str) -> bool:
        return self.path_for(file_name).is_file()

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self._settings.save_attempts),
            wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )

    def read_json(self, file_name: str) -> Any:
        """Read and parse a JSON file."""
        path = self.path_for(file_name)
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"Malformed JSON in {path}: {e}")
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")

    def write_json(self, file_name: str, payload: Any) -> None:
        """Replace a file atomically with the JSON encoding of payload."""
        text = json.dumps(payload, ensure_ascii=False, indent=2)
        path = self.path_for(file_name)
        try:
            for attempt in self._retrying():
                with attempt:
                    self._write_atomic(path, text)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}")

    def _write_atomic(self, path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
                f.write("\n")
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def append_line(self, file_name: str, line: str) -> None:
        """Append one line to a text file, creating it if needed."""
        path = self.path_for(file_name)
        try:
            for attempt in self._retrying():
                with attempt:
                    path.parent.mkdir(parents=True, exist_ok=True)
                    with path.open("a", encoding="utf-8") as f:
                        f.write(line + "\n")
        except OSError as e:
            raise StorageError(f"Failed to append to {path}: {e}")

    def read_lines(self, file_name: str) -> list[str]:
        """Non-empty lines of a text file; missing file means no lines."""
        path = self.path_for(file_name)
        if not path.is_file():
            return []
        try:
            with path.open("r", encoding="utf-8") as f:
                return [line.rstrip("\n") for line in f if line.strip()]
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")


class JsonFileRecordStorage(RecordStorageInterface):
    """
    JSON file implementation of record storage.

    Each record set lives in its own file; a missing books or finance
    file means an empty collection, a missing accounts file means a
    brand-new installation.
    """

    def __init__(self, client: Optional[JsonFileClient] = None):
        self._client = client or JsonFileClient()

    def load(self) -> RecordSnapshot:
        settings = self._client.settings

        if self._client.exists(settings.accounts_file):
            accounts = self._parse_list(
                settings.accounts_file, Account.model_validate)
        else:
            accounts = [bootstrap_account()]

        books = []
        if self._client.exists(settings.books_file):
            books = self._parse_list(
                settings.books_file, Book.model_validate)

        ledger = []
        if self._client.exists(settings.finance_file):
            ledger = self._parse_list(settings.finance_file, self._parse_amount)

        return RecordSnapshot(accounts=accounts, books=books, ledger=ledger)

    def save(self, snapshot: RecordSnapshot) -> None:
        settings = self._client.settings
        self._client.write_json(
            settings.accounts_file,
            [account.model_dump(mode="json") for account in snapshot.accounts],
        )
        self._client.write_json(
            settings.books_file,
            [book.model_dump(mode="json") for book in snapshot.books],
        )
        self._client.write_json(settings.finance_file, list(snapshot.ledger))

    def _parse_list(self, file_name: str, parse_item) -> list:
        data = self._client.read_json(file_name)
        if not isinstance(data, list):
            raise CorruptDataError(f"Expected a JSON list in {file_name}")
        try:
            return [parse_item(item) for item in data]
        except (ValidationError, TypeError, ValueError) as e:
            raise CorruptDataError(f"Invalid record in {file_name}: {e}")

    @staticmethod
    def _parse_amount(item: Any) -> int:
        # bool is an int subclass; a stray true/false is corruption
        if isinstance(item, bool) or not isinstance(item, int):
            raise TypeError(f"Ledger entry is not an integer: {item!r}")
        return item


class JsonLinesAuditStorage(AuditStorageInterface):
    """
    JSON-lines implementation of audit storage.

    Events are appended as they happen and read back on demand.
    """

    def __init__(self, client: Optional[JsonFileClient] = None):
        self._client = client or JsonFileClient()

    def append_event(self, event: AuditEvent) -> bool:
        self._client.append_line(self._client.settings.audit_file, event.to_json_line())
        return True

    def _load_events(self) -> list[AuditEvent]:
        events = []
        for line in self._client.read_lines(self._client.settings.audit_file):
            try:
                events.append(AuditEvent.model_validate_json(line))
            except ValidationError as e:
                raise CorruptDataError(f"Invalid audit line: {e}")
        return events

    def get_recent_events(self, limit: Optional[int] = None) -> list[AuditEvent]:
        events = self._load_events()
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events

    def get_events_by_actor(
        self,
        actor: Optional[str] = None,
        actor_privilege: Optional[int] = None,
    ) -> list[AuditEvent]:
        return [
            event for event in self._load_events()
            if (actor is None or event.actor == actor)
            and (actor_privilege is None or event.actor_privilege == actor_privilege)
        ]
