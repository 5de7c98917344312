"""
Main Orchestrator for Bookstore Console

This module ties together all the components and defines the
end-to-end flow of one run:
load records -> read lines -> dispatch -> print -> save records

DESIGN DECISION: The orchestrator enforces the boundaries:
- Exactly one output line per rejected command, and it is always the
  invalid marker
- Records are persisted once, when `quit`/`exit` is read or input ends
- Nothing but command output is ever written to stdout

This is the "glue" that ensures the system behaves the same whichever
storage backend is plugged in.
"""

import io
import sys
from typing import Iterable, Optional, TextIO

import structlog

from bookstore.audit import AuditLogger, configure_logging
from bookstore.commands import CommandDispatcher
from bookstore.config import get_settings, validate_all_settings
from bookstore.services.storage import (
    InMemoryAuditStorage,
    InMemoryRecordStorage,
    JsonFileClient,
    JsonFileRecordStorage,
    JsonLinesAuditStorage,
    RecordStorageInterface,
    StorageError,
)
from bookstore.store import RecordStore


logger = structlog.get_logger("bookstore.orchestrator")


class CommandFlow:
    """
    Orchestrates one interpreter run.

    Flow:
    1. Load    -> snapshot from record storage into a RecordStore
    2. Execute -> each input line through the dispatcher
    3. Print   -> the command's output lines, or the invalid marker
    4. Save    -> snapshot back to record storage on quit/exit or EOF
    """

    def __init__(
        self,
        record_storage: RecordStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        invalid_marker: Optional[str] = None,
    ):
        self._record_storage = record_storage
        self._audit_logger = audit_logger or AuditLogger()
        self._invalid_marker = invalid_marker or get_settings().app.invalid_marker

        self._store = RecordStore.from_snapshot(record_storage.load())
        self._dispatcher = CommandDispatcher(self._store, audit_logger=self._audit_logger)
        self._finished = False

    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def dispatcher(self) -> CommandDispatcher:
        return self._dispatcher

    @property
    def finished(self) -> bool:
        return self._finished

    def run_line(self, line: str) -> tuple[list[str], bool]:
        """
        Execute one line.

        Returns:
            (output_lines, terminate)
        """
        result = self._dispatcher.execute(line)
        if result is None:
            return [], False
        return result.output_lines(self._invalid_marker), result.terminate

    def run(self, lines: Iterable[str], out: TextIO) -> None:
        """
        Execute lines until quit/exit or end of input, then persist.

        The records are saved even when the loop is cut short by an error.
        """
        try:
            for line in lines:
                output, terminate = self.run_line(line)
                for text in output:
                    out.write(text + "\n")
                if terminate:
                    break
        finally:
            out.flush()
            self.shutdown()

    def shutdown(self) -> None:
        """
        Persist the record store and drop every login.

        Safe to call more than once; only the first call saves.
        """
        if self._finished:
            return

        snapshot = self._store.snapshot()
        self._record_storage.save(snapshot)
        self._dispatcher.sessions.clear()
        self._finished = True

        self._audit_logger.log_records_saved(
            accounts=len(snapshot.accounts),
            books=len(snapshot.books),
            ledger_entries=len(snapshot.ledger),
        )


def create_app_components(
    use_storage: bool = True,
) -> tuple[CommandFlow, Optional[JsonFileClient]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use the JSON files in the data directory.
                    Set to False for a throwaway in-memory run.

    Returns:
        (command_flow, file_client)
    """
    if use_storage:
        file_client = JsonFileClient()
        record_storage = JsonFileRecordStorage(file_client)
        audit_logger = AuditLogger(JsonLinesAuditStorage(file_client))
    else:
        file_client = None
        record_storage = InMemoryRecordStorage()
        audit_logger = AuditLogger(InMemoryAuditStorage())

    command_flow = CommandFlow(record_storage, audit_logger=audit_logger)
    return command_flow, file_client


def _utf8(stream: TextIO, errors: str = "strict") -> TextIO:
    if isinstance(stream, io.TextIOWrapper):
        stream.reconfigure(encoding="utf-8", errors=errors)
    return stream


def main(stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> int:
    """Console entry point: commands on stdin, results on stdout."""
    failures = {k: v for k, v in validate_all_settings().items() if k.endswith("_error")}
    if failures:
        configure_logging("WARNING")
        logger.error("invalid_settings", **failures)
        return 1
    configure_logging(get_settings().app.log_level)

    # Undecodable bytes become lone surrogates, which every validator rejects
    stdin = stdin or _utf8(sys.stdin, errors="surrogateescape")
    stdout = stdout or _utf8(sys.stdout)

    try:
        command_flow, _ = create_app_components()
        command_flow.run(stdin, stdout)
    except StorageError as e:
        AuditLogger().log_error(type(e).__name__, str(e), {"stage": "records"})
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
