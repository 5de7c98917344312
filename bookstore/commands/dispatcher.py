"""
Command Dispatcher

Routes one input line to its handler and turns the outcome into a
CommandResult.

Every handler follows the same order:
1. Structure   - argument count / option parsing
2. Authority   - privilege snapshot of the current session, selection
3. Fields      - every value through its validator
4. Preconditions against the records (existence, conflicts, stock)
5. Commit      - only now is anything written

A CommandRejected raised in steps 1-4 aborts the command before any
mutation. The result then carries the internal reason, while the user
only ever sees the single "Invalid" line.
"""

from typing import Callable, Optional

from pydantic import BaseModel

from bookstore.audit import AuditLogger
from bookstore.commands.tokenizer import (
    OptionError,
    Token,
    is_blank,
    parse_options,
    tokenize,
)
from bookstore.errors import (
    CommandRejected,
    FormatError,
    PermissionDenied,
    RejectReason,
    UnknownCommandError,
)
from bookstore.models.records import Account, Book, Privilege, format_currency
from bookstore.queries import BookFilter, BookQuery, QueryExecutor, QueryResult
from bookstore.services.storage import StorageError
from bookstore.session import AuthError, SessionStack
from bookstore.store import DuplicateKeyError, RecordStore
from bookstore.validation import (
    FieldValidationError,
    parse_currency,
    parse_integer,
    parse_privilege,
    validate_free_text,
    validate_identifier,
    validate_isbn,
    validate_keywords,
    validate_single_keyword,
    validate_username,
)


MODIFY_OPTIONS = frozenset({"ISBN", "name", "author", "keyword", "price"})
SHOW_OPTIONS = frozenset({"ISBN", "name", "author", "keyword"})
TERMINATING_COMMANDS = frozenset({"quit", "exit"})
REPORT_KINDS = frozenset({"finance", "employee"})


class AccountInUseError(CommandRejected):
    """The account is logged in somewhere in the session stack."""
    reason = RejectReason.CONFLICT


class CommandResult(BaseModel):
    """
    Outcome of one command.

    output is None when the command prints nothing; an empty string
    means a single blank line.
    """

    command: str
    success: bool
    output: Optional[str] = None
    terminate: bool = False
    reason: Optional[RejectReason] = None
    message: Optional[str] = None

    def output_lines(self, invalid_marker: str = "Invalid") -> list[str]:
        if not self.success:
            return [invalid_marker]
        if self.output is None:
            return []
        return self.output.split("\n")


Handler = Callable[[list[Token]], Optional[str]]


class CommandDispatcher:
    """
    Parses, authorizes and executes command lines.

    The dispatcher owns the session stack; the record store is passed in
    and is the only place any record is changed.
    """

    def __init__(
        self,
        store: RecordStore,
        sessions: Optional[SessionStack] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._sessions = sessions or SessionStack(store)
        self._audit = audit_logger or AuditLogger()
        self._queries = QueryExecutor(store, self._audit.storage)
        self._handlers: dict[str, Handler] = {
            "su": self._handle_su,
            "logout": self._handle_logout,
            "register": self._handle_register,
            "passwd": self._handle_passwd,
            "useradd": self._handle_useradd,
            "delete": self._handle_delete,
            "select": self._handle_select,
            "modify": self._handle_modify,
            "import": self._handle_import,
            "buy": self._handle_buy,
            "show": self._handle_show,
            "report": self._handle_report,
            "log": self._handle_log,
            "quit": self._handle_quit,
            "exit": self._handle_quit,
        }

    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def sessions(self) -> SessionStack:
        return self._sessions

    def execute(self, line: str) -> Optional[CommandResult]:
        """
        Run one input line.

        Returns:
            None for a blank line, otherwise the CommandResult
        """
        line = line.rstrip("\r\n")
        if is_blank(line):
            return None

        command = ""
        try:
            tokens = tokenize(line)
            command = tokens[0].text
            handler = self._handlers.get(command)
            if handler is None:
                raise UnknownCommandError(f"Unknown command {command!r}")
            output = handler(tokens[1:])
        except CommandRejected as e:
            actor, privilege = self._actor()
            self._audit.log_command_rejected(actor, privilege, command, e.reason.value, e.message)
            return CommandResult(
                command=command,
                success=False,
                reason=e.reason,
                message=e.message,
            )
        except StorageError as e:
            # Only queries read storage; the records themselves are untouched
            self._audit.log_error(type(e).__name__, str(e), {"command": command})
            return CommandResult(
                command=command,
                success=False,
                reason=RejectReason.STORAGE,
                message=str(e),
            )

        return CommandResult(
            command=command,
            success=True,
            output=output,
            terminate=command in TERMINATING_COMMANDS,
        )

    # ---- helpers

    def _actor(self) -> tuple[Optional[str], int]:
        return self._sessions.current_user_id, int(self._sessions.current_privilege)

    @staticmethod
    def _expect_arg_count(args: list[Token], *allowed: int) -> list[str]:
        if len(args) not in allowed:
            raise FormatError(f"Expected {' or '.join(map(str, allowed))} arguments, got {len(args)}")
        return [token.text for token in args]

    def _require_privilege(self, minimum: Privilege) -> None:
        if self._sessions.current_privilege < minimum:
            raise PermissionDenied(f"Requires privilege {int(minimum)}")

    def _require_selection(self) -> str:
        isbn = self._sessions.selected_isbn
        if isbn is None:
            raise PermissionDenied("No book selected")
        return isbn

    @staticmethod
    def _positive(value: int, field: str) -> int:
        if value <= 0:
            raise FieldValidationError(field, "must be positive")
        return value

    # ---- session

    def _handle_su(self, args: list[Token]) -> None:
        values = self._expect_arg_count(args, 1, 2)
        user_id = values[0]
        password = values[1] if len(values) == 2 else None

        previous_actor = self._sessions.current_user_id
        context = self._sessions.push(user_id, password)
        self._audit.log_login(
            context.user_id, int(context.privilege), previous_actor, password is not None)

    def _handle_logout(self, args: list[Token]) -> None:
        self._expect_arg_count(args, 0)
        context = self._sessions.pop()
        self._audit.log_logout(context.user_id, int(context.privilege))

    # ---- accounts

    def _handle_register(self, args: list[Token]) -> None:
        user_id, password, username = self._expect_arg_count(args, 3)
        validate_identifier(user_id, "user_id")
        validate_identifier(password, "password")
        validate_username(username, "username")

        self._store.add_account(Account(
            user_id=user_id,
            password=password,
            username=username,
            privilege=Privilege.CUSTOMER,
        ))
        self._audit.log_account_registered(user_id)

    def _handle_passwd(self, args: list[Token]) -> None:
        values = self._expect_arg_count(args, 2, 3)
        user_id = validate_identifier(values[0], "user_id")
        account = self._store.require_account(user_id)
        is_owner = self._sessions.current_privilege >= Privilege.OWNER

        if len(values) == 2:
            if not is_owner:
                raise PermissionDenied("Only the owner may skip the current password")
            new_password = validate_identifier(values[1], "new_password")
        else:
            current_password = validate_identifier(values[1], "current_password")
            new_password = validate_identifier(values[2], "new_password")
            if not is_owner and current_password != account.password:
                raise AuthError(f"Wrong current password for {user_id!r}")

        self._store.change_password(user_id, new_password)
        actor, privilege = self._actor()
        self._audit.log_password_changed(actor, privilege, user_id)

    def _handle_useradd(self, args: list[Token]) -> None:
        user_id, password, privilege_text, username = self._expect_arg_count(args, 4)
        self._require_privilege(Privilege.STAFF)
        validate_identifier(user_id, "user_id")
        validate_identifier(password, "password")
        validate_username(username, "username")
        privilege = Privilege(parse_privilege(privilege_text))

        if privilege >= self._sessions.current_privilege:
            raise PermissionDenied("New accounts must rank below their creator")
        if self._store.has_account(user_id):
            raise DuplicateKeyError(f"Account {user_id!r} already exists")

        self._store.add_account(Account(
            user_id=user_id,
            password=password,
            username=username,
            privilege=privilege,
        ))
        actor, actor_privilege = self._actor()
        self._audit.log_account_created(actor, actor_privilege, user_id, int(privilege))

    def _handle_delete(self, args: list[Token]) -> None:
        (user_id,) = self._expect_arg_count(args, 1)
        self._require_privilege(Privilege.OWNER)
        validate_identifier(user_id, "user_id")
        self._store.require_account(user_id)
        if self._sessions.contains(user_id):
            raise AccountInUseError(f"Account {user_id!r} is logged in")

        self._store.delete_account(user_id)
        actor, privilege = self._actor()
        self._audit.log_account_deleted(actor, privilege, user_id)

    # ---- books

    def _handle_select(self, args: list[Token]) -> None:
        (isbn,) = self._expect_arg_count(args, 1)
        self._require_privilege(Privilege.STAFF)
        validate_isbn(isbn)

        _, created = self._store.upsert_book(isbn)
        self._sessions.select(isbn)
        actor, privilege = self._actor()
        self._audit.log_book_selected(actor, privilege, isbn, created)

    def _handle_modify(self, args: list[Token]) -> None:
        if not args:
            raise FormatError("modify needs at least one option")
        self._require_privilege(Privilege.STAFF)
        selected = self._require_selection()
        options = parse_options(args, MODIFY_OPTIONS)

        changes = {}
        if "ISBN" in options:
            changes["isbn"] = validate_isbn(options["ISBN"])
        if "name" in options:
            changes["name"] = validate_free_text(options["name"], "name")
        if "author" in options:
            changes["author"] = validate_free_text(options["author"], "author")
        if "keyword" in options:
            changes["keywords"] = validate_keywords(options["keyword"])
        if "price" in options:
            changes["price"] = parse_currency(options["price"])

        current = self._store.require_book(selected)
        new_isbn = changes.get("isbn", current.isbn)
        if new_isbn != current.isbn and self._store.has_book(new_isbn):
            raise DuplicateKeyError(f"Book {new_isbn!r} already exists")

        updated = Book(**{**current.model_dump(), **changes})

        # Commit: the re-key and every selection pointer move together
        self._store.replace_book(current.isbn, updated)
        self._sessions.retarget(current.isbn, updated.isbn)

        actor, privilege = self._actor()
        self._audit.log_book_modified(actor, privilege, updated.isbn, {
            key: format_currency(value) if key == "price" else value
            for key, value in changes.items()
        })

    def _handle_import(self, args: list[Token]) -> None:
        quantity_text, cost_text = self._expect_arg_count(args, 2)
        self._require_privilege(Privilege.STAFF)
        selected = self._require_selection()
        quantity = self._positive(parse_integer(quantity_text, "quantity"), "quantity")
        cost = self._positive(parse_currency(cost_text, "total_cost"), "total_cost")

        self._store.receive_stock(selected, quantity, cost)
        actor, privilege = self._actor()
        self._audit.log_book_imported(actor, privilege, selected, quantity, format_currency(cost))

    def _handle_buy(self, args: list[Token]) -> str:
        isbn, quantity_text = self._expect_arg_count(args, 2)
        self._require_privilege(Privilege.CUSTOMER)
        validate_isbn(isbn)
        quantity = self._positive(parse_integer(quantity_text, "quantity"), "quantity")
        self._store.require_book(isbn)

        total = format_currency(self._store.sell(isbn, quantity))
        actor, privilege = self._actor()
        self._audit.log_book_sold(actor, privilege, isbn, quantity, total)
        return total

    # ---- queries

    def _handle_show(self, args: list[Token]) -> str:
        if args and args[0].text == "finance":
            return self._handle_show_finance(args[1:])

        self._require_privilege(Privilege.CUSTOMER)
        options = parse_options(args, SHOW_OPTIONS)
        if len(options) > 1:
            raise OptionError("show accepts one filter at most")

        query = BookQuery()
        for key, value in options.items():
            if key == "ISBN":
                value = validate_isbn(value)
            elif key == "keyword":
                value = validate_single_keyword(value)
            else:
                value = validate_free_text(value, key)
            query = BookQuery(filter_by=BookFilter(key), value=value)

        result = self._queries.execute_show(query)
        self._log_query("show", result)
        return result.to_output()

    def _handle_show_finance(self, args: list[Token]) -> str:
        self._require_privilege(Privilege.OWNER)
        values = self._expect_arg_count(args, 0, 1)
        count = parse_integer(values[0], "count") if values else None

        result = self._queries.execute_finance(count)
        self._log_query("show finance", result)
        return result.to_output()

    def _handle_report(self, args: list[Token]) -> str:
        (kind,) = self._expect_arg_count(args, 1)
        if kind not in REPORT_KINDS:
            raise FormatError(f"Unknown report {kind!r}")
        self._require_privilege(Privilege.OWNER)

        if kind == "finance":
            result = self._queries.execute_finance_report()
        else:
            result = self._queries.execute_employee_report()
        self._log_query(f"report {kind}", result)
        return result.to_output()

    def _handle_log(self, args: list[Token]) -> str:
        self._expect_arg_count(args, 0)
        self._require_privilege(Privilege.OWNER)

        result = self._queries.execute_log()
        self._log_query("log", result)
        return result.to_output()

    def _log_query(self, command: str, result: QueryResult) -> None:
        actor, privilege = self._actor()
        self._audit.log_query_executed(
            actor, privilege, command, result.result_count, result.query_description)

    # ---- termination

    def _handle_quit(self, args: list[Token]) -> None:
        # Arguments are ignored; the orchestrator persists and stops.
        return None
