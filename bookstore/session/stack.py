"""
Login Session Stack

DESIGN DECISION: Logins nest. `su` pushes a context, `logout` pops it, and
the caller's identity falls back to whatever is underneath. An empty stack
is an explicit state (anonymous, privilege 0), not a placeholder element.

Authorization always uses the privilege SNAPSHOT taken when the context
was pushed. It is never re-read from the account during the session.
"""

from typing import Iterator, Optional

from bookstore.errors import CommandRejected, RejectReason
from bookstore.models.records import Privilege, SessionContext
from bookstore.store.record_store import RecordStore
from bookstore.validation import FieldValidationError, validate_identifier


class AuthError(CommandRejected):
    """Login or logout refused."""
    reason = RejectReason.AUTHENTICATION


class SessionStack:
    """
    Ordered stack of active login contexts; the top one is current.

    The stack only references account ids and book ISBNs. Account
    details are looked up in the record store at login time.
    """

    def __init__(self, store: RecordStore):
        self._store = store
        self._contexts: list[SessionContext] = []

    def __len__(self) -> int:
        return len(self._contexts)

    def __iter__(self) -> Iterator[SessionContext]:
        return iter(self._contexts)

    @property
    def current(self) -> Optional[SessionContext]:
        """Top context, or None when nobody is logged in."""
        return self._contexts[-1] if self._contexts else None

    @property
    def current_privilege(self) -> Privilege:
        top = self.current
        return top.privilege if top else Privilege.ANONYMOUS

    @property
    def current_user_id(self) -> Optional[str]:
        top = self.current
        return top.user_id if top else None

    @property
    def selected_isbn(self) -> Optional[str]:
        top = self.current
        return top.selected_isbn if top else None

    def push(self, user_id: str, password: Optional[str] = None) -> SessionContext:
        """
        Log in on top of the current session.

        With a password it must match exactly. Without one, the current
        session must strictly outrank the target account.

        Raises:
            AuthError: On a bad identifier, unknown account, wrong
                password or insufficient privilege to skip the password
        """
        try:
            validate_identifier(user_id, "user_id")
        except FieldValidationError as e:
            raise AuthError(f"Bad user id: {e.message}")

        account = self._store.get_account(user_id)
        if account is None:
            raise AuthError(f"No account {user_id!r}")

        if password is None:
            if self.current_privilege <= account.privilege:
                raise AuthError(f"Password required to log in as {user_id!r}")
        elif password != account.password:
            raise AuthError(f"Wrong password for {user_id!r}")

        context = SessionContext(user_id=user_id, privilege=account.privilege)
        self._contexts.append(context)
        return context

    def pop(self) -> SessionContext:
        """
        Log out of the current session.

        Raises:
            AuthError: If nobody is logged in
        """
        if not self._contexts:
            raise AuthError("Nobody is logged in")
        return self._contexts.pop()

    def contains(self, user_id: str) -> bool:
        """Is this user logged in anywhere in the stack, not only on top?"""
        return any(ctx.user_id == user_id for ctx in self._contexts)

    def select(self, isbn: str) -> None:
        top = self.current
        if top is None:
            raise AuthError("Nobody is logged in")
        top.selected_isbn = isbn

    def retarget(self, old_isbn: str, new_isbn: str) -> int:
        """
        Point every selection of old_isbn at new_isbn.

        Called when a book is re-keyed so that no context keeps a
        selection of an ISBN that no longer exists.

        Returns:
            Number of contexts updated
        """
        updated = 0
        for ctx in self._contexts:
            if ctx.selected_isbn == old_isbn:
                ctx.selected_isbn = new_isbn
                updated += 1
        return updated

    def clear(self) -> None:
        self._contexts.clear()
