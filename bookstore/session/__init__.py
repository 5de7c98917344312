"""Login session package."""

from bookstore.session.stack import AuthError, SessionStack

__all__ = ["AuthError", "SessionStack"]
