"""
Core Record Models for Bookstore Console

These models define the strict schemas for the three persistent record
sets (accounts, books, ledger) and for the transient session context.
They are designed to:
1. Enforce the field contracts at runtime, also for data read from disk
2. Be serializable for persistence
3. Keep money in integer cents, never floats

DESIGN DECISION: The field validators reuse bookstore.validation, so a
record loaded from storage obeys exactly the same rules as one typed in
at the command line.
"""

from enum import IntEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from bookstore.validation import (
    ALLOWED_PRIVILEGES,
    KEYWORD_SEPARATOR,
    validate_free_text,
    validate_identifier,
    validate_isbn,
    validate_keywords,
    validate_username,
)


# =============================================================================
# ENUMS
# =============================================================================

class Privilege(IntEnum):
    """
    Access levels.

    Higher levels permit a superset of the operations of lower ones.
    ANONYMOUS is never stored on an account; it is what an empty
    session stack reports.
    """
    ANONYMOUS = 0
    CUSTOMER = 1
    STAFF = 3
    OWNER = 7


def format_currency(cents: int) -> str:
    """Render integer cents with exactly two decimals, e.g. 3750 -> '37.50'."""
    sign = "-" if cents < 0 else ""
    whole, frac = divmod(abs(cents), 100)
    return f"{sign}{whole}.{frac:02d}"


# =============================================================================
# ACCOUNTS
# =============================================================================

class Account(BaseModel):
    """
    A user account.

    Created by register/useradd (or the bootstrap), mutated only by
    passwd, removed only by delete.
    """
    model_config = ConfigDict(validate_assignment=True)

    user_id: str
    password: str
    username: str
    privilege: Privilege = Privilege.CUSTOMER

    @field_validator('user_id')
    @classmethod
    def check_user_id(cls, v: str) -> str:
        return validate_identifier(v, "user_id")

    @field_validator('password')
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_identifier(v, "password")

    @field_validator('username')
    @classmethod
    def check_username(cls, v: str) -> str:
        return validate_username(v, "username")

    @field_validator('privilege')
    @classmethod
    def check_privilege(cls, v: Privilege) -> Privilege:
        if int(v) not in ALLOWED_PRIVILEGES:
            raise ValueError(f"Accounts cannot hold privilege {int(v)}")
        return v


# =============================================================================
# BOOKS
# =============================================================================

class Book(BaseModel):
    """
    A book in the inventory.

    Every field except the ISBN starts empty/zero: a book comes into
    existence the first time a staff member selects an unknown ISBN.
    """

    isbn: str
    name: str = ""
    author: str = ""
    keywords: list[str] = Field(default_factory=list)
    price: int = Field(
        default=0,
        ge=0,
        description="Unit price in cents"
    )
    stock: int = Field(
        default=0,
        ge=0,
        description="Copies on hand"
    )

    @field_validator('isbn')
    @classmethod
    def check_isbn(cls, v: str) -> str:
        return validate_isbn(v)

    @field_validator('name', 'author')
    @classmethod
    def check_text(cls, v: str, info: ValidationInfo) -> str:
        return validate_free_text(v, info.field_name)

    @field_validator('keywords')
    @classmethod
    def check_keywords(cls, v: list[str]) -> list[str]:
        if not v:
            return []
        return validate_keywords(KEYWORD_SEPARATOR.join(v))

    @property
    def keyword_text(self) -> str:
        return KEYWORD_SEPARATOR.join(self.keywords)

    def has_keyword(self, keyword: str) -> bool:
        return keyword in self.keywords

    def to_row(self) -> str:
        """Tab-separated listing row: isbn, name, author, keywords, price, stock."""
        return "\t".join([
            self.isbn,
            self.name,
            self.author,
            self.keyword_text,
            format_currency(self.price),
            str(self.stock),
        ])


# =============================================================================
# SESSION
# =============================================================================

class SessionContext(BaseModel):
    """
    One nested login.

    The privilege is a snapshot taken at login time and is never re-read
    from the account while this context lives.
    """

    user_id: str
    privilege: Privilege
    selected_isbn: Optional[str] = None


# =============================================================================
# PERSISTENCE
# =============================================================================

class RecordSnapshot(BaseModel):
    """Full contents of the record store, as handed to and from storage."""

    accounts: list[Account] = Field(default_factory=list)
    books: list[Book] = Field(default_factory=list)
    ledger: list[int] = Field(
        default_factory=list,
        description="Signed cent amounts, income positive, expenditure negative"
    )
