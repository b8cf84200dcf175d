"""
Database models for Libraria.

Design Decisions:
1. Soft deletes: users and books carry an is_active flag and are never removed
2. Partial uniqueness: (title, author, publisher) is unique among active books only
3. Reservations reference users and books by id, with no cascades
"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    Column,
    String,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Enum as SQLEnum,
    func,
    true,
)
from sqlalchemy.orm import declarative_base, validates

Base = declarative_base()


class Role(str, Enum):
    """Closed set of user roles."""
    READER = "reader"
    EDITOR = "editor"
    ADMIN = "admin"


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored by the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return str(uuid.uuid4())


def fold_title(value: str) -> str:
    """Unicode-aware case folding, so 'Ángela' and 'ángela' compare equal."""
    return value.casefold()


class UserModel(Base):
    """User account. Email is unique across active and inactive rows."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(
        SQLEnum(Role, native_enum=False, length=20, values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=Role.READER,
    )
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class BookModel(Base):
    """Catalog entry."""
    __tablename__ = "books"

    id = Column(String(36), primary_key=True, default=new_id)

    title = Column(String(500), nullable=False, index=True)
    # Case-folded copy of title for the case-insensitive filter
    title_search = Column(String(1000), nullable=False, index=True)
    author = Column(String(500), nullable=False, index=True)
    genre = Column(String(200), index=True)
    publisher = Column(String(200))
    publication_date = Column(Date)

    is_available = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @validates("title")
    def _fold_title(self, key, value):
        self.title_search = fold_title(value) if value is not None else None
        return value

    def summary(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "publisher": self.publisher,
        }


# Same scope as the application-level duplicate check: active rows only,
# with a missing publisher treated as an empty one.
Index(
    "uq_books_active_title_author_publisher",
    BookModel.title,
    BookModel.author,
    func.coalesce(BookModel.publisher, ""),
    unique=True,
    sqlite_where=BookModel.is_active == true(),
    postgresql_where=BookModel.is_active == true(),
)


class ReservationModel(Base):
    """Ledger entry linking a user to a book. Never updated or deleted."""
    __tablename__ = "reservations"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    book_id = Column(String(36), ForeignKey("books.id"), nullable=False, index=True)
    reserved_at = Column(DateTime, nullable=False, default=utcnow)
    due_date = Column(DateTime)
    created_at = Column(DateTime, default=utcnow)
