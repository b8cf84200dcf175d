"""
Storage Module for Libraria

Persistent storage for users, books and reservations:
- SQLAlchemy async ORM models
- Repositories per collection
"""

from libraria.storage.models import (
    Base,
    Role,
    UserModel,
    BookModel,
    ReservationModel,
)
from libraria.storage.user_repository import UserRepository
from libraria.storage.book_repository import (
    BookRepository,
    BookFilters,
)
from libraria.storage.reservation_repository import ReservationRepository
from libraria.storage.errors import is_unique_violation

__all__ = [
    # Models
    "Base",
    "Role",
    "UserModel",
    "BookModel",
    "ReservationModel",
    # Repositories
    "UserRepository",
    "BookRepository",
    "BookFilters",
    "ReservationRepository",
    # Errors
    "is_unique_violation",
]
