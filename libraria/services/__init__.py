"""
Business services for Libraria.

Each service wraps one database session and owns its transaction:
- users: credential management
- books: catalog management
- reservations: reservation workflow and history
"""

from libraria.services.users import UserService, ensure_self_or_admin
from libraria.services.books import BookService
from libraria.services.reservations import ReservationService

__all__ = [
    "UserService",
    "BookService",
    "ReservationService",
    "ensure_self_or_admin",
]
