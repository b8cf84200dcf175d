"""
API Routes for Libraria

Route modules:
- users: Registration, login and profile management
- books: Catalog CRUD and filtered listing
- reservations: Reserving books and reservation history
"""

from libraria.api.routes.users import router as users_router
from libraria.api.routes.books import router as books_router
from libraria.api.routes.reservations import router as reservations_router

__all__ = [
    "users_router",
    "books_router",
    "reservations_router",
]
