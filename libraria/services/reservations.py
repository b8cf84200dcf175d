"""
Reservation workflow.

A book is reservable only while it is both active and available. Reserving
claims the availability flag with a conditional update and records the
reservation in the same transaction, so two callers racing for the same book
cannot both succeed.
"""

from datetime import datetime
from typing import Any, Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from libraria.exceptions import ConflictError, NotFoundError, ValidationError
from libraria.security import Identity
from libraria.services.books import parse_book_id
from libraria.services.users import ensure_self_or_admin, parse_user_id
from libraria.storage import BookRepository, ReservationModel, ReservationRepository


BOOK_NOT_AVAILABLE = "Libro no disponible"
BOOK_ALREADY_RESERVED = "El libro no está disponible para reserva"
NO_USER_RESERVATIONS = "No se encontraron reservas para este usuario"
NO_BOOK_RESERVATIONS = "No se encontraron reservas para este libro"


class ReservationService:
    """Reservation operations bound to one database session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.books = BookRepository(session)
        self.reservations = ReservationRepository(session)

    async def reserve(
        self,
        identity: Identity,
        book_id: Optional[str],
        due_date: Optional[datetime] = None,
    ) -> ReservationModel:
        """
        Reserve a book for the caller.

        Raises:
            ValidationError: If no book reference is given or it is malformed.
            NotFoundError: If the book does not exist or was deactivated.
                Both cases carry the same message.
            ConflictError: If the book exists but is already reserved.
        """
        if not book_id:
            raise ValidationError("ID de libro es requerido")
        book_id = parse_book_id(book_id)

        book = await self.books.get(book_id)
        if book is None or not book.is_active:
            raise NotFoundError(BOOK_NOT_AVAILABLE)

        if not book.is_available:
            logger.warning(f"Reservation rejected, book {book_id} unavailable")
            raise ConflictError(BOOK_ALREADY_RESERVED)

        try:
            if not await self.books.claim(book_id):
                # Another reservation flipped the flag after our read
                logger.warning(f"Reservation lost race for book {book_id}")
                raise ConflictError(BOOK_ALREADY_RESERVED)

            reservation = await self.reservations.create(
                user_id=identity.id,
                book_id=book_id,
                due_date=due_date,
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        await self.session.refresh(reservation)
        await self.session.refresh(book)
        logger.info(f"Book {book_id} reserved by user {identity.id}: {reservation.id}")
        return reservation

    async def history_for_user(self, identity: Identity, user_id: str) -> dict[str, Any]:
        user_id = parse_user_id(user_id)
        ensure_self_or_admin(identity, user_id)

        rows = await self.reservations.history_for_user(user_id)
        entries = [
            {
                "book_title": book.title,
                "book_author": book.author,
                "reserved_at": reservation.reserved_at,
                "due_date": reservation.due_date,
                "created_at": reservation.created_at,
            }
            for reservation, book in rows
        ]
        return {
            "msg": None if entries else NO_USER_RESERVATIONS,
            "reservations": entries,
        }

    async def history_for_book(self, book_id: str) -> dict[str, Any]:
        book_id = parse_book_id(book_id)

        rows = await self.reservations.history_for_book(book_id)
        entries = [
            {
                "user_name": user.name,
                "user_email": user.email,
                "reserved_at": reservation.reserved_at,
                "due_date": reservation.due_date,
                "created_at": reservation.created_at,
            }
            for reservation, user in rows
        ]
        return {
            "msg": None if entries else NO_BOOK_RESERVATIONS,
            "reservations": entries,
        }
