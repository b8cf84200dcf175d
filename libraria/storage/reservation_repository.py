"""
Reservation ledger.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import BookModel, ReservationModel, UserModel


class ReservationRepository:
    """Append-only ledger of reservations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        user_id: str,
        book_id: str,
        due_date: Optional[datetime] = None,
    ) -> ReservationModel:
        reservation = ReservationModel(
            user_id=user_id,
            book_id=book_id,
            due_date=due_date,
        )
        self.session.add(reservation)
        await self.session.flush()
        return reservation

    async def history_for_user(self, user_id: str) -> list[tuple[ReservationModel, BookModel]]:
        """Reservations of a user joined with their books. Unresolvable books drop out."""
        stmt = (
            select(ReservationModel, BookModel)
            .join(BookModel, ReservationModel.book_id == BookModel.id)
            .where(ReservationModel.user_id == user_id)
            .order_by(ReservationModel.reserved_at.asc())
        )
        return [tuple(row) for row in (await self.session.execute(stmt)).all()]

    async def history_for_book(self, book_id: str) -> list[tuple[ReservationModel, UserModel]]:
        """Reservations of a book joined with their users. Unresolvable users drop out."""
        stmt = (
            select(ReservationModel, UserModel)
            .join(UserModel, ReservationModel.user_id == UserModel.id)
            .where(ReservationModel.book_id == book_id)
            .order_by(ReservationModel.reserved_at.asc())
        )
        return [tuple(row) for row in (await self.session.execute(stmt)).all()]
