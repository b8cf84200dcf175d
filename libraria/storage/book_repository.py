"""
Book Repository for Libraria

Catalog storage on top of the async SQLAlchemy session:
- Duplicate lookup on (title, author, publisher) among active books
- Filtering and pagination
- Soft deletes
- Conditional availability claim for reservations
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from loguru import logger
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import BookModel, fold_title


@dataclass
class BookFilters:
    """Catalog list filters. None means "do not filter"."""

    genre: Optional[str] = None
    author: Optional[str] = None
    publisher: Optional[str] = None
    title: Optional[str] = None
    is_available: Optional[bool] = None
    publication_date: Optional[date] = None


class BookRepository:
    """
    Async repository for catalog entries.

    Usage:
        repo = BookRepository(session)
        book = await repo.create(title="Dune", author="Frank Herbert")
        books, total = await repo.list_books(BookFilters(genre="Sci-Fi"), page=1, limit=5)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, book_id: str) -> Optional[BookModel]:
        return await self.session.get(BookModel, book_id)

    async def find_active_duplicate(
        self,
        title: str,
        author: str,
        publisher: Optional[str],
    ) -> Optional[BookModel]:
        """Active book with the same title, author and publisher, if any."""
        stmt = (
            select(BookModel)
            .where(
                BookModel.title == title,
                BookModel.author == author,
                func.coalesce(BookModel.publisher, "") == (publisher or ""),
                BookModel.is_active == True,  # noqa: E712
            )
            .limit(1)
        )
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def create(self, title: str, author: str, **kwargs) -> BookModel:
        book = BookModel(title=title, author=author, **kwargs)
        self.session.add(book)
        await self.session.flush()
        logger.debug(f"Book row inserted: {book.id}")
        return book

    async def list_books(
        self,
        filters: Optional[BookFilters] = None,
        page: int = 1,
        limit: int = 5,
    ) -> tuple[list[BookModel], int]:
        """
        List active books with filtering and pagination.

        Args:
            filters: Exact-match filters plus case-insensitive title substring
            page: Page number (1-based)
            limit: Items per page

        Returns:
            (books on the requested page, total matching count)
        """
        filters = filters or BookFilters()
        conditions = [BookModel.is_active == True]  # noqa: E712

        if filters.genre:
            conditions.append(BookModel.genre == filters.genre)
        if filters.author:
            conditions.append(BookModel.author == filters.author)
        if filters.publisher:
            conditions.append(BookModel.publisher == filters.publisher)
        if filters.title:
            conditions.append(
                BookModel.title_search.contains(fold_title(filters.title), autoescape=True)
            )
        if filters.is_available is not None:
            conditions.append(BookModel.is_available == filters.is_available)
        if filters.publication_date is not None:
            conditions.append(BookModel.publication_date == filters.publication_date)

        count_stmt = select(func.count(BookModel.id)).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(BookModel)
            .where(*conditions)
            .order_by(BookModel.created_at.asc(), BookModel.id.asc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        books = list((await self.session.execute(stmt)).scalars().all())

        return books, total

    async def update(self, book: BookModel, changes: dict[str, Any]) -> BookModel:
        for key, value in changes.items():
            if hasattr(book, key):
                setattr(book, key, value)
        await self.session.flush()
        return book

    async def deactivate(self, book: BookModel) -> BookModel:
        book.is_active = False
        await self.session.flush()
        return book

    async def claim(self, book_id: str) -> bool:
        """
        Mark a book unavailable only if it is still active and available.

        Compare-and-swap on the availability flag: of two concurrent claims
        on the same book, exactly one changes a row.

        Returns:
            True if this call flipped the flag.
        """
        stmt = (
            update(BookModel)
            .where(
                BookModel.id == book_id,
                BookModel.is_active == True,  # noqa: E712
                BookModel.is_available == True,  # noqa: E712
            )
            .values(is_available=False)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
