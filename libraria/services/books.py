"""
Catalog management.
"""

import math
import uuid
from typing import Any, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from libraria.exceptions import ConflictError, NotFoundError, ValidationError
from libraria.storage import BookFilters, BookModel, BookRepository, is_unique_violation


DUPLICATE_BOOK = "Ya existe un libro con este título, autor y editorial"
BOOK_NOT_FOUND = "Libro no encontrado"

# Columns that may be patched but never cleared
NON_NULLABLE_FIELDS = ("title", "author", "is_available", "is_active")


def parse_book_id(book_id: str) -> str:
    """Normalize a book id, rejecting anything that is not a UUID."""
    try:
        return str(uuid.UUID(str(book_id)))
    except ValueError:
        raise ValidationError("ID de libro inválido", detail=f"'{book_id}' is not a valid id")


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


class BookService:
    """Catalog operations bound to one database session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.books = BookRepository(session)

    async def create(self, data: dict[str, Any]) -> BookModel:
        """
        Add a book to the catalog.

        Raises:
            ValidationError: If title or author is missing.
            ConflictError: If an active book with the same title, author and
                publisher exists. The conflicting book's summary is attached.
        """
        title = data.get("title")
        author = data.get("author")
        if not title or not author:
            raise ValidationError("Título y autor son requeridos")

        existing = await self.books.find_active_duplicate(title, author, data.get("publisher"))
        if existing is not None:
            logger.warning(f"Duplicate book rejected: '{title}' by {author}")
            raise ConflictError(DUPLICATE_BOOK, extra={"existing_book": existing.summary()})

        fields = {k: v for k, v in data.items() if k not in ("title", "author", "id")}
        fields.setdefault("is_available", True)
        fields["is_active"] = True

        try:
            book = await self.books.create(title=title, author=author, **fields)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if not is_unique_violation(e):
                raise
            # Lost a race against a concurrent insert of the same book
            raise ConflictError(DUPLICATE_BOOK, detail="Libro duplicado")

        await self.session.refresh(book)
        logger.info(f"Book created: {book.id} '{book.title}' by {book.author}")
        return book

    async def list_books(
        self,
        filters: Optional[BookFilters] = None,
        page: int = 1,
        limit: int = 5,
    ) -> dict[str, Any]:
        if page < 1 or limit < 1:
            raise ValidationError("Parámetros de paginación inválidos")

        books, total = await self.books.list_books(filters, page=page, limit=limit)
        return {
            "items": books,
            "page": page,
            "total_pages": total_pages(total, limit),
            "page_size": limit,
            "total": total,
        }

    async def get(self, book_id: str) -> BookModel:
        book = await self.books.get(parse_book_id(book_id))
        if book is None or not book.is_active:
            raise NotFoundError(BOOK_NOT_FOUND)
        return book

    async def update(self, book_id: str, changes: dict[str, Any]) -> BookModel:
        book = await self.books.get(parse_book_id(book_id))
        if book is None:
            raise NotFoundError(BOOK_NOT_FOUND)

        for required in ("title", "author"):
            if required in changes and not changes[required]:
                raise ValidationError("Título y autor son requeridos")

        cleared = [k for k in NON_NULLABLE_FIELDS if k in changes and changes[k] is None]
        if cleared:
            raise ValidationError("Datos inválidos", detail=f"Campos requeridos: {', '.join(cleared)}")

        changes = {k: v for k, v in changes.items() if k != "id"}

        try:
            await self.books.update(book, changes)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if not is_unique_violation(e):
                raise
            raise ConflictError(DUPLICATE_BOOK, detail="Libro duplicado")

        await self.session.refresh(book)
        logger.info(f"Book updated: {book.id}")
        return book

    async def deactivate(self, book_id: str) -> BookModel:
        book = await self.books.get(parse_book_id(book_id))
        if book is None:
            raise NotFoundError(BOOK_NOT_FOUND)

        await self.books.deactivate(book)
        await self.session.commit()
        logger.info(f"Book deactivated: {book.id}")
        return book
