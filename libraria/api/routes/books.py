"""
Book API Routes

Catalog operations: create, filtered listing, read, update and soft delete.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from loguru import logger

from libraria.api.dependencies import (
    Settings,
    admins_only,
    catalog_editors,
    get_book_service,
    get_settings,
)
from libraria.api.schemas import (
    BookCreate,
    BookListResponse,
    BookResponse,
    BookUpdate,
    BookUpdateResponse,
    ErrorResponse,
    MessageResponse,
)
from libraria.security import Identity
from libraria.services import BookService
from libraria.storage import BookFilters


router = APIRouter(prefix="/books", tags=["books"])


@router.post(
    "",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid book data or duplicate book"},
    },
)
async def create_book(
    book: BookCreate,
    identity: Identity = Depends(catalog_editors),
    service: BookService = Depends(get_book_service),
):
    """Create a new book with duplicate checking."""
    logger.info(f"Creating book: {book.title} by {book.author} (user {identity.id})")
    return await service.create(book.model_dump())


@router.get("", response_model=BookListResponse)
async def list_books(
    page: int = Query(1, ge=1, description="Page number"),
    limit: Optional[int] = Query(None, ge=1, description="Items per page"),
    genre: Optional[str] = Query(None, description="Filter by genre"),
    author: Optional[str] = Query(None, description="Filter by author"),
    publisher: Optional[str] = Query(None, description="Filter by publisher"),
    title: Optional[str] = Query(None, description="Case-insensitive title substring"),
    available: Optional[bool] = Query(None, description="Filter by availability"),
    publication_date: Optional[date] = Query(None, description="Exact publication date"),
    settings: Settings = Depends(get_settings),
    service: BookService = Depends(get_book_service),
):
    """List active books with pagination and filtering options."""
    limit = min(limit or settings.default_page_size, settings.max_page_size)
    logger.info(f"Listing books: page={page}, limit={limit}")

    filters = BookFilters(
        genre=genre,
        author=author,
        publisher=publisher,
        title=title,
        is_available=available,
        publication_date=publication_date,
    )
    return await service.list_books(filters, page=page, limit=limit)


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Malformed book id"},
        404: {"model": ErrorResponse, "description": "Book not found"},
    },
)
async def get_book(
    book_id: str,
    service: BookService = Depends(get_book_service),
):
    """Get an active book by ID."""
    return await service.get(book_id)


@router.put(
    "/{book_id}",
    response_model=BookUpdateResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Book not found"},
    },
)
async def update_book(
    book_id: str,
    book: BookUpdate,
    identity: Identity = Depends(catalog_editors),
    service: BookService = Depends(get_book_service),
):
    """
    Update a book.

    Supports partial updates - only provided fields are modified.
    """
    logger.info(f"Updating book: {book_id} (user {identity.id})")
    updated = await service.update(book_id, book.model_dump(exclude_unset=True))
    return BookUpdateResponse(msg="Libro actualizado", book=BookResponse.model_validate(updated))


@router.delete(
    "/{book_id}",
    response_model=MessageResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Book not found"},
    },
)
async def delete_book(
    book_id: str,
    identity: Identity = Depends(admins_only),
    service: BookService = Depends(get_book_service),
):
    """Deactivate a book (soft delete)."""
    logger.info(f"Deactivating book: {book_id} (user {identity.id})")
    await service.deactivate(book_id)
    return MessageResponse(msg="Libro inhabilitado")
