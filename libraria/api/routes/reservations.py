"""
Reservation API Routes
"""

from fastapi import APIRouter, Depends, status

from libraria.api.dependencies import admins_only, authenticated, get_reservation_service
from libraria.api.schemas import (
    BookHistoryResponse,
    ErrorResponse,
    ReservationCreate,
    ReservationResponse,
    UserHistoryResponse,
)
from libraria.security import Identity
from libraria.services import ReservationService


router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.post(
    "",
    response_model=ReservationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Missing book reference or book already reserved"},
        404: {"model": ErrorResponse, "description": "Book missing or deactivated"},
    },
)
async def create_reservation(
    payload: ReservationCreate,
    identity: Identity = Depends(authenticated),
    service: ReservationService = Depends(get_reservation_service),
):
    """Reserve a book for the caller."""
    return await service.reserve(identity, payload.book_id, payload.due_date)


@router.get(
    "/user/{user_id}",
    response_model=UserHistoryResponse,
    responses={403: {"model": ErrorResponse, "description": "Neither the user nor an admin"}},
)
async def user_history(
    user_id: str,
    identity: Identity = Depends(authenticated),
    service: ReservationService = Depends(get_reservation_service),
):
    """Reservation history of a user."""
    return await service.history_for_user(identity, user_id)


@router.get("/book/{book_id}", response_model=BookHistoryResponse)
async def book_history(
    book_id: str,
    identity: Identity = Depends(admins_only),
    service: ReservationService = Depends(get_reservation_service),
):
    """Reservation history of a book (admin only)."""
    return await service.history_for_book(book_id)
