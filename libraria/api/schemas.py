"""
API Schemas for Libraria

Pydantic models for request validation and response serialization:
- User models
- Book models
- Reservation models

Design Decisions:
1. Separate Request/Response: the password hash has no response field at all
2. Partial updates: update models have every field optional and are applied with exclude_unset
3. Extra request fields are ignored, which is how a password sent to the update endpoint is dropped
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from libraria.storage.models import Role


# =============================================================================
# User Schemas
# =============================================================================

class UserRegister(BaseModel):
    """Account registration request."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: Optional[Role] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Ana Gómez",
                "email": "ana@biblioteca.com",
                "password": "s3creto",
                "role": "reader",
            }
        }
    )


class UserLogin(BaseModel):
    """Login request."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class UserUpdate(BaseModel):
    """Profile update request (partial). Any password field is ignored."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("name", "email", "role", "is_active")
    @classmethod
    def reject_null(cls, value):
        # Omitted fields stay unchanged, explicit nulls are rejected
        if value is None:
            raise ValueError("no puede ser nulo")
        return value


class UserResponse(BaseModel):
    """Public user fields."""

    id: str
    name: str
    email: str
    role: Role
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class UserProfileResponse(UserResponse):
    """Own profile, with timestamps."""

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RegisterResponse(BaseModel):
    msg: str
    user: UserResponse


class LoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserResponse


class UserUpdateResponse(BaseModel):
    msg: str
    user: UserResponse


# =============================================================================
# Book Schemas
# =============================================================================

class BookCreate(BaseModel):
    """Book creation request."""

    title: str = Field(..., min_length=1, max_length=500)
    author: str = Field(..., min_length=1, max_length=500)
    genre: Optional[str] = Field(None, max_length=200)
    publisher: Optional[str] = Field(None, max_length=200)
    publication_date: Optional[date] = None
    is_available: bool = True

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Cien años de soledad",
                "author": "Gabriel García Márquez",
                "genre": "Novela",
                "publisher": "Sudamericana",
                "publication_date": "1967-05-30",
            }
        }
    )


class BookUpdate(BaseModel):
    """Book update request (partial)."""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    author: Optional[str] = Field(None, min_length=1, max_length=500)
    genre: Optional[str] = Field(None, max_length=200)
    publisher: Optional[str] = Field(None, max_length=200)
    publication_date: Optional[date] = None
    is_available: Optional[bool] = None
    is_active: Optional[bool] = None

    @field_validator("title", "author", "is_available", "is_active")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("no puede ser nulo")
        return value


class BookResponse(BaseModel):
    """Book response model."""

    id: str
    title: str
    author: str
    genre: Optional[str] = None
    publisher: Optional[str] = None
    publication_date: Optional[date] = None
    is_available: bool
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BookListResponse(BaseModel):
    """Paginated book list response."""

    items: list[BookResponse]
    page: int
    total_pages: int
    page_size: int
    total: int


class BookUpdateResponse(BaseModel):
    msg: str
    book: BookResponse


# =============================================================================
# Reservation Schemas
# =============================================================================

class ReservationCreate(BaseModel):
    """Reservation request."""

    book_id: Optional[str] = None
    due_date: Optional[datetime] = None


class ReservationResponse(BaseModel):
    id: str
    user_id: str
    book_id: str
    reserved_at: datetime
    due_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserReservationEntry(BaseModel):
    book_title: str
    book_author: str
    reserved_at: datetime
    due_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class BookReservationEntry(BaseModel):
    user_name: str
    user_email: str
    reserved_at: datetime
    due_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class UserHistoryResponse(BaseModel):
    msg: Optional[str] = None
    reservations: list[UserReservationEntry]


class BookHistoryResponse(BaseModel):
    msg: Optional[str] = None
    reservations: list[BookReservationEntry]


# =============================================================================
# Common Schemas
# =============================================================================

class MessageResponse(BaseModel):
    msg: str


class ErrorResponse(BaseModel):
    """Error response."""

    msg: str
    code: str
    error: Optional[str] = None
    timestamp: datetime


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    components: dict[str, str]
