"""
User API Routes

Handles:
- Registration
- Login (token issuance)
- Own profile
- Profile update and deactivation (self or admin)
"""

from fastapi import APIRouter, Depends, status
from loguru import logger

from libraria.api.dependencies import authenticated, get_user_service
from libraria.api.schemas import (
    ErrorResponse,
    LoginResponse,
    MessageResponse,
    RegisterResponse,
    UserLogin,
    UserProfileResponse,
    UserRegister,
    UserResponse,
    UserUpdate,
    UserUpdateResponse,
)
from libraria.security import Identity
from libraria.services import UserService


router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Missing fields or email already registered"}},
)
async def register(
    payload: UserRegister,
    service: UserService = Depends(get_user_service),
):
    """Register a new user."""
    logger.info(f"Registering user: {payload.email}")
    user = await service.register(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.role,
    )
    return RegisterResponse(
        msg="Usuario creado exitosamente",
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Wrong password"},
        404: {"model": ErrorResponse, "description": "No active user with that email"},
    },
)
async def login(
    payload: UserLogin,
    service: UserService = Depends(get_user_service),
):
    """
    Login endpoint.
    Returns a bearer token if credentials are valid.
    """
    token, user = await service.login(payload.email, payload.password)
    return LoginResponse(token=token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserProfileResponse)
async def read_users_me(
    identity: Identity = Depends(authenticated),
    service: UserService = Depends(get_user_service),
):
    """Get current user profile."""
    return await service.get_profile(identity)


@router.put(
    "/{user_id}",
    response_model=UserUpdateResponse,
    responses={
        403: {"model": ErrorResponse, "description": "Neither the account owner nor an admin"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    identity: Identity = Depends(authenticated),
    service: UserService = Depends(get_user_service),
):
    """
    Update a user's profile.

    Supports partial updates. The password cannot be changed here.
    """
    user = await service.update(identity, user_id, payload.model_dump(exclude_unset=True))
    return UserUpdateResponse(msg="Usuario actualizado", user=UserResponse.model_validate(user))


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    responses={
        403: {"model": ErrorResponse, "description": "Neither the account owner nor an admin"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def deactivate_user(
    user_id: str,
    identity: Identity = Depends(authenticated),
    service: UserService = Depends(get_user_service),
):
    """Deactivate a user (soft delete)."""
    await service.deactivate(identity, user_id)
    return MessageResponse(msg="Usuario inhabilitado")
