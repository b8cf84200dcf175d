"""
Credential management: registration, login, profile, update, deactivation.
"""

import uuid
from datetime import timedelta
from typing import Any, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from libraria.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from libraria.security import (
    Identity,
    create_access_token,
    get_password_hash,
    verify_password,
)
from libraria.storage import Role, UserModel, UserRepository, is_unique_violation


EMAIL_TAKEN = "Email ya registrado"
USER_NOT_FOUND = "Usuario no encontrado"

# Columns that may be patched but never cleared
NON_NULLABLE_FIELDS = ("name", "email", "role", "is_active")


def parse_user_id(user_id: str) -> str:
    """Normalize a user id, rejecting anything that is not a UUID."""
    try:
        return str(uuid.UUID(str(user_id)))
    except ValueError:
        raise ValidationError("ID de usuario inválido", detail=f"'{user_id}' is not a valid id")


def ensure_self_or_admin(identity: Identity, user_id: str) -> None:
    """Ownership rule shared by profile updates, deactivation and history."""
    if identity.id != user_id and not identity.is_admin:
        logger.warning(f"User {identity.id} denied access to user {user_id}")
        raise UnauthorizedError("No autorizado")


class UserService:
    """User account operations bound to one database session."""

    def __init__(
        self,
        session: AsyncSession,
        secret: str,
        algorithm: str,
        token_ttl: timedelta,
    ):
        self.session = session
        self.users = UserRepository(session)
        self.secret = secret
        self.algorithm = algorithm
        self.token_ttl = token_ttl

    async def register(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        role: Optional[Role] = None,
    ) -> UserModel:
        if not name or not email or not password:
            raise ValidationError("Nombre, email y password son requeridos")

        if await self.users.get_by_email(email) is not None:
            logger.warning(f"Registration rejected, email in use: {email}")
            raise ConflictError(EMAIL_TAKEN)

        try:
            user = await self.users.create(
                name=name,
                email=email,
                hashed_password=get_password_hash(password),
                role=role or Role.READER,
            )
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if not is_unique_violation(e):
                raise
            raise ConflictError(EMAIL_TAKEN, detail=str(e.orig))

        await self.session.refresh(user)
        logger.info(f"User registered: {user.id} ({user.role.value})")
        return user

    async def login(self, email: Optional[str], password: Optional[str]) -> tuple[str, UserModel]:
        """
        Check credentials and issue a bearer token.

        A deactivated account is reported exactly like a missing one.

        Returns:
            (token, user)
        """
        if not email or not password:
            raise ValidationError("Email y password son requeridos")

        user = await self.users.get_by_email(email, active_only=True)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)

        if not verify_password(password, user.hashed_password):
            logger.warning(f"Wrong password for user {user.id}")
            raise UnauthorizedError("Contraseña incorrecta", status_code=401)

        token = create_access_token(
            Identity(id=user.id, role=user.role, name=user.name),
            secret=self.secret,
            algorithm=self.algorithm,
            expires_delta=self.token_ttl,
        )
        logger.info(f"User logged in: {user.id}")
        return token, user

    async def get_profile(self, identity: Identity) -> UserModel:
        user = await self.users.get(identity.id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)
        return user

    async def update(
        self,
        identity: Identity,
        user_id: str,
        changes: dict[str, Any],
    ) -> UserModel:
        """
        Patch a user's fields. The password never goes through this path.

        Role and active flag stay patchable by the account owner; such
        changes are logged so they can be reviewed.
        """
        user_id = parse_user_id(user_id)
        ensure_self_or_admin(identity, user_id)

        changes = {k: v for k, v in changes.items() if k not in ("password", "hashed_password")}
        cleared = [k for k in NON_NULLABLE_FIELDS if k in changes and changes[k] is None]
        if cleared:
            raise ValidationError("Datos inválidos", detail=f"Campos requeridos: {', '.join(cleared)}")

        user = await self.users.get(user_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)

        if not identity.is_admin and ({"role", "is_active"} & changes.keys()):
            logger.warning(
                f"Non-admin {identity.id} changed privileged fields: "
                f"{sorted({'role', 'is_active'} & changes.keys())}"
            )

        try:
            await self.users.update(user, changes)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if not is_unique_violation(e):
                raise
            raise ConflictError(EMAIL_TAKEN, detail=str(e.orig))

        await self.session.refresh(user)
        logger.info(f"User updated: {user.id}")
        return user

    async def deactivate(self, identity: Identity, user_id: str) -> UserModel:
        user_id = parse_user_id(user_id)
        ensure_self_or_admin(identity, user_id)

        user = await self.users.get(user_id)
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)

        await self.users.deactivate(user)
        await self.session.commit()
        logger.info(f"User deactivated: {user.id}")
        return user
