"""
Password hashing and bearer token primitives.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from libraria.exceptions import UnauthenticatedError
from libraria.storage.models import Role


ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_HOURS = 8

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@dataclass(frozen=True)
class Identity:
    """Decoded token payload attached to each authenticated request."""

    id: str
    role: Role
    name: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    identity: Identity,
    secret: str,
    algorithm: str = ALGORITHM,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Sign a token embedding the caller's id, role and name.

    Args:
        identity: Who the token is issued to.
        secret: Process-wide signing secret.
        algorithm: JWS algorithm.
        expires_delta: Lifetime, defaults to ACCESS_TOKEN_EXPIRE_HOURS.

    Returns:
        Encoded JWT.
    """
    if expires_delta is None:
        expires_delta = timedelta(hours=ACCESS_TOKEN_EXPIRE_HOURS)

    payload = {
        "id": identity.id,
        "role": identity.role.value,
        "name": identity.name,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_access_token(token: str, secret: str, algorithm: str = ALGORITHM) -> Identity:
    """
    Verify signature and expiry, then decode the identity payload.

    Raises:
        UnauthenticatedError: If the token is invalid, expired or malformed.
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as e:
        raise UnauthenticatedError("Token inválido", detail=str(e))

    try:
        return Identity(
            id=str(payload["id"]),
            role=Role(payload["role"]),
            name=payload.get("name") or "",
        )
    except (KeyError, ValueError) as e:
        raise UnauthenticatedError("Token inválido", detail=f"Malformed payload: {e}")
