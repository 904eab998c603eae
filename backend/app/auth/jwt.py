"""JWT helpers for the identity-provider boundary.

Access tokens are issued by the identity provider and signed with the shared
``JWT_SECRET_KEY``. This service only needs to verify them; the ``create_*``
helpers exist for that provider, the seed script and tests.
"""

import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.config import settings


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a short-lived access token.

    Args:
        data: Payload data. Must include ``sub`` (user UUID as string).
        expires_delta: Custom expiration duration. Defaults to
            ``settings.jwt_access_token_expire_minutes`` minutes.

    Returns:
        Encoded JWT string.
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes))
    to_encode.update({"exp": expire, "iat": now, "type": "access"})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_token_for_user(user_id: uuid.UUID | str) -> str:
    """Access token whose subject is ``user_id``."""
    return create_access_token({"sub": str(user_id)})


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Raises:
        jose.JWTError: If the token is invalid, expired, or malformed.
    """
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def user_id_from_token(token: str) -> uuid.UUID:
    """Return the user id carried by a valid access token.

    Raises:
        jose.JWTError: bad signature, expired, not an access token, or a
            subject that is not a UUID.
    """
    payload = decode_token(token)
    if payload.get("type") != "access":
        raise JWTError("Invalid token type")
    sub = payload.get("sub")
    if sub is None:
        raise JWTError("Token has no subject")
    if not isinstance(sub, str):
        raise JWTError("Token subject is not a user id")
    try:
        return uuid.UUID(sub)
    except ValueError:
        raise JWTError("Token subject is not a user id") from None
