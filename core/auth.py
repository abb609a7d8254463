from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from core.config import get_settings

settings = get_settings()


def create_access_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    """
    Issue a dashboard access token.

    The 'sub' claim carries the user ID that owns seeds; every seed lookup
    is scoped to it.
    """
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {"sub": user_id, "exp": datetime.now(UTC) + lifetime}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def verify_token(token: str) -> dict[str, Any]:
    """Verify and decode JWT token, returns payload"""
    try:
        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.algorithm]
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {str(e)}") from e

    if not payload.get("sub"):
        raise ValueError("Token is missing the 'sub' claim")
    return payload
