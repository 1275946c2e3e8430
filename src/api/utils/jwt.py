from datetime import UTC, datetime, timedelta
from typing import List, Optional

from jose import JWTError, jwt

from config import ApplicationConfig


def create_access_token(
    user_id: str,
    tenant_id: Optional[str],
    caller_class: str,
    superuser: bool,
    expires_delta: timedelta,
    scope: Optional[List[str]] = None,
) -> str:
    """
    Create JWT session token

    The tenant binding is fixed here and is the only tenant the holder
    can act on.

    Args:
        user_id: Subject UUID as string
        tenant_id: Bound tenant UUID as string (None for operators)
        caller_class: "tenant" or "operator"
        superuser: Elevated tenant permissions
        expires_delta: Token expiration duration
        scope: Operation names the session is limited to (empty: no limit)

    Returns:
        JWT token string (HS256)
    """
    now = datetime.now(UTC)
    payload = {
        "user_id": user_id,
        "tenant_id": tenant_id,
        "caller_class": caller_class,
        "superuser": superuser,
        "scope": list(scope or []),
        "exp": now + expires_delta,
        "iat": now,
    }
    return jwt.encode(payload, ApplicationConfig.JWT_SECRET, algorithm="HS256")


def verify_jwt(token: str) -> Optional[dict]:
    """
    Verify and decode JWT token

    Args:
        token: JWT token string

    Returns:
        Decoded payload dict or None if invalid
    """
    try:
        payload = jwt.decode(
            token, ApplicationConfig.JWT_SECRET, algorithms=["HS256"]
        )
        return payload
    except JWTError:
        return None
