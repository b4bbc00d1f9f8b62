"""JWT token creation and verification (HS256, shared JWT_SECRET).

Access tokens carry the user's role so admin-only routes can short-circuit
before touching the database; the identity resolver still reloads the user
and trusts the stored role, never the claim alone.

No token revocation: once issued, tokens are valid until expiry.
"""

from datetime import timedelta
from typing import Any

from jose import JWTError, jwt

from config.settings import settings
from src.vst_common.datetime_utils import utc_now
from src.vst_common.errors import InvalidCredentialsError, InvalidRefreshTokenError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
_REFRESH_EXPIRE = timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)


def _issue(user_id: str, token_type: str, ttl: timedelta, **claims: Any) -> str:
    now = utc_now()
    payload = {
        "sub": user_id,
        "type": token_type,
        "iat": now,
        "exp": now + ttl,
        **claims,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def create_access_token(user_id: str, role: str = "USER") -> str:
    """Short-lived access token (default: 30 min)."""
    return _issue(user_id, "access", _ACCESS_EXPIRE, role=role)


def create_refresh_token(user_id: str) -> str:
    """Long-lived refresh token (default: 7 days). Not rotated on use."""
    return _issue(user_id, "refresh", _REFRESH_EXPIRE)


def decode_token(token: str, expected_type: str) -> dict[str, Any]:
    """Decode and validate a JWT token.

    Args:
        token: Raw JWT string.
        expected_type: "access" or "refresh". Strictly enforced so a refresh
                       token can never be presented as an access token.

    Raises:
        InvalidCredentialsError: bad/expired token when an access token was expected.
        InvalidRefreshTokenError: bad/expired token when a refresh token was expected.
    """
    error: type[Exception] = (
        InvalidCredentialsError if expected_type == "access" else InvalidRefreshTokenError
    )
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise error() from None

    if payload.get("type") != expected_type:
        raise error()
    return payload
