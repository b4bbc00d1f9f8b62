"""FastAPI dependencies: the identity resolver and role guard.

Usage in any protected router:
    from src.vst_gateway.auth.dependencies import get_current_user

    @router.get("/protected")
    async def protected(user: Annotated[UserModel, Depends(get_current_user)]):
        ...

Routers pass ``str(user.id)`` (and the username where a projection needs it)
into services explicitly; nothing below the router reads the principal.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.vst_common.database import get_db_session
from src.vst_common.errors import (
    AccountDisabledError,
    AdminRequiredError,
    InvalidCredentialsError,
    UnknownUserError,
)
from src.vst_gateway.auth.jwt_handler import decode_token
from src.vst_gateway.user.db_models import UserModel
from src.vst_gateway.user.service import UserService

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)

_users = UserService()


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> UserModel:
    """Resolve the Bearer token's principal to a UserModel.

    Raises HTTP 401 if the token is missing, invalid, or expired.
    Raises UnknownUserError (401) if the token is valid but names no user.
    Raises AccountDisabledError (403) if the user account is disabled.
    """
    try:
        payload = decode_token(token, expected_type="access")
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    user_id = payload.get("sub")
    if not user_id:
        raise _CREDENTIALS_EXCEPTION

    user = await _users.get_by_id(str(user_id), db)
    if user is None:
        raise UnknownUserError()

    if not user.is_active:
        raise AccountDisabledError()

    return user


async def require_admin(
    current_user: Annotated[UserModel, Depends(get_current_user)],
) -> UserModel:
    """Allow only ADMIN-role users (competition creation)."""
    if not current_user.is_admin:
        raise AdminRequiredError()
    return current_user
