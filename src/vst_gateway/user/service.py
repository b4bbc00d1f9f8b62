"""User service: register, login, refresh, and principal lookup.

This is the identity subsystem the trading core depends on. The core only
ever sees a resolved user id / username, never credentials.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.vst_common.enums import UserRole
from src.vst_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    UsernameExistsError,
)
from src.vst_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.vst_gateway.auth.password import hash_password, verify_password
from src.vst_gateway.user.db_models import UserModel

logger = logging.getLogger(__name__)


class UserService:
    """Stateless service — instantiate once, reuse across requests."""

    async def get_by_id(self, user_id: str, db: AsyncSession) -> UserModel | None:
        """Resolve a token subject to a user row. Non-UUID subjects resolve to None."""
        try:
            uid = uuid.UUID(user_id)
        except (ValueError, TypeError):
            return None
        result = await db.execute(select(UserModel).where(UserModel.id == uid))
        return result.scalar_one_or_none()

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        db: AsyncSession,
    ) -> UserModel:
        """Create a USER-role account. The caller wraps this in `async with db.begin()`."""
        # Check username uniqueness (DB UNIQUE constraint is the final guard)
        result = await db.execute(
            select(UserModel).where(UserModel.username == username)
        )
        if result.scalar_one_or_none() is not None:
            raise UsernameExistsError()

        result = await db.execute(
            select(UserModel).where(UserModel.email == email)
        )
        if result.scalar_one_or_none() is not None:
            raise EmailExistsError()

        user = UserModel(
            username=username,
            email=email,
            password_hash=hash_password(password),
            role=UserRole.USER.value,
            is_active=True,
        )
        db.add(user)
        try:
            await db.flush()  # Populate user.id / created_at without committing
        except IntegrityError as exc:
            # Lost a race with a concurrent registration
            detail = str(exc.orig)
            if "uq_users_username" in detail:
                raise UsernameExistsError() from None
            if "uq_users_email" in detail:
                raise EmailExistsError() from None
            raise
        await db.refresh(user)
        logger.info("User registered: id=%s username=%s", user.id, username)
        return user

    async def login(
        self,
        email: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Authenticate by email and return (user, access_token, refresh_token).

        "Unknown email" and "wrong password" both raise InvalidCredentialsError
        so the endpoint cannot be used to enumerate accounts.
        """
        result = await db.execute(
            select(UserModel).where(UserModel.email == email)
        )
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        return (
            user,
            create_access_token(str(user.id), user.role),
            create_refresh_token(str(user.id)),
        )

    async def refresh(self, refresh_token: str, db: AsyncSession) -> str:
        """Validate a refresh token and issue a new access token.

        The user is reloaded so a disabled account or changed role takes effect
        on the next refresh.
        """
        payload = decode_token(refresh_token, expected_type="refresh")
        user = await self.get_by_id(str(payload.get("sub", "")), db)
        if user is None:
            raise InvalidRefreshTokenError()
        if not user.is_active:
            raise AccountDisabledError()
        return create_access_token(str(user.id), user.role)
