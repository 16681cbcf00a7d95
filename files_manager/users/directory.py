"""User directory: resolve users by credentials or session token, create accounts."""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from files_manager.auth.passwords import hash_password
from files_manager.config import get_settings
from files_manager.sessions.store import SessionStore, session_key
from files_manager.users.models import User

log = logging.getLogger(__name__)


class UserExistsError(ValueError):
    """Raised when an account with the email already exists."""


class UserDirectory:
    """Read access to users plus account creation."""

    def __init__(self, session: AsyncSession, sessions: SessionStore) -> None:
        self._session = session
        self._sessions = sessions

    async def get_by_credentials(self, email: str, password_hash: str) -> Optional[User]:
        """Return the user whose email and stored digest both match, or None."""
        result = await self._session.execute(
            select(User).where(User.email == email, User.password_hash == password_hash)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        """Return user by email or None."""
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Return user by id or None."""
        return await self._session.get(User, user_id)

    async def get_by_token(self, token: str) -> Optional[User]:
        """Return the user owning the session token, or None if no live session."""
        if not token:
            return None
        user_id = await self._sessions.get(session_key(token))
        if user_id is None:
            return None
        try:
            return await self.get_by_id(int(user_id))
        except ValueError:
            log.warning("Session value is not a user id: %r", user_id)
            return None

    async def create_user(self, email: str, password: str) -> User:
        """
        Create a user with a hashed password and commit.
        Raises UserExistsError if the email is taken.
        """
        if await self.get_by_email(email):
            raise UserExistsError(f"User already exists: {email}")
        user = User(email=email, password_hash=hash_password(password))
        self._session.add(user)
        try:
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            raise UserExistsError(f"User already exists: {email}") from e
        await self._session.refresh(user)
        log.info("Created user id=%d email=%s", user.id, user.email)
        return user

    async def count(self) -> int:
        """Total number of users."""
        result = await self._session.execute(select(func.count()).select_from(User))
        return result.scalar_one()

    async def ensure_admin_exists(self) -> None:
        """
        If FILES_MANAGER_ADMIN_EMAIL and FILES_MANAGER_ADMIN_INITIAL_PASSWORD are set
        and no user exists with that email, create that user.
        """
        settings = get_settings()
        if not settings.admin_email or not settings.admin_initial_password:
            return
        if await self.get_by_email(settings.admin_email):
            return
        log.info("Creating bootstrap user email=%s", settings.admin_email)
        await self.create_user(settings.admin_email, settings.admin_initial_password)
