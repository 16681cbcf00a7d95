"""FastAPI dependencies for auth: build services per request, resolve X-Token."""

import logging
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from files_manager.auth.service import AuthService
from files_manager.config import get_settings
from files_manager.db.session import get_db
from files_manager.sessions.store import SqlSessionStore
from files_manager.users.directory import UserDirectory
from files_manager.users.models import User

token_header = APIKeyHeader(name="X-Token", auto_error=False)
log = logging.getLogger(__name__)

UNAUTHORIZED = "Unauthorized"


def get_session_store(
    session: Annotated[AsyncSession, Depends(get_db)],
) -> SqlSessionStore:
    return SqlSessionStore(session)


def get_user_directory(
    session: Annotated[AsyncSession, Depends(get_db)],
    sessions: Annotated[SqlSessionStore, Depends(get_session_store)],
) -> UserDirectory:
    return UserDirectory(session, sessions)


def get_auth_service(
    sessions: Annotated[SqlSessionStore, Depends(get_session_store)],
    users: Annotated[UserDirectory, Depends(get_user_directory)],
) -> AuthService:
    return AuthService(sessions, users, ttl_seconds=get_settings().session_ttl_seconds)


async def get_optional_user(
    token: Annotated[Optional[str], Depends(token_header)],
    users: Annotated[UserDirectory, Depends(get_user_directory)],
) -> Optional[User]:
    """Resolve X-Token to a user, or None when missing or unknown."""
    if not token:
        return None
    return await users.get_by_token(token)


async def get_current_user(
    user: Annotated[Optional[User], Depends(get_optional_user)],
) -> User:
    """Require a valid X-Token; raise 401 otherwise."""
    if user is None:
        log.debug("Request without a valid X-Token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED)
    return user
