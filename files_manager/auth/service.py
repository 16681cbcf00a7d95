"""Sign-in and sign-out with opaque session tokens.

Sign-in takes an ``Authorization: Basic <base64(email:password)>`` header,
checks the SHA-1 digest of the password against the user directory and stores
``auth_<token> -> user_id`` in the session store for ``ttl_seconds``. Every
sign-in creates a new session; existing sessions of the user are left alone.
Sign-out removes the session for a token.
"""

import base64
import binascii
import logging
import uuid
from typing import Optional, Protocol, Tuple

from files_manager.auth.passwords import hash_password
from files_manager.sessions.store import SessionStore, session_key

log = logging.getLogger(__name__)

DEFAULT_SESSION_TTL_SECONDS = 24 * 3600


class Unauthorized(Exception):
    """Bad or missing credentials or token."""


class CredentialLookup(Protocol):
    """The part of the user directory sign-in needs."""

    async def get_by_credentials(self, email: str, password_hash: str): ...


def parse_basic_auth(header: Optional[str]) -> Tuple[str, str]:
    """
    Return (email, password) from a Basic Authorization header value.
    The password is everything after the first ':'. Raises Unauthorized on any malformation.
    """
    if not header:
        raise Unauthorized("Missing Authorization header")
    parts = header.split(" ")
    if len(parts) < 2 or parts[0].lower() != "basic" or not parts[1]:
        raise Unauthorized("Authorization header is not Basic")
    try:
        decoded = base64.b64decode(parts[1], validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise Unauthorized("Credentials are not valid base64 UTF-8")
    email, sep, password = decoded.partition(":")
    if not sep or not email or not password:
        raise Unauthorized("Credentials must be email:password")
    return email, password


class AuthService:
    """Issues and revokes session tokens."""

    def __init__(
        self,
        sessions: SessionStore,
        users: CredentialLookup,
        ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
    ) -> None:
        self._sessions = sessions
        self._users = users
        self._ttl_seconds = ttl_seconds

    async def sign_in(self, authorization: Optional[str]) -> str:
        """Verify Basic credentials and return a new session token. Raises Unauthorized."""
        email, password = parse_basic_auth(authorization)
        user = await self._users.get_by_credentials(email, hash_password(password))
        if user is None:
            log.warning("Sign-in failed for email=%s", email)
            raise Unauthorized("Invalid email or password")
        token = str(uuid.uuid4())
        await self._sessions.set(session_key(token), str(user.id), self._ttl_seconds)
        log.info("Sign-in successful for user id=%s", user.id)
        return token

    async def resolve_user_id(self, token: Optional[str]) -> Optional[str]:
        """Return the user id stored for token, or None if no live session."""
        if not token:
            return None
        return await self._sessions.get(session_key(token))

    async def sign_out(self, token: Optional[str]) -> None:
        """Delete the session for token. Raises Unauthorized if there is none."""
        user_id = await self.resolve_user_id(token)
        if user_id is None:
            log.debug("Sign-out with unknown token")
            raise Unauthorized("No session for token")
        await self._sessions.delete(session_key(token))
        log.info("Sign-out for user id=%s", user_id)
