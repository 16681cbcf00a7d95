"""Tests for AuthService: Basic header parsing, sign-in, sign-out."""

import base64
import hashlib
import uuid
from types import SimpleNamespace

import pytest

from files_manager.auth.passwords import hash_password
from files_manager.auth.service import AuthService, Unauthorized, parse_basic_auth


def _basic(raw: str) -> str:
    return "Basic " + base64.b64encode(raw.encode("utf-8")).decode("ascii")


class FakeUsers:
    """Single stored user a@b.com / pw (SHA-1 digest)."""

    def __init__(self) -> None:
        self.user = SimpleNamespace(id=7, email="a@b.com", password_hash=hashlib.sha1(b"pw").hexdigest())
        self.lookups = []

    async def get_by_credentials(self, email, password_hash):
        self.lookups.append((email, password_hash))
        if email == self.user.email and password_hash == self.user.password_hash:
            return self.user
        return None


@pytest.fixture
def users():
    return FakeUsers()


@pytest.fixture
def auth(fake_sessions, users):
    return AuthService(fake_sessions, users)


def test_hash_password_is_hex_sha1() -> None:
    """Stored digests are plain hex SHA-1."""
    assert hash_password("pw") == hashlib.sha1(b"pw").hexdigest()


def test_parse_basic_auth_password_keeps_colons() -> None:
    """Only the first ':' separates email from password."""
    assert parse_basic_auth(_basic("a@b.com:p:w")) == ("a@b.com", "p:w")


@pytest.mark.parametrize(
    "header",
    [
        None,
        "",
        "Basic",
        "Basic ",
        "Bearer " + base64.b64encode(b"a@b.com:pw").decode(),
        "Basic !!!not-base64!!!",
        "Basic " + base64.b64encode(b"\xff\xfe:\xff").decode(),
        _basic("a@b.com"),
        _basic(":pw"),
        _basic("a@b.com:"),
    ],
)
def test_parse_basic_auth_rejects_malformed(header) -> None:
    """Missing, non-Basic, non-base64, non-UTF-8, colonless or empty parts raise Unauthorized."""
    with pytest.raises(Unauthorized):
        parse_basic_auth(header)


def test_parse_basic_auth_scheme_case_insensitive() -> None:
    """'basic' is accepted like 'Basic'."""
    header = "basic " + base64.b64encode(b"a@b.com:pw").decode()
    assert parse_basic_auth(header) == ("a@b.com", "pw")


@pytest.mark.asyncio
async def test_sign_in_stores_session_with_24h_ttl(auth, fake_sessions) -> None:
    """Valid credentials return a uuid token mapped to the user id for 86400 seconds."""
    token = await auth.sign_in(_basic("a@b.com:pw"))
    uuid.UUID(token)
    assert fake_sessions.data == {f"auth_{token}": "7"}
    assert fake_sessions.ttls[f"auth_{token}"] == 86400
    assert await auth.resolve_user_id(token) == "7"


@pytest.mark.asyncio
async def test_sign_in_looks_up_digest_not_plaintext(auth, users) -> None:
    """The directory is queried with the SHA-1 digest of the password."""
    await auth.sign_in(_basic("a@b.com:pw"))
    assert users.lookups == [("a@b.com", hashlib.sha1(b"pw").hexdigest())]


@pytest.mark.asyncio
async def test_sign_in_wrong_password(auth, fake_sessions) -> None:
    """Wrong password raises Unauthorized and creates no session."""
    with pytest.raises(Unauthorized):
        await auth.sign_in(_basic("a@b.com:wrong"))
    assert fake_sessions.data == {}


@pytest.mark.asyncio
async def test_sign_in_malformed_header_creates_no_session(auth, fake_sessions, users) -> None:
    """Malformed header fails before any lookup or write."""
    with pytest.raises(Unauthorized):
        await auth.sign_in("Basic not:base64")
    assert fake_sessions.data == {}
    assert users.lookups == []


@pytest.mark.asyncio
async def test_sign_in_twice_keeps_both_sessions(auth, fake_sessions) -> None:
    """A second sign-in adds a session and leaves the first one alone."""
    first = await auth.sign_in(_basic("a@b.com:pw"))
    second = await auth.sign_in(_basic("a@b.com:pw"))
    assert first != second
    assert set(fake_sessions.data) == {f"auth_{first}", f"auth_{second}"}


@pytest.mark.asyncio
async def test_custom_ttl(fake_sessions, users) -> None:
    """ttl_seconds is passed through to the store."""
    auth = AuthService(fake_sessions, users, ttl_seconds=60)
    token = await auth.sign_in(_basic("a@b.com:pw"))
    assert fake_sessions.ttls[f"auth_{token}"] == 60


@pytest.mark.asyncio
async def test_sign_out_deletes_session(auth, fake_sessions) -> None:
    """Sign-out removes the session; a second sign-out is Unauthorized."""
    token = await auth.sign_in(_basic("a@b.com:pw"))
    await auth.sign_out(token)
    assert await fake_sessions.get(f"auth_{token}") is None
    with pytest.raises(Unauthorized):
        await auth.sign_out(token)


@pytest.mark.asyncio
async def test_sign_out_unknown_token_leaves_store_unchanged(auth, fake_sessions) -> None:
    """Never-issued or missing tokens raise Unauthorized without touching other sessions."""
    token = await auth.sign_in(_basic("a@b.com:pw"))
    before = dict(fake_sessions.data)
    with pytest.raises(Unauthorized):
        await auth.sign_out("never-issued")
    with pytest.raises(Unauthorized):
        await auth.sign_out(None)
    assert fake_sessions.data == before
    assert f"auth_{token}" in fake_sessions.data
