"""One-way password digest.

Users are looked up by ``(email, digest)``, so the digest must be deterministic:
hex SHA-1, as stored for every existing account.
"""

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["hex_sha1"])


def hash_password(password: str) -> str:
    """Return the hex SHA-1 digest of password."""
    return pwd_context.hash(password)
