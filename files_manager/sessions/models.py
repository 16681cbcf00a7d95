"""SQLAlchemy model for key/value session entries with expiry."""

from sqlalchemy import Float, String
from sqlalchemy.orm import Mapped, mapped_column

from files_manager.db.session import Base


class SessionEntry(Base):
    """One session key. expires_at is a Unix timestamp; expired rows read as absent."""

    __tablename__ = "auth_sessions"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(String(255), nullable=False)
    expires_at: Mapped[float] = mapped_column(Float, nullable=False, index=True)
