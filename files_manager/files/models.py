"""File entry SQLAlchemy model, request schema and the document shapes around it.

Inside the service a file entry travels as a document (plain dict) keyed like
``{"_id", "userId", "name", "type", "isPublic", "parentId", "localPath"}``.
Callers only ever see the public shape from ``to_public``: ``id`` instead of
``_id`` and no ``localPath``.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import Boolean, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from files_manager.db.session import Base

# parentId of top-level entries; real ids start at 1
ROOT_PARENT_ID = 0
# Largest value an SQLite INTEGER column holds
MAX_FILE_ID = 2**63 - 1

FileDocument = Dict[str, Any]


class FileType(str, Enum):
    FILE = "file"
    IMAGE = "image"
    FOLDER = "folder"


class FileEntry(Base):
    """Metadata for a stored file, image or folder. Payload bytes live at local_path."""

    __tablename__ = "files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    parent_id: Mapped[int] = mapped_column(
        Integer, default=ROOT_PARENT_ID, nullable=False, index=True
    )
    # Only set for file and image entries
    local_path: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class FileCreate(BaseModel):
    """POST /files body. Everything is optional here; FileValidator decides what is missing."""

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    type: Optional[str] = None
    is_public: Optional[bool] = Field(False, alias="isPublic")
    # Base64 payload, required unless type is folder
    data: Optional[str] = None
    parent_id: Optional[Union[int, str]] = Field(ROOT_PARENT_ID, alias="parentId")

    @field_validator("is_public", "parent_id", mode="before")
    @classmethod
    def _null_is_default(cls, value, info):
        """JSON null means the field was not given."""
        if value is None:
            return False if info.field_name == "is_public" else ROOT_PARENT_ID
        return value


class FileError(str, Enum):
    """Validation failures; values are the messages returned to clients."""

    MISSING_NAME = "Missing name"
    MISSING_TYPE = "Missing type"
    MISSING_DATA = "Missing data"
    PARENT_NOT_FOUND = "Parent not found"
    PARENT_NOT_A_FOLDER = "Parent is not a folder"


@dataclass(frozen=True)
class ValidatedParams:
    name: str
    type: FileType
    is_public: bool
    parent_id: int
    data: Optional[str] = None


@dataclass(frozen=True)
class ValidationResult:
    """Either params (valid request) or error (first failed rule)."""

    params: Optional[ValidatedParams] = None
    error: Optional[FileError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_file_id(value: Any) -> Optional[int]:
    """Return value as a file id if it is a positive integer (or string of digits) an SQLite
    INTEGER can hold, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if 0 < value <= MAX_FILE_ID else None
    if isinstance(value, str) and value.isascii() and value.isdigit():
        parsed = int(value)
        return parsed if 0 < parsed <= MAX_FILE_ID else None
    return None


def to_public(document: FileDocument) -> FileDocument:
    """Public shape of a file document: _id renamed to id, localPath removed."""
    public = {"id": document["_id"], **document}
    public.pop("_id", None)
    public.pop("localPath", None)
    return public
