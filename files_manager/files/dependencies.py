"""FastAPI dependencies that build file services for a request."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from files_manager.db.session import get_db
from files_manager.files.documents import SqlFileDocuments
from files_manager.files.store import FileStore
from files_manager.files.validator import FileValidator


def get_file_documents(
    session: Annotated[AsyncSession, Depends(get_db)],
) -> SqlFileDocuments:
    return SqlFileDocuments(session)


def get_file_validator(
    documents: Annotated[SqlFileDocuments, Depends(get_file_documents)],
) -> FileValidator:
    return FileValidator(documents)


def get_file_store(
    documents: Annotated[SqlFileDocuments, Depends(get_file_documents)],
) -> FileStore:
    return FileStore(documents)
