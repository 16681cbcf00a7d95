"""Document-style access to file entries.

``FileDocuments`` is the narrow contract the file services use: equality
queries over document keys, single inserts and single-document updates.
``SqlFileDocuments`` maps it onto the ``files`` table.
"""

from typing import Any, AsyncIterator, Dict, Optional, Protocol

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from files_manager.files.models import FileDocument, FileEntry

# document key -> column attribute name
_FIELDS: Dict[str, str] = {
    "_id": "id",
    "userId": "user_id",
    "name": "name",
    "type": "type",
    "isPublic": "is_public",
    "parentId": "parent_id",
    "localPath": "local_path",
}


class FileDocuments(Protocol):
    """Contract for the file document store."""

    async def find_one(self, query: Dict[str, Any]) -> Optional[FileDocument]: ...

    def find(
        self, query: Dict[str, Any], skip: int = 0, limit: Optional[int] = None
    ) -> AsyncIterator[FileDocument]: ...

    async def insert_one(self, document: FileDocument) -> int: ...

    async def find_one_and_update(
        self, query: Dict[str, Any], changes: Dict[str, Any]
    ) -> Optional[FileDocument]: ...


def _attr(key: str) -> str:
    try:
        return _FIELDS[key]
    except KeyError:
        raise ValueError(f"Unknown file field: {key!r}")


def _to_document(row: FileEntry) -> FileDocument:
    doc: FileDocument = {
        "_id": row.id,
        "userId": row.user_id,
        "name": row.name,
        "type": row.type,
        "isPublic": row.is_public,
        "parentId": row.parent_id,
    }
    if row.local_path is not None:
        doc["localPath"] = row.local_path
    return doc


class SqlFileDocuments:
    """FileDocuments backed by the files table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def _select(self, query: Dict[str, Any]):
        stmt = select(FileEntry)
        for key, value in query.items():
            stmt = stmt.where(getattr(FileEntry, _attr(key)) == value)
        return stmt

    async def find_one(self, query: Dict[str, Any]) -> Optional[FileDocument]:
        """First document matching every key/value in query, or None."""
        result = await self._session.execute(self._select(query).limit(1))
        row = result.scalar_one_or_none()
        return _to_document(row) if row is not None else None

    async def find(
        self, query: Dict[str, Any], skip: int = 0, limit: Optional[int] = None
    ) -> AsyncIterator[FileDocument]:
        """Documents matching query in insertion order; skip/limit for paging."""
        stmt = self._select(query).order_by(FileEntry.id).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        for row in result.scalars():
            yield _to_document(row)

    async def insert_one(self, document: FileDocument) -> int:
        """Insert document (without _id), commit and return the new id."""
        row = FileEntry(**{_attr(key): value for key, value in document.items() if key != "_id"})
        self._session.add(row)
        await self._session.flush()
        file_id = row.id
        await self._session.commit()
        return file_id

    async def find_one_and_update(
        self, query: Dict[str, Any], changes: Dict[str, Any]
    ) -> Optional[FileDocument]:
        """Apply changes to the first match, commit, and return the updated document."""
        result = await self._session.execute(self._select(query).limit(1))
        row = result.scalar_one_or_none()
        if row is None:
            return None
        for key, value in changes.items():
            if key == "_id":
                raise ValueError("_id cannot be updated")
            setattr(row, _attr(key), value)
        await self._session.flush()
        document = _to_document(row)
        await self._session.commit()
        return document

    async def count(self) -> int:
        """Total number of file entries."""
        result = await self._session.execute(select(func.count()).select_from(FileEntry))
        return result.scalar_one()
