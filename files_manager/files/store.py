"""File persistence: metadata documents plus payload blobs on disk.

For file and image entries the decoded payload is written to
``<blob_root>/<uuid>`` before the metadata document is inserted. If the insert
fails after a successful write the blob is left behind (orphan); the failure is
logged with its path and re-raised.
"""

import base64
import binascii
import logging
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional

from files_manager.files.blobs import BlobWriter, new_blob_name
from files_manager.files.documents import FileDocuments
from files_manager.files.models import FileDocument, FileType, ValidatedParams, to_public

log = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


class StorageError(Exception):
    """Payload could not be decoded or written to the blob area."""


class FileStore:
    """Saves, reads, lists and updates file entries."""

    def __init__(self, documents: FileDocuments, blobs: Optional[BlobWriter] = None) -> None:
        self._documents = documents
        self._blobs = blobs or BlobWriter()

    async def save(self, user_id: int, params: ValidatedParams, blob_root: Path) -> FileDocument:
        """
        Store a validated entry for user_id and return its public shape.
        Raises StorageError if the payload cannot be decoded or written; nothing is inserted then.
        """
        document: FileDocument = {
            "userId": user_id,
            "name": params.name,
            "type": params.type.value,
            "isPublic": params.is_public,
            "parentId": params.parent_id,
        }
        if params.type is not FileType.FOLDER:
            try:
                payload = base64.b64decode(params.data or "")
            except (binascii.Error, ValueError) as e:
                raise StorageError(f"Invalid data: {e}")
            path = Path(blob_root) / new_blob_name()
            try:
                self._blobs.ensure_dir(Path(blob_root))
                self._blobs.write(path, payload)
            except OSError as e:
                log.warning("Blob write failed path=%s: %s", path, e)
                raise StorageError(str(e))
            document["localPath"] = str(path)

        try:
            file_id = await self._documents.insert_one(document)
        except Exception:
            if "localPath" in document:
                log.error("Metadata insert failed, orphan blob left at %s", document["localPath"])
            raise
        document["_id"] = file_id
        log.info(
            "Saved %s id=%s user=%s parent=%s", params.type.value, file_id, user_id, params.parent_id
        )
        return to_public(document)

    async def get(self, query: Dict[str, Any]) -> Optional[FileDocument]:
        """Document matching query (e.g. {"_id": 3, "userId": 1}) or None."""
        return await self._documents.find_one(query)

    def list_children(
        self,
        query: Dict[str, Any],
        page: Optional[int] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> AsyncIterator[FileDocument]:
        """
        Documents matching query (e.g. {"parentId": 0, "userId": 1}) in insertion order.
        page is zero-based; None returns every match.
        """
        if page is None:
            return self._documents.find(query)
        return self._documents.find(query, skip=max(page, 0) * page_size, limit=page_size)

    async def update(self, query: Dict[str, Any], changes: Dict[str, Any]) -> Optional[FileDocument]:
        """Apply changes to the document matching query; return it post-update, or None."""
        return await self._documents.find_one_and_update(query, changes)
