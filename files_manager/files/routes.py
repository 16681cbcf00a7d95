"""File API routes: create, show, list, publish/unpublish, data."""

import logging
import mimetypes
from pathlib import Path
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import FileResponse

from files_manager.auth.dependencies import get_current_user, get_optional_user
from files_manager.config import get_settings
from files_manager.files.dependencies import get_file_store, get_file_validator
from files_manager.files.models import (
    ROOT_PARENT_ID,
    FileCreate,
    FileDocument,
    FileType,
    parse_file_id,
    to_public,
)
from files_manager.files.store import FileStore, StorageError
from files_manager.files.validator import FileValidator
from files_manager.users.models import User

router = APIRouter(prefix="/files", tags=["files"])
log = logging.getLogger(__name__)

NOT_FOUND = "Not found"


def _parse_parent_param(parent_id: Optional[str]) -> Optional[int]:
    """Query-string parentId: missing or "0" is the root; unparsable ids match nothing (None)."""
    if parent_id is None or parent_id == str(ROOT_PARENT_ID):
        return ROOT_PARENT_ID
    return parse_file_id(parent_id)


async def _owned_file(store: FileStore, file_id: str, user: User) -> FileDocument:
    """Return the caller's file with file_id or raise 404."""
    parsed = parse_file_id(file_id)
    document = None
    if parsed is not None:
        document = await store.get({"_id": parsed, "userId": user.id})
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return document


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_file(
    body: FileCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    validator: Annotated[FileValidator, Depends(get_file_validator)],
    store: Annotated[FileStore, Depends(get_file_store)],
) -> dict:
    """
    Create a file, image or folder. Body: name, type, isPublic, parentId, data (base64).
    Payload bytes go to the blob area; metadata is returned without the local path.
    """
    result = await validator.validate(body)
    if not result.ok:
        log.warning("create_file rejected user=%s: %s", current_user.id, result.error.value)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error.value)
    try:
        return await store.save(current_user.id, result.params, get_settings().folder_path)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{file_id}")
async def get_file(
    file_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    store: Annotated[FileStore, Depends(get_file_store)],
) -> dict:
    """Return one of the caller's files."""
    return to_public(await _owned_file(store, file_id, current_user))


@router.get("", response_model=List[dict])
async def list_files(
    current_user: Annotated[User, Depends(get_current_user)],
    store: Annotated[FileStore, Depends(get_file_store)],
    parent_id: Annotated[Optional[str], Query(alias="parentId")] = None,
    page: Annotated[int, Query(ge=0)] = 0,
) -> List[dict]:
    """List the caller's files under parentId (root by default), one page at a time."""
    parent = _parse_parent_param(parent_id)
    if parent is None:
        return []
    query = {"userId": current_user.id, "parentId": parent}
    documents = store.list_children(query, page=page, page_size=get_settings().page_size)
    result = [to_public(document) async for document in documents]
    log.info("list_files user=%s parent=%s page=%d count=%d", current_user.id, parent, page, len(result))
    return result


async def _set_public(store: FileStore, file_id: str, user: User, is_public: bool) -> dict:
    parsed = parse_file_id(file_id)
    document = None
    if parsed is not None:
        document = await store.update({"_id": parsed, "userId": user.id}, {"isPublic": is_public})
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    log.info("File id=%s isPublic=%s user=%s", parsed, is_public, user.id)
    return to_public(document)


@router.put("/{file_id}/publish")
async def publish(
    file_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    store: Annotated[FileStore, Depends(get_file_store)],
) -> dict:
    """Mark one of the caller's files public."""
    return await _set_public(store, file_id, current_user, True)


@router.put("/{file_id}/unpublish")
async def unpublish(
    file_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    store: Annotated[FileStore, Depends(get_file_store)],
) -> dict:
    """Mark one of the caller's files private."""
    return await _set_public(store, file_id, current_user, False)


@router.get("/{file_id}/data")
async def get_file_data(
    file_id: str,
    current_user: Annotated[Optional[User], Depends(get_optional_user)],
    store: Annotated[FileStore, Depends(get_file_store)],
) -> FileResponse:
    """
    Return the payload of a file or image. Public entries are readable by anyone;
    private ones only by their owner (X-Token), everyone else gets 404.
    """
    parsed = parse_file_id(file_id)
    document = await store.get({"_id": parsed}) if parsed is not None else None
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    if not document["isPublic"] and (current_user is None or current_user.id != document["userId"]):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    if document["type"] == FileType.FOLDER.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A folder doesn't have content",
        )
    path = Path(document.get("localPath") or "")
    if not document.get("localPath") or not path.is_file():
        log.warning("Blob missing for file id=%s path=%s", parsed, path)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    media_type = mimetypes.guess_type(document["name"])[0] or "application/octet-stream"
    return FileResponse(path=path, media_type=media_type)
