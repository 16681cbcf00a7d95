"""Validation of file/folder creation requests."""

import logging

from files_manager.files.documents import FileDocuments
from files_manager.files.models import (
    ROOT_PARENT_ID,
    FileCreate,
    FileError,
    FileType,
    ValidatedParams,
    ValidationResult,
    parse_file_id,
)

log = logging.getLogger(__name__)


def _is_root(parent_id) -> bool:
    return parent_id is None or parent_id == ROOT_PARENT_ID or parent_id == str(ROOT_PARENT_ID)


class FileValidator:
    """
    Checks a FileCreate body in order: name, type, data, parent.
    The first failing rule is reported. Nothing is written.
    """

    def __init__(self, documents: FileDocuments) -> None:
        self._documents = documents

    async def validate(self, body: FileCreate) -> ValidationResult:
        if not body.name:
            return ValidationResult(error=FileError.MISSING_NAME)
        try:
            file_type = FileType(body.type)
        except ValueError:
            return ValidationResult(error=FileError.MISSING_TYPE)
        if not body.data and file_type is not FileType.FOLDER:
            return ValidationResult(error=FileError.MISSING_DATA)

        parent_id = ROOT_PARENT_ID
        if not _is_root(body.parent_id):
            parent_id = parse_file_id(body.parent_id)
            parent = None
            if parent_id is not None:
                parent = await self._documents.find_one({"_id": parent_id})
            if parent is None:
                log.debug("Parent %r not found", body.parent_id)
                return ValidationResult(error=FileError.PARENT_NOT_FOUND)
            if parent["type"] != FileType.FOLDER.value:
                return ValidationResult(error=FileError.PARENT_NOT_A_FOLDER)

        return ValidationResult(
            params=ValidatedParams(
                name=body.name,
                type=file_type,
                is_public=body.is_public,
                parent_id=parent_id,
                data=body.data if file_type is not FileType.FOLDER else None,
            )
        )
