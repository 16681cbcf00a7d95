"""Blob area: raw payload bytes for file and image entries, one file per entry."""

import uuid
from pathlib import Path


def new_blob_name() -> str:
    """Unique name for a blob; unrelated to the entry id."""
    return str(uuid.uuid4())


class BlobWriter:
    """Directory creation and byte writes under a blob root."""

    def ensure_dir(self, root: Path) -> None:
        """Create root and missing parents; an existing directory is fine."""
        root.mkdir(parents=True, exist_ok=True)

    def write(self, path: Path, data: bytes) -> None:
        """Write data to path, replacing any previous content."""
        path.write_bytes(data)
