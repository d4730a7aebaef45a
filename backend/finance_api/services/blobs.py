from pathlib import Path

from fastapi import HTTPException


class FilesystemBlobStore:
    """Named-object storage in a directory tree."""

    def __init__(self, root: str) -> None:
        self._root = Path(root).expanduser().resolve()

    def put(self, key: str, content: bytes) -> Path:
        path = (self._root / key).resolve()
        if self._root not in path.parents:
            raise HTTPException(status_code=500, detail="Invalid export storage path")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path
