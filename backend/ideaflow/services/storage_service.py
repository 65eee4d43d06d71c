"""
IdeaFlow Backend — File Storage Service
=========================================

What:  Storage interface for uploaded covers, attachments and profile photos,
       plus the local-disk implementation.
How:   `put()` writes bytes and returns the public URL path the caller
       persists next to the entity (e.g. "/uploads/1718000000000.png");
       `get()` reads them back from such a path.
Who:   Injected into routes via `get_storage` (app.state.storage).

Storage contract:
    put(content, filename) -> "/uploads/<name>"
    get("/uploads/<name>") -> bytes
    delete("/uploads/<name>") -> None (a missing file is not an error)

    Swapping in object storage only requires another FileStorage subclass;
    the case workflows only ever see path strings.

Local layout:
    uploads/
    ├── 1718000000000.png
    ├── 1718000000001.pdf      ← same millisecond: timestamp bumped
    └── 1718000000452.jpg

    Filenames are the upload time in milliseconds plus the original
    extension. Files are created with exclusive mode, so two uploads landing
    in the same millisecond get consecutive timestamps instead of overwriting.
    No deduplication, hashing, size or type validation happens here.
"""

import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional

import aiofiles
import aiofiles.os
from fastapi import Request, UploadFile

from ideaflow.config import settings
from ideaflow.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# Public URL prefix the uploads directory is mounted under (see main.py)
UPLOADS_URL_PREFIX = "/uploads"

# Safety bound on timestamp bumping when many files share a millisecond
_MAX_NAME_ATTEMPTS = 1000


class FileStorage(ABC):
    """Abstract key → blob store for uploaded files."""

    @abstractmethod
    async def put(self, content: bytes, filename: str) -> str:
        """Store bytes and return the public path to persist."""
        ...

    @abstractmethod
    async def get(self, path: str) -> bytes:
        """Return the bytes behind a path previously returned by put()."""
        ...

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Remove a stored file. Deleting a missing file is not an error."""
        ...

    async def discard(self, paths: Iterable[str]) -> None:
        """
        Best-effort cleanup of files stored for a request that then failed.
        Failures are logged; the caller is already reporting an error.
        """
        for path in paths:
            try:
                await self.delete(path)
            except (FileStorageError, ValidationError) as e:
                logger.warning("Failed to clean up file %s: %s", path, e.message)

    async def put_uploads(self, uploads: Iterable[UploadFile]) -> List[str]:
        """
        Store every multipart upload that actually carries a file.

        Browsers send an empty part (no filename) for an untouched file
        input; those are skipped.
        """
        paths = []
        try:
            for upload in uploads:
                if upload is None or not upload.filename:
                    continue
                try:
                    content = await upload.read()
                finally:
                    await upload.close()
                paths.append(await self.put(content, upload.filename))
        except FileStorageError:
            await self.discard(paths)
            raise
        return paths


class LocalFileStorage(FileStorage):
    """Stores files in a flat local directory served under /uploads."""

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or settings.uploads_dir).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info("LocalFileStorage initialized with root=%s", self.root)

    def _public_path(self, name: str) -> str:
        return f"{UPLOADS_URL_PREFIX}/{name}"

    def _resolve(self, path: str) -> Path:
        """Maps a public path back to a file inside the root, refusing traversal."""
        name = PurePosixPath(path).name
        if not name or name in (".", ".."):
            raise ValidationError(message="Invalid file path", field="path")
        return self.root / name

    async def put(self, content: bytes, filename: str) -> str:
        ext = Path(filename).suffix.lower()
        stamp = int(time.time() * 1000)

        for _ in range(_MAX_NAME_ATTEMPTS):
            name = f"{stamp}{ext}"
            target = self.root / name
            try:
                # "xb": exclusive create, fails if the name is taken
                async with aiofiles.open(target, "xb") as f:
                    await f.write(content)
            except FileExistsError:
                stamp += 1
                continue
            except OSError as e:
                logger.error("Failed to store file at %s: %s", target, str(e))
                raise FileStorageError(
                    message="Failed to save uploaded file. Please try again.",
                    context={"path": str(target), "os_error": str(e)},
                )
            logger.info("File stored: %s (%d bytes)", name, len(content))
            return self._public_path(name)

        raise FileStorageError(
            message="Failed to save uploaded file. Please try again.",
            context={"reason": "no free filename", "filename": filename},
        )

    async def get(self, path: str) -> bytes:
        target = self._resolve(path)
        if not target.is_file():
            raise NotFoundError(resource="file", resource_id=path)
        try:
            async with aiofiles.open(target, "rb") as f:
                return await f.read()
        except OSError as e:
            logger.error("Failed to read file %s: %s", target, str(e))
            raise FileStorageError(
                message="Failed to read stored file.",
                context={"path": str(target), "os_error": str(e)},
            )

    async def delete(self, path: str) -> None:
        target = self._resolve(path)
        try:
            await aiofiles.os.remove(target)
        except FileNotFoundError:
            logger.debug("Delete: file already gone: %s", target.name)
            return
        except OSError as e:
            logger.error("Failed to delete file %s: %s", target, str(e))
            raise FileStorageError(
                message="Failed to delete stored file.",
                context={"path": str(target), "os_error": str(e)},
            )
        logger.info("File deleted: %s", target.name)


def check_attachment_count(uploads: Optional[List[UploadFile]], field: str) -> List[UploadFile]:
    """Rejects multipart requests carrying more than MAX_ATTACHMENTS files."""
    uploads = [u for u in (uploads or []) if u is not None and u.filename]
    if len(uploads) > settings.max_attachments:
        raise ValidationError(
            message=f"Too many files: at most {settings.max_attachments} are allowed",
            field=field,
            context={"received": len(uploads), "max": settings.max_attachments},
        )
    return uploads


# ── Dependency ────────────────────────────────────────────────────────────
def get_storage(request: Request) -> FileStorage:
    """Returns the FileStorage owned by the running application."""
    return request.app.state.storage
