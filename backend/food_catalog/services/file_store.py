"""
Food Catalog Backend: Image File Store
=======================================

What:  Owns the upload directory: stages incoming images, deletes files,
       and maps between filenames and the public image URLs stored on
       Food records.
Who:   The upload dependency stages files; FoodService deletes them; the
       uploads route serves them.

Directory layout (flat, one file per image):

    uploads/foods/
    ├── 0b9d6f0c2f5e4b7a9d1e3c4b5a6f7e8d.png
    └── 9a8b7c6d5e4f4a3b2c1d0e9f8a7b6c5d.jpg

Filenames are generated (uuid4 hex + original extension). No user input
ever becomes part of a path; names that contain separators or `..` are
refused by every operation.

Deletion never raises. A missing file is "nothing removed"; an OS error is
logged and reported in CleanupResult.error so the caller can log it, but
the record operation that triggered the cleanup carries on.
"""

import logging
import stat
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

import aiofiles
import aiofiles.os

from food_catalog.config import settings
from food_catalog.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


@dataclass(frozen=True)
class StagedFile:
    """
    An uploaded image already written to the upload directory but not yet
    claimed by a Food record.
    """

    filename: str
    original_name: Optional[str] = None
    size: int = 0


@dataclass(frozen=True)
class FileInfo:
    """Size and timestamps of a stored image."""

    filename: str
    size: int
    created_at: datetime
    modified_at: datetime


@dataclass(frozen=True)
class CleanupResult:
    """
    Outcome of FileStore.delete.

    Truthy only when a file was actually removed. `error` is set when the
    filesystem refused the delete; it is informational only.
    """

    filename: Optional[str]
    removed: bool
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.removed


class FileStore:
    """
    Image storage rooted at a single directory.

    Args:
        upload_dir: Directory for image files (created if missing).
        url_prefix: Prefix of the URLs written to Food.imageUrl.
        legacy_prefixes: Older URL prefixes still accepted by
            resolve_reference; they resolve into the same directory.
        max_file_size: Upload limit in bytes.
    """

    def __init__(
        self,
        upload_dir: Optional[str] = None,
        url_prefix: Optional[str] = None,
        legacy_prefixes: Optional[Iterable[str]] = None,
        max_file_size: Optional[int] = None,
    ):
        self.upload_dir = Path(upload_dir or settings.upload_dir).resolve()
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.url_prefix = url_prefix or settings.image_url_prefix
        if legacy_prefixes is None:
            legacy_prefixes = settings.legacy_image_url_prefix_list
        # Longest first, so /api/uploads/foods/ wins over /api/uploads/
        self._prefixes = sorted(
            {self.url_prefix, *legacy_prefixes}, key=len, reverse=True
        )
        self.max_file_size = max_file_size or settings.max_file_size
        logger.info("FileStore initialized with upload_dir=%s", self.upload_dir)

    # ── Naming ────────────────────────────────────────────────────────────

    @staticmethod
    def _is_plain_filename(filename: str) -> bool:
        if not filename or filename in {".", ".."}:
            return False
        return not any(sep in filename for sep in ("/", "\\", "\x00"))

    def _path(self, filename: str) -> Optional[Path]:
        """Absolute path for a plain filename inside upload_dir, else None."""
        if not self._is_plain_filename(filename):
            return None
        path = (self.upload_dir / filename).resolve()
        if path.parent != self.upload_dir:
            return None
        return path

    def path_for(self, filename: str) -> Path:
        """
        Absolute path of a stored image, for serving.

        Raises:
            ValidationError: the name would leave the upload directory
        """
        path = self._path(filename)
        if path is None:
            raise ValidationError(message="Invalid file path", field="filename")
        return path

    def image_url(self, filename: str) -> str:
        """Public URL stored on the Food record for this file."""
        return f"{self.url_prefix}{filename}"

    def resolve_reference(self, image_url: Optional[str]) -> Optional[str]:
        """
        Recover the on-disk filename from a stored image URL.

        Returns None for empty values, unknown prefixes, and anything whose
        remainder is not a plain filename, so a stored URL can never point
        a delete outside the upload directory.

            resolve_reference("/api/uploads/foods/abc.png") -> "abc.png"
            resolve_reference("/api/uploads/abc.png")       -> "abc.png"
            resolve_reference("https://cdn/abc.png")        -> None
        """
        if not image_url:
            return None
        for prefix in self._prefixes:
            if image_url.startswith(prefix):
                filename = image_url[len(prefix):]
                if self._is_plain_filename(filename):
                    return filename
                return None
        return None

    # ── Staging (upload) ──────────────────────────────────────────────────

    def validate_extension(self, filename: str) -> str:
        """Return the lower-cased extension, or raise ValidationError."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, size: int) -> None:
        if size == 0:
            raise ValidationError(message="Uploaded image is empty", field="image")
        if size > self.max_file_size:
            max_mb = self.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field="image",
                context={"max_size": self.max_file_size, "actual_size": size},
            )

    async def stage(self, original_name: str, content: bytes) -> StagedFile:
        """
        Validate and write an uploaded image, returning its descriptor.

        Raises:
            ValidationError: unsupported extension, empty or oversized file
            FileStorageError: the write failed
        """
        ext = self.validate_extension(original_name)
        self.validate_size(len(content))

        filename = f"{uuid.uuid4().hex}{ext}"
        path = self.upload_dir / filename
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store upload at %s: %s", path, str(e))
            await self.delete(filename)
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"filename": filename, "os_error": str(e)},
            )

        logger.info("Staged upload %s as %s (%d bytes)", original_name, filename, len(content))
        return StagedFile(filename=filename, original_name=original_name, size=len(content))

    # ── Existence / deletion ──────────────────────────────────────────────

    async def exists(self, filename: str) -> bool:
        path = self._path(filename)
        if path is None:
            return False
        return await aiofiles.os.path.isfile(path)

    async def info(self, filename: str) -> Optional[FileInfo]:
        """
        Stat a stored image. None when the name is refused, the file is
        missing or not a regular file, or the filesystem cannot answer
        (logged).

        created_at is the birth time where the platform records one, else
        the inode change time.
        """
        path = self._path(filename)
        if path is None:
            return None
        try:
            st = await aiofiles.os.stat(path)
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Failed to stat file %s: %s", filename, str(e))
            return None

        if not stat.S_ISREG(st.st_mode):
            return None

        created = getattr(st, "st_birthtime", st.st_ctime)
        return FileInfo(
            filename=filename,
            size=st.st_size,
            created_at=datetime.fromtimestamp(created, tz=timezone.utc),
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )

    async def delete(self, filename: Optional[str]) -> CleanupResult:
        """
        Remove a stored image.

        Never raises: a missing file or refused name yields removed=False;
        an OS error is logged and returned in `error`.
        """
        if not filename:
            return CleanupResult(filename=filename, removed=False)

        path = self._path(filename)
        if path is None:
            logger.warning("Refusing to delete %r: not a file in %s", filename, self.upload_dir)
            return CleanupResult(filename=filename, removed=False, error="invalid filename")

        try:
            if not await aiofiles.os.path.exists(path):
                logger.debug("Cleanup: file already gone: %s", filename)
                return CleanupResult(filename=filename, removed=False)
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return CleanupResult(filename=filename, removed=False)
        except OSError as e:
            logger.warning("Failed to delete file %s: %s", filename, str(e))
            return CleanupResult(filename=filename, removed=False, error=str(e))

        logger.info("Deleted file: %s", filename)
        return CleanupResult(filename=filename, removed=True)


file_store = FileStore()


def get_file_store() -> FileStore:
    """FastAPI dependency returning the process-wide FileStore."""
    return file_store
