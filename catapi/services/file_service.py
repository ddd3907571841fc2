"""
Cat Registry API — Image Storage Service
=========================================

What:  Handles cat image upload validation, storage, and cleanup.
Why:   Centralizes all file system operations with security checks.
How:   Validates extension and size, stores in date-organized directories,
       generates unique filenames to prevent conflicts.
Who:   Called by CatService when a cat is created.
When:  After receiving the multipart upload, before the cat is inserted.

Security Model:
    1. Extension check:   Only .png / .jpg / .jpeg
    2. Size check:        Empty files and files above MAX_FILE_SIZE are rejected
    3. UUID filename:     No user input ends up in the stored path
    4. Storage root:      Files are served only through GET /api/uploads/{path},
                          which refuses paths resolving outside the root
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from catapi.config import settings
from catapi.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg"}


class FileService:
    """
    Manages image upload, validation, and storage lifecycle.

    Directory Structure:
        uploads/
        └── 2026/
            └── 10/
                └── 19/
                    ├── a1b2c3d4-....jpg
                    └── e5f6g7h8-....png

    The relative path ("2026/10/19/<uuid>.jpg") is what gets stored as the
    cat's `filename`.
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
                          If None, uses settings.storage_root.
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """
        Check that the file extension is in the allowed list.

        Returns: Normalized extension (lowercase with dot).
        Raises:  ValidationError if extension is not allowed.
        """
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext}' is not supported "
                    f"(allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}): cat"
                ),
                field="cat",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Validate file size against configured maximum.

        Content-Length is checked first (cheap, may be absent or wrong),
        then the actual byte count.
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty: cat", field="cat")

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File is too large (max {max_mb:.0f}MB): cat",
                field="cat",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=f"File is too large (max {max_mb:.0f}MB): cat",
                field="cat",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """
        Generate a unique, date-organized file path for storage.

        Returns: Tuple of (absolute_path, relative_path_from_storage_root).
        """
        now = datetime.now(timezone.utc)
        date_dir = now.strftime("%Y/%m/%d")
        unique_name = f"{uuid.uuid4()}{extension}"

        relative_path = f"{date_dir}/{unique_name}"
        absolute_path = self.storage_root / relative_path

        return absolute_path, relative_path

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write validated file content to disk.

        Returns: Tuple of (absolute_path, relative_path).
        Raises:  FileStorageError if directory creation or file write fails.
        """
        absolute_path, relative_path = self._generate_storage_path(extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)

            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)

            logger.info("File stored: %s (%d bytes)", relative_path, len(content))
            return str(absolute_path), relative_path

        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a stored file by absolute path.

        Best-effort: a missing file is ignored and OS errors are logged, never raised.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    def resolve(self, relative_path: str) -> Path:
        """
        Map a stored relative path back to an absolute one.

        Raises:
            ValidationError if the path escapes the storage root (../ tricks).
        """
        full_path = (self.storage_root / relative_path).resolve()
        if not full_path.is_relative_to(self.storage_root):
            raise ValidationError(message="Invalid file path: path", field="path")
        return full_path

    async def remove_stored(self, relative_path: str) -> None:
        """Remove the image behind a stored relative path (after its cat is deleted)."""
        try:
            path = self.resolve(relative_path)
        except ValidationError:
            logger.warning("Not removing %s: outside the storage root", relative_path)
            return
        await self.cleanup_file(str(path))

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        """
        Complete validation and storage pipeline: extension → size → write.

        Returns: Tuple of (absolute_path, relative_path_for_db).
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        return await self.store_file(content, ext)


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
