"""
DevCamper Backend — Photo Storage Service
===========================================

What:  Validates and stores bootcamp photos, and resolves stored files for
       serving.
How:   Checks the declared content type and the byte size, writes the file
       as photo_<bootcamp id><original extension> into FILE_UPLOAD_PATH with
       async I/O, and removes superseded photos.
Who:   BootcampService.upload_photo() and the /uploads route.

Naming:
    The stored name is derived from the bootcamp id only, so a second upload
    with the same extension overwrites the first. An upload with a different
    extension leaves the old file behind until cleanup_file() removes it.
    The client's filename contributes nothing but its extension, which keeps
    path separators and `..` out of the storage path.
"""

import logging
from pathlib import Path
from typing import Optional

import aiofiles

from devcamper.config import settings
from devcamper.exceptions import (
    FileStorageError,
    FileTooLargeError,
    NotFoundError,
    ValidationError,
)
from devcamper.models.bootcamp import DEFAULT_PHOTO

logger = logging.getLogger(__name__)


class FileService:
    """
    Manages the photo upload lifecycle.

    Lifecycle of an upload:
        1. validate_upload(): file present, image/* content type, size limit
        2. photo_filename(): photo_<id><ext>
        3. store_file(): async write into the storage directory
        4. cleanup_file(): best-effort removal of the previous photo
    """

    def __init__(self, storage_root: Optional[str] = None, max_size: Optional[int] = None):
        """
        Args:
            storage_root: Override settings.file_upload_path (used in tests).
            max_size: Override settings.max_file_upload in bytes (used in tests).
        """
        self.storage_root = Path(storage_root or settings.file_upload_path).resolve()
        self.max_size = max_size or settings.max_file_upload
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info(
            "FileService initialized with storage_root=%s max_size=%d",
            self.storage_root,
            self.max_size,
        )

    def validate_upload(
        self,
        content: Optional[bytes],
        content_type: Optional[str],
    ) -> None:
        """
        Raises:
            ValidationError:   no file attached, or content type not image/*
            FileTooLargeError: more than max_size bytes
        """
        if content is None:
            raise ValidationError(message="Please upload a file", field="file")

        if not (content_type or "").startswith("image"):
            raise ValidationError(
                message="Please upload an image file",
                field="file",
                context={"content_type": content_type},
            )

        if len(content) > self.max_size:
            raise FileTooLargeError(max_size=self.max_size, actual_size=len(content))

    @staticmethod
    def photo_filename(bootcamp_id: object, original_filename: Optional[str]) -> str:
        """photo_<id><ext>, keeping the extension of the uploaded file as sent."""
        extension = Path(original_filename or "").suffix
        return f"photo_{bootcamp_id}{extension}"

    def path_for(self, filename: str) -> Path:
        """
        Absolute path of a stored file.

        Raises NotFoundError for names that would resolve outside the
        storage root, so traversal attempts look like any other missing file.
        """
        candidate = (self.storage_root / filename).resolve()
        if candidate.parent != self.storage_root:
            raise NotFoundError(resource="File", resource_id=filename)
        return candidate

    async def store_file(self, content: bytes, filename: str) -> str:
        """
        Write the photo to disk and return its absolute path.

        Raises:
            FileStorageError if the directory or the file cannot be written.
        """
        path = self.path_for(filename)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", path, str(e))
            raise FileStorageError(context={"path": str(path), "os_error": str(e)})

        logger.info("File stored: %s (%d bytes)", filename, len(content))
        return str(path)

    async def cleanup_file(self, filename: Optional[str]) -> None:
        """
        Remove a stored photo that no record points to, if there is one.

        The placeholder photo is never removed. Failures are logged and
        otherwise ignored, since a leftover file does not affect any response.
        """
        if not filename or filename == DEFAULT_PHOTO:
            return
        try:
            path = self.path_for(filename)
            if path.exists():
                path.unlink()
                logger.info("Removed superseded file: %s", filename)
            else:
                logger.debug("Cleanup: file already gone: %s", filename)
        except (OSError, NotFoundError) as e:
            logger.warning("Failed to clean up file %s: %s", filename, str(e))


file_service = FileService()
