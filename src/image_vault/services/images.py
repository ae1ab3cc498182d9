"""Image upload, listing and deletion with ownership checks."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from image_vault.domain.models import ImageRecord, StoredObject
from image_vault.domain.uploads import SelectedFile
from image_vault.errors import (
    AuthorizationError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from image_vault.services.validation import validate_image_file

_logger = logging.getLogger(__name__)


class ImageRepository(Protocol):
    """Persistence interface for image metadata."""

    def create_image(  # noqa: PLR0913
        self,
        owner_id: UUID,
        filename: str,
        public_url: str,
        storage_id: str,
        file_size_bytes: int,
        mime_type: str,
    ) -> ImageRecord:
        """Create an image row and return it."""

    def list_images(self, owner_id: UUID) -> list[ImageRecord]:
        """Return every image owned by the user, newest first."""

    def get_image(self, image_id: UUID) -> ImageRecord | None:
        """Return an image row by id, if present."""

    def delete_image(self, image_id: UUID) -> None:
        """Delete an image row."""


class MediaStore(Protocol):
    """Interface for binary object storage with public URLs."""

    def upload(
        self, owner_id: UUID, filename: str, data: bytes, content_type: str
    ) -> StoredObject:
        """Store the bytes and return their storage id and public URL."""

    def delete(self, storage_id: str) -> None:
        """Remove a stored object."""


@dataclass
class ImageService:
    """Coordinates the media store and the record store."""

    repository: ImageRepository
    media_store: MediaStore

    def upload(self, owner_id: UUID, file: SelectedFile) -> ImageRecord:
        """Store a file and record its metadata.

        The record is only created once the media store accepted the bytes. If
        the record insert fails the stored object is removed again so no
        orphaned media is left behind.
        """
        check = validate_image_file(file)
        if not check.valid:
            raise ValidationError(check.message or "Invalid file.")

        try:
            stored = self.media_store.upload(
                owner_id, file.filename, file.data, file.content_type
            )
        except Exception as exc:
            _logger.exception("Media upload failed: owner_id=%s", owner_id)
            raise StorageError("Failed to upload image") from exc

        try:
            image = self.repository.create_image(
                owner_id=owner_id,
                filename=file.filename,
                public_url=stored.public_url,
                storage_id=stored.storage_id,
                file_size_bytes=file.size,
                mime_type=file.content_type,
            )
        except Exception as exc:
            _logger.exception("Image record insert failed: owner_id=%s", owner_id)
            self._discard_object(stored.storage_id)
            raise StorageError("Failed to upload image") from exc

        _logger.info("Uploaded image: image_id=%s owner_id=%s", image.id, owner_id)
        return image

    def list_images(self, owner_id: UUID) -> list[ImageRecord]:
        """Return the caller's images, newest first."""
        images = self.repository.list_images(owner_id)
        return sorted(images, key=lambda image: image.uploaded_at, reverse=True)

    def get_image(self, owner_id: UUID, image_id: UUID) -> ImageRecord:
        """Return an image the caller owns."""
        image = self.repository.get_image(image_id)
        if image is None:
            raise NotFoundError("Image not found")
        if image.owner_id != owner_id:
            _logger.warning(
                "Cross-account image access denied: image_id=%s user_id=%s",
                image_id,
                owner_id,
            )
            raise AuthorizationError("You do not have permission to access this image")
        return image

    def delete_image(self, owner_id: UUID, image_id: UUID) -> None:
        """Delete an image from the media store and then its record."""
        image = self.get_image(owner_id, image_id)
        try:
            self.media_store.delete(image.storage_id)
        except Exception as exc:
            _logger.exception("Media delete failed: image_id=%s", image_id)
            raise StorageError("Failed to delete image") from exc
        try:
            self.repository.delete_image(image_id)
        except Exception as exc:
            _logger.exception("Image record delete failed: image_id=%s", image_id)
            raise StorageError("Failed to delete image") from exc
        _logger.info("Deleted image: image_id=%s owner_id=%s", image_id, owner_id)

    def _discard_object(self, storage_id: str) -> None:
        try:
            self.media_store.delete(storage_id)
        except Exception:
            _logger.exception("Failed to remove orphaned object: %s", storage_id)
