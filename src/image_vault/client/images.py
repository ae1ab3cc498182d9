"""Client-side state for the current user's image collection."""

import logging
from collections.abc import Callable, Sequence
from uuid import UUID

from image_vault.client.api_client import ApiError, ImageApi
from image_vault.client.uploads import UploadBatch, UploadProgress, run_upload_batch
from image_vault.domain.payloads import ImagePayload
from image_vault.domain.uploads import (
    BatchUploadResult,
    SelectedFile,
    UploadStatus,
    UploadTask,
)
from image_vault.services.validation import (
    MAX_UPLOAD_BATCH_SIZE,
    validate_image_files,
)

_logger = logging.getLogger(__name__)


class ImageStoreError(Exception):
    """An image operation failed; ``message`` is suitable for display."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ImageStore:
    """Authoritative client cache of the signed-in user's images.

    Entries are only added or removed after the server confirmed the change.
    ``clear_images`` bumps a generation counter; every operation remembers the
    generation it started in and drops its result when the store has been
    cleared since, so a slow response can never resurrect stale data.
    Derived views are recomputed on every read.
    """

    def __init__(self, api: ImageApi) -> None:
        self.api = api
        self.images: list[ImagePayload] = []
        self.is_loading = False
        self.error: str | None = None
        self.upload_batch: UploadBatch | None = None
        self._deleting_ids: list[UUID] = []
        self._active_uploads = 0
        self._generation = 0

    @property
    def sorted_images(self) -> list[ImagePayload]:
        """Images ordered by upload time, newest first."""
        return sorted(self.images, key=lambda image: image.uploaded_at, reverse=True)

    @property
    def image_count(self) -> int:
        return len(self.images)

    @property
    def is_uploading(self) -> bool:
        return self._active_uploads > 0

    @property
    def deleting_image_ids(self) -> list[UUID]:
        return list(self._deleting_ids)

    @property
    def is_deleting_any(self) -> bool:
        return bool(self._deleting_ids)

    def is_deleting_image(self, image_id: UUID) -> bool:
        return image_id in self._deleting_ids

    @property
    def upload_progress(self) -> UploadProgress | None:
        if self.upload_batch is None:
            return None
        return self.upload_batch.progress()

    async def fetch_images(self) -> None:
        """Replace the collection with the server's list.

        A call made while another fetch is in flight returns immediately. On
        failure the current list is kept and the error is recorded.
        """
        if self.is_loading:
            return
        generation = self._generation
        self.is_loading = True
        self.error = None
        try:
            images = await self.api.list_images()
        except ApiError as exc:
            message = exc.message or "Failed to fetch images. Please try again."
            if self._is_current(generation):
                self.error = message
            raise ImageStoreError(message) from exc
        else:
            if self._is_current(generation):
                self.images = images
        finally:
            if self._is_current(generation):
                self.is_loading = False

    async def upload_image(self, file: SelectedFile) -> ImagePayload:
        """Upload one file and put it at the head of the collection."""
        generation = self._generation
        self._active_uploads += 1
        self.error = None
        try:
            image = await self.api.upload_image(file)
        except ApiError as exc:
            message = exc.message or "Failed to upload image. Please try again."
            if self._is_current(generation):
                self.error = message
            raise ImageStoreError(message) from exc
        finally:
            if self._is_current(generation):
                self._active_uploads -= 1

        if not self._is_current(generation):
            raise ImageStoreError("Store was cleared during upload")
        self.images.insert(0, image)
        return image

    async def upload_images(
        self,
        files: Sequence[SelectedFile],
        on_progress: Callable[[UploadProgress], None] | None = None,
    ) -> BatchUploadResult:
        """Validate and upload a batch, applying each success as it lands.

        Files failing validation are reported as failed tasks without any
        request. A batch larger than the limit is rejected as a whole.
        """
        validation = validate_image_files(files)
        if validation.too_many_files:
            message = f"You can upload up to {MAX_UPLOAD_BATCH_SIZE} images at a time."
            self.error = message
            raise ImageStoreError(message)

        generation = self._generation
        batch = UploadBatch.for_files(files)
        rejected = {id(file): reason for file, reason in validation.invalid}
        entries: list[tuple[UploadTask, SelectedFile]] = []
        for task, file in zip(batch.tasks, files, strict=True):
            reason = rejected.get(id(file))
            if reason is None:
                entries.append((task, file))
            else:
                task.status = UploadStatus.FAILED
                task.error = reason

        self.upload_batch = batch
        self._active_uploads += 1
        self.error = None
        try:
            result = await run_upload_batch(
                entries,
                self.api.upload_image,
                lambda image: self._apply_upload(image, generation),
                on_progress=on_progress,
                batch=batch,
            )
        finally:
            if self._is_current(generation):
                self._active_uploads -= 1

        if result.failed and self._is_current(generation):
            self.error = f"Failed to upload {result.failed} of {batch.total} images."
        return result

    async def delete_image(self, image_id: UUID) -> None:
        """Delete an image; a repeat call for an id already in flight is a no-op."""
        if self.is_deleting_image(image_id):
            return
        generation = self._generation
        self._deleting_ids.append(image_id)
        self.error = None
        try:
            await self.api.delete_image(image_id)
        except ApiError as exc:
            message = exc.message or "Failed to delete image. Please try again."
            if self._is_current(generation):
                self.error = message
            raise ImageStoreError(message) from exc
        else:
            if self._is_current(generation):
                self.images = [image for image in self.images if image.id != image_id]
        finally:
            if self._is_current(generation):
                self._deleting_ids.remove(image_id)

    def clear_error(self) -> None:
        self.error = None

    def clear_images(self) -> None:
        """Empty the collection and invalidate every operation in flight."""
        self._generation += 1
        self.images = []
        self.error = None
        self.is_loading = False
        self.upload_batch = None
        self._active_uploads = 0
        self._deleting_ids = []

    def _apply_upload(self, image: ImagePayload, generation: int) -> None:
        if not self._is_current(generation):
            _logger.info("Discarding upload result after clear: image_id=%s", image.id)
            return
        self.images.insert(0, image)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation
