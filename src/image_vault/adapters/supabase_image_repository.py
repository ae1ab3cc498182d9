"""Supabase-backed image metadata repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from image_vault.domain.models import ImageRecord
from image_vault.services.images import ImageRepository

_IMAGE_COLUMNS = (
    "id, owner_id, filename, public_url, storage_id, uploaded_at, "
    "file_size_bytes, mime_type"
)


@dataclass
class SupabaseImageRepository(ImageRepository):
    """Supabase implementation for image metadata persistence."""

    client: Client

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
        response = (
            self.client.table("images")
            .insert(
                {
                    "owner_id": str(owner_id),
                    "filename": filename,
                    "public_url": public_url,
                    "storage_id": storage_id,
                    "file_size_bytes": file_size_bytes,
                    "mime_type": mime_type,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create image metadata")
        return _to_image(response.data[0])

    def list_images(self, owner_id: UUID) -> list[ImageRecord]:
        """Return a user's images, newest first."""
        response = (
            self.client.table("images")
            .select(_IMAGE_COLUMNS)
            .eq("owner_id", str(owner_id))
            .order("uploaded_at", desc=True)
            .execute()
        )
        return [_to_image(row) for row in response.data or []]

    def get_image(self, image_id: UUID) -> ImageRecord | None:
        """Return an image row by id, if present."""
        response = (
            self.client.table("images")
            .select(_IMAGE_COLUMNS)
            .eq("id", str(image_id))
            .limit(1)
            .execute()
        )
        if response.data:
            return _to_image(response.data[0])
        return None

    def delete_image(self, image_id: UUID) -> None:
        """Delete an image row."""
        self.client.table("images").delete().eq("id", str(image_id)).execute()


def _to_image(row: dict[str, object]) -> ImageRecord:
    return ImageRecord(
        id=UUID(str(row["id"])),
        owner_id=UUID(str(row["owner_id"])),
        filename=str(row["filename"]),
        public_url=str(row["public_url"]),
        storage_id=str(row["storage_id"]),
        uploaded_at=datetime.fromisoformat(str(row["uploaded_at"])),
        file_size_bytes=int(row["file_size_bytes"]),
        mime_type=str(row["mime_type"]),
    )
