"""Supabase Storage adapter for uploaded image bytes."""

from dataclasses import dataclass
from pathlib import PurePosixPath
from uuid import UUID, uuid4

from supabase import Client

from image_vault.domain.models import StoredObject
from image_vault.services.images import MediaStore


@dataclass
class SupabaseMediaStore(MediaStore):
    """Stores objects in a public Supabase Storage bucket."""

    client: Client
    bucket: str
    folder: str = "user-images"

    def upload(
        self, owner_id: UUID, filename: str, data: bytes, content_type: str
    ) -> StoredObject:
        """Upload bytes under a unique per-user path."""
        suffix = PurePosixPath(filename).suffix.lower()
        path = f"{self.folder}/{owner_id}/{uuid4().hex}{suffix}"
        bucket = self.client.storage.from_(self.bucket)
        bucket.upload(
            path=path,
            file=data,
            file_options={"content-type": content_type},
        )
        return StoredObject(storage_id=path, public_url=bucket.get_public_url(path))

    def delete(self, storage_id: str) -> None:
        """Remove an object from the bucket."""
        self.client.storage.from_(self.bucket).remove([storage_id])
