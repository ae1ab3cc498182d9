"""JSON payloads exchanged over the REST boundary."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from image_vault.domain.models import ImageRecord, UserRecord


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, object]:
        """Dump with camelCase keys and JSON-compatible values."""
        return self.model_dump(mode="json", by_alias=True)


class UserPayload(_CamelModel):
    """Public view of a user; never carries the password hash."""

    id: UUID
    email: str
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserPayload":
        return cls(
            id=record.id,
            email=record.email,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class ImagePayload(_CamelModel):
    """Image metadata as returned by the API."""

    id: UUID
    owner_id: UUID
    filename: str
    public_url: str
    storage_id: str
    uploaded_at: datetime
    file_size_bytes: int
    mime_type: str

    @classmethod
    def from_record(cls, record: ImageRecord) -> "ImagePayload":
        return cls(
            id=record.id,
            owner_id=record.owner_id,
            filename=record.filename,
            public_url=record.public_url,
            storage_id=record.storage_id,
            uploaded_at=record.uploaded_at,
            file_size_bytes=record.file_size_bytes,
            mime_type=record.mime_type,
        )


class Credentials(BaseModel):
    """Email and password submitted to register or login."""

    email: str | None = None
    password: str | None = None
