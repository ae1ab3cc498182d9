"""Domain models for users and stored images."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class UserRecord:
    """Represents a user account stored in the database."""

    id: UUID
    email: str
    password_hash: str
    created_at: datetime
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ImageRecord:
    """Metadata row for an image held in the media store."""

    id: UUID
    owner_id: UUID
    filename: str
    public_url: str
    storage_id: str
    uploaded_at: datetime
    file_size_bytes: int
    mime_type: str


@dataclass(frozen=True)
class StoredObject:
    """Result of writing a file to the media store."""

    storage_id: str
    public_url: str


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity carried by a verified access token."""

    id: UUID
    email: str
