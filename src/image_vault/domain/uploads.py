"""Models for client-side upload batches."""

import mimetypes
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from uuid import uuid4


class UploadStatus(StrEnum):
    """Lifecycle of a single file inside a batch."""

    PENDING = "pending"
    UPLOADING = "uploading"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class SelectedFile:
    """A file chosen for upload, held in memory."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: Path) -> "SelectedFile":
        """Read a local file and guess its MIME type from the extension."""
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            filename=path.name,
            content_type=content_type or "application/octet-stream",
            data=path.read_bytes(),
        )


@dataclass
class UploadTask:
    """Per-file status tracked for the duration of a batch."""

    filename: str
    file_id: str = field(default_factory=lambda: uuid4().hex)
    status: UploadStatus = UploadStatus.PENDING
    error: str | None = None

    @property
    def is_resolved(self) -> bool:
        return self.status in {UploadStatus.SUCCESS, UploadStatus.FAILED}


@dataclass(frozen=True)
class BatchUploadResult:
    """Aggregate outcome of a batch upload."""

    success: int
    failed: int
    errors: list[str]
