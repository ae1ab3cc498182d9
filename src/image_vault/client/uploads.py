"""Bounded-concurrency upload orchestration.

A batch is split into consecutive chunks of at most ``UPLOAD_CONCURRENCY``
files. Chunks run one after another; the files inside a chunk are uploaded
concurrently and all of them settle before the next chunk starts, so no more
than ``UPLOAD_CONCURRENCY`` requests are ever in flight. Each file's outcome
is independent: a failure is recorded on its task and never cancels siblings.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

from image_vault.domain.uploads import (
    BatchUploadResult,
    SelectedFile,
    UploadStatus,
    UploadTask,
)

_logger = logging.getLogger(__name__)

UPLOAD_CONCURRENCY = 3

ResultT = TypeVar("ResultT")
ItemT = TypeVar("ItemT")


@dataclass(frozen=True)
class UploadProgress:
    """Snapshot of a batch for progress indicators."""

    total: int
    pending: int
    resolved: int
    percentage: int


@dataclass
class UploadBatch:
    """Tasks for one batch, in input order."""

    tasks: list[UploadTask] = field(default_factory=list)

    @classmethod
    def for_files(cls, files: Sequence[SelectedFile]) -> "UploadBatch":
        return cls(tasks=[UploadTask(filename=file.filename) for file in files])

    @property
    def total(self) -> int:
        return len(self.tasks)

    @property
    def pending_count(self) -> int:
        """Tasks still pending or uploading."""
        return sum(1 for task in self.tasks if not task.is_resolved)

    @property
    def resolved_count(self) -> int:
        return sum(1 for task in self.tasks if task.is_resolved)

    @property
    def success_count(self) -> int:
        return sum(1 for task in self.tasks if task.status == UploadStatus.SUCCESS)

    @property
    def failed_count(self) -> int:
        return sum(1 for task in self.tasks if task.status == UploadStatus.FAILED)

    @property
    def percentage(self) -> int:
        if not self.tasks:
            return 0
        return round(self.resolved_count / self.total * 100)

    def progress(self) -> UploadProgress:
        return UploadProgress(
            total=self.total,
            pending=self.pending_count,
            resolved=self.resolved_count,
            percentage=self.percentage,
        )

    def result(self) -> BatchUploadResult:
        """Aggregate counts and ``filename: error`` lines in input order."""
        return BatchUploadResult(
            success=self.success_count,
            failed=self.failed_count,
            errors=[
                f"{task.filename}: {task.error}"
                for task in self.tasks
                if task.status == UploadStatus.FAILED
            ],
        )


def chunked(items: Sequence[ItemT], size: int) -> list[list[ItemT]]:
    """Split items into consecutive chunks of at most ``size``."""
    if size < 1:
        raise ValueError("Chunk size must be at least 1")
    return [list(items[start : start + size]) for start in range(0, len(items), size)]


async def run_upload_batch(  # noqa: PLR0913
    entries: Sequence[tuple[UploadTask, SelectedFile]],
    upload: Callable[[SelectedFile], Awaitable[ResultT]],
    on_success: Callable[[ResultT], None],
    *,
    on_progress: Callable[[UploadProgress], None] | None = None,
    batch: UploadBatch | None = None,
    concurrency: int = UPLOAD_CONCURRENCY,
) -> BatchUploadResult:
    """Upload every file of the batch, at most ``concurrency`` at a time.

    ``on_success`` receives each uploaded result as soon as it lands, so the
    caller can apply partial progress. When ``batch`` is given its tasks are
    used for progress reporting and for the returned aggregate; otherwise only
    the dispatched entries are counted.
    """
    tracked = batch or UploadBatch(tasks=[task for task, _ in entries])

    def notify() -> None:
        if on_progress is not None:
            on_progress(tracked.progress())

    async def upload_one(task: UploadTask, file: SelectedFile) -> None:
        task.status = UploadStatus.UPLOADING
        notify()
        try:
            uploaded = await upload(file)
        except Exception as exc:  # each file fails on its own
            task.status = UploadStatus.FAILED
            task.error = _error_message(exc)
            _logger.info(
                "Upload failed: filename=%s error=%s", file.filename, task.error
            )
            notify()
            return
        task.status = UploadStatus.SUCCESS
        on_success(uploaded)
        notify()

    for chunk in chunked(entries, concurrency):
        outcomes = await asyncio.gather(
            *(upload_one(task, file) for task, file in chunk),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

    result = tracked.result()
    _logger.info(
        "Upload batch finished: success=%s failed=%s", result.success, result.failed
    )
    return result


def _error_message(exc: Exception) -> str:
    message = getattr(exc, "message", None) or str(exc)
    return message or "Failed to upload image. Please try again."
