"""Input validation shared by the API and the client.

Every function here is pure and synchronous: nothing touches the network, so
callers can reject input before any request is made.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, Protocol, TypeVar

ACCEPTED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
MAX_FILE_SIZE = 5 * 1024 * 1024
MAX_UPLOAD_BATCH_SIZE = 10
MIN_PASSWORD_LENGTH = 8
FILE_TOO_LARGE_MESSAGE = (
    f"File size exceeds {MAX_FILE_SIZE // (1024 * 1024)} MB. "
    "Please choose a smaller image."
)

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_SPECIAL_PATTERN = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")

_PASSWORD_MESSAGES = {
    "length": f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
    "uppercase": "Password must contain at least one uppercase letter",
    "lowercase": "Password must contain at least one lowercase letter",
    "number": "Password must contain at least one number",
    "special": "Password must contain at least one special character",
}


class ImageFile(Protocol):
    """Anything with a declared MIME type and a size in bytes."""

    @property
    def content_type(self) -> str: ...

    @property
    def size(self) -> int: ...


FileT = TypeVar("FileT", bound=ImageFile)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a single validation check."""

    valid: bool
    message: str | None = None


@dataclass(frozen=True)
class PasswordRequirements:
    length: bool
    uppercase: bool
    lowercase: bool
    number: bool
    special: bool

    def in_order(self) -> list[tuple[str, bool]]:
        """Return requirements in the order failures are reported."""
        return [
            ("length", self.length),
            ("uppercase", self.uppercase),
            ("lowercase", self.lowercase),
            ("number", self.number),
            ("special", self.special),
        ]


@dataclass(frozen=True)
class PasswordStrength:
    score: int
    requirements: PasswordRequirements


@dataclass
class BatchValidation(Generic[FileT]):
    """Split of a batch into accepted and rejected files."""

    valid: list[FileT] = field(default_factory=list)
    invalid: list[tuple[FileT, str]] = field(default_factory=list)
    too_many_files: bool = False


def validate_email(email: str | None) -> ValidationResult:
    """Check that an email is present and roughly local@domain.tld shaped."""
    if not email:
        return ValidationResult(valid=False, message="Email is required")
    if not _EMAIL_PATTERN.match(email):
        return ValidationResult(valid=False, message="Invalid email format")
    return ValidationResult(valid=True)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def calculate_password_strength(password: str) -> PasswordStrength:
    """Score a password by how many of the five requirements it meets."""
    requirements = PasswordRequirements(
        length=len(password) >= MIN_PASSWORD_LENGTH,
        uppercase=re.search(r"[A-Z]", password) is not None,
        lowercase=re.search(r"[a-z]", password) is not None,
        number=re.search(r"[0-9]", password) is not None,
        special=_SPECIAL_PATTERN.search(password) is not None,
    )
    score = sum(1 for _, met in requirements.in_order() if met)
    return PasswordStrength(score=score, requirements=requirements)


def validate_password(password: str | None) -> ValidationResult:
    """Return the first unmet password requirement, if any."""
    if not password:
        return ValidationResult(valid=False, message="Password is required")
    strength = calculate_password_strength(password)
    for name, met in strength.requirements.in_order():
        if not met:
            return ValidationResult(valid=False, message=_PASSWORD_MESSAGES[name])
    return ValidationResult(valid=True)


def validate_image_file(file: ImageFile) -> ValidationResult:
    """Accept JPEG, PNG, GIF and WebP images up to 5 MB."""
    if file.content_type not in ACCEPTED_IMAGE_TYPES:
        return ValidationResult(
            valid=False,
            message=(
                "Invalid file type. Please upload a JPEG, PNG, GIF, or WebP image."
            ),
        )
    if file.size > MAX_FILE_SIZE:
        return ValidationResult(valid=False, message=FILE_TOO_LARGE_MESSAGE)
    return ValidationResult(valid=True)


def validate_image_files(files: Sequence[FileT]) -> BatchValidation[FileT]:
    """Validate a batch; more than the batch limit rejects every file."""
    if len(files) > MAX_UPLOAD_BATCH_SIZE:
        return BatchValidation(too_many_files=True)
    result: BatchValidation[FileT] = BatchValidation()
    for file in files:
        check = validate_image_file(file)
        if check.valid:
            result.valid.append(file)
        else:
            result.invalid.append((file, check.message or "Unknown error"))
    return result


def format_file_size(size_bytes: int) -> str:
    """Format a byte count as e.g. ``1.5 KB`` or ``5 MB``."""
    if size_bytes == 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    exponent = 0
    while size_bytes >= 1024 ** (exponent + 1) and exponent < len(units) - 1:
        exponent += 1
    value = round(size_bytes / 1024**exponent, 2)
    if value == int(value):
        value = int(value)
    return f"{value} {units[exponent]}"


def truncate_filename(filename: str, max_length: int = 30) -> str:
    """Shorten a filename while keeping its extension."""
    if len(filename) <= max_length:
        return filename
    dot = filename.rfind(".")
    if dot <= 0:
        return f"{filename[: max_length - 3]}..."
    extension = filename[dot:]
    name = filename[:dot]
    return f"{name[: max_length - len(extension) - 3]}...{extension}"


def format_date(value: str | datetime) -> str:
    """Format an ISO timestamp as ``Jan 15, 2024``."""
    moment = _to_datetime(value)
    return f"{moment.strftime('%b')} {moment.day}, {moment.year}"


def format_date_time(value: str | datetime) -> str:
    """Format an ISO timestamp as ``Jan 15, 2024 at 3:45 PM``."""
    moment = _to_datetime(value)
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"  # noqa: PLR2004
    return f"{format_date(moment)} at {hour}:{moment.minute:02d} {suffix}"


def _to_datetime(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)
