"""Domain errors raised by the server-side services."""


class ImageVaultError(Exception):
    """Base class for errors with a user-facing message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ImageVaultError):
    """Input rejected before touching any external store."""


class AuthenticationError(ImageVaultError):
    """Missing, invalid or expired credentials."""


class AuthorizationError(ImageVaultError):
    """Caller is authenticated but does not own the resource."""


class NotFoundError(ImageVaultError):
    """Requested resource does not exist."""


class ConflictError(ImageVaultError):
    """Resource already exists."""


class StorageError(ImageVaultError):
    """Media or record store operation failed."""
