"""Account registration, login and token authentication."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from image_vault.domain.models import AuthenticatedUser, UserRecord
from image_vault.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from image_vault.services.validation import (
    normalize_email,
    validate_email,
    validate_password,
)

_logger = logging.getLogger(__name__)

MISSING_CREDENTIALS = "Email and password are required."
INVALID_CREDENTIALS = "Invalid email or password."


class UserRepository(Protocol):
    """Persistence interface for user accounts."""

    def get_by_email(self, email: str) -> UserRecord | None:
        """Return the user with this normalized email, if present."""

    def get_by_id(self, user_id: UUID) -> UserRecord | None:
        """Return the user with this id, if present."""

    def create_user(self, email: str, password_hash: str) -> UserRecord:
        """Create a user; raise ConflictError when the email is taken."""


class PasswordHasher(Protocol):
    """Interface for one-way password hashing."""

    def hash(self, password: str) -> str:
        """Return a salted hash for the password."""

    def verify(self, password: str, password_hash: str) -> bool:
        """Return true when the password matches the hash."""


class TokenIssuer(Protocol):
    """Interface for signed bearer tokens."""

    def issue(self, user_id: UUID, email: str) -> str:
        """Return a signed token for the user."""

    def verify(self, token: str) -> AuthenticatedUser | None:
        """Return the identity in a valid token, or None."""


@dataclass(frozen=True)
class AuthResult:
    """A user together with a freshly issued token."""

    user: UserRecord
    token: str


@dataclass
class AuthService:
    """Application service for account lifecycle actions."""

    repository: UserRepository
    password_hasher: PasswordHasher
    token_issuer: TokenIssuer

    def register(self, email: object, password: object) -> AuthResult:
        """Create an account and issue a token for it."""
        if not _both_strings(email, password):
            raise ValidationError(MISSING_CREDENTIALS)
        normalized = normalize_email(email)
        email_check = validate_email(normalized)
        if not email_check.valid:
            raise ValidationError(f"{email_check.message}.")
        password_check = validate_password(password)
        if not password_check.valid:
            raise ValidationError(password_check.message or "Invalid password.")
        if self.repository.get_by_email(normalized) is not None:
            raise ConflictError("User with this email already exists.")

        user = self.repository.create_user(
            normalized, self.password_hasher.hash(password)
        )
        _logger.info("Registered user: user_id=%s", user.id)
        return AuthResult(user=user, token=self.token_issuer.issue(user.id, user.email))

    def login(self, email: object, password: object) -> AuthResult:
        """Verify credentials and issue a token."""
        if not _both_strings(email, password):
            raise ValidationError(MISSING_CREDENTIALS)
        user = self.repository.get_by_email(normalize_email(email))
        if user is None or not self.password_hasher.verify(
            password, user.password_hash
        ):
            _logger.info("Rejected login attempt")
            raise AuthenticationError(INVALID_CREDENTIALS)
        return AuthResult(user=user, token=self.token_issuer.issue(user.id, user.email))

    def authenticate(self, token: str | None) -> AuthenticatedUser:
        """Resolve a bearer or cookie token to an identity."""
        if not token:
            raise AuthenticationError("Authentication required. No token provided.")
        identity = self.token_issuer.verify(token)
        if identity is None:
            raise AuthenticationError("Invalid or expired token.")
        return identity

    def get_user(self, user_id: UUID) -> UserRecord:
        """Return the stored account for an authenticated identity."""
        user = self.repository.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found.")
        return user


def _both_strings(email: object, password: object) -> bool:
    return (
        isinstance(email, str)
        and isinstance(password, str)
        and bool(email)
        and bool(password)
    )
