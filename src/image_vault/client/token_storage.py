"""Durable storage for the bearer token used when cookies are unavailable."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

_logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"


class TokenStorage(Protocol):
    """Interface for persisting the auth token between runs."""

    def get_token(self) -> str | None:
        """Return the stored token, if any."""

    def set_token(self, token: str) -> None:
        """Persist the token."""

    def remove_token(self) -> None:
        """Forget the stored token."""


@dataclass
class FileTokenStorage(TokenStorage):
    """Keeps the token in a small JSON file.

    Storage failures are logged and otherwise ignored: a missing token only
    means the next request falls back to cookie authentication.
    """

    path: Path

    def get_token(self) -> str | None:
        """Return the stored token, if any."""
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            _logger.exception("Failed to retrieve token: %s", self.path)
            return None
        token = payload.get(TOKEN_KEY) if isinstance(payload, dict) else None
        return token if isinstance(token, str) and token else None

    def set_token(self, token: str) -> None:
        """Write the token, creating the parent directory when needed."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps({TOKEN_KEY: token}), encoding="utf-8")
            self.path.chmod(0o600)
        except OSError:
            _logger.exception("Failed to store token: %s", self.path)

    def remove_token(self) -> None:
        """Delete the token file if it exists."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError:
            _logger.exception("Failed to remove token: %s", self.path)
