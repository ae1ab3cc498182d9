"""Async HTTP client for the image vault REST API."""

import logging
from dataclasses import dataclass
from typing import Protocol, TypeVar
from uuid import UUID

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from image_vault.client.token_storage import TokenStorage
from image_vault.domain.payloads import ImagePayload, UserPayload
from image_vault.domain.uploads import SelectedFile

_logger = logging.getLogger(__name__)

UNAUTHENTICATED_STATUSES = frozenset({401, 419})
UNEXPECTED_RESPONSE_MESSAGE = "Unexpected response from server."

_Model = TypeVar("_Model", bound=BaseModel)

_STATUS_HINTS = {
    401: "Unauthorized access - user may need to login",
    403: "Forbidden - insufficient permissions",
    404: "Resource not found",
    429: "Too many requests - rate limited",
}


class ApiError(Exception):
    """A failed API call.

    ``status_code`` is None when no usable response arrived. ``rejected`` marks a
    successful HTTP status whose body carried ``success: false``.
    """

    def __init__(
        self, message: str, status_code: int | None = None, rejected: bool = False
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.rejected = rejected

    @property
    def is_unauthenticated(self) -> bool:
        return self.status_code in UNAUTHENTICATED_STATUSES

    @property
    def ends_session(self) -> bool:
        return self.is_unauthenticated or self.rejected


@dataclass(frozen=True)
class AuthResponse:
    """User and token returned by register and login."""

    user: UserPayload
    token: str | None
    message: str | None = None


class AuthApi(Protocol):
    """Interface for the /api/auth endpoints."""

    async def register(self, email: str, password: str) -> AuthResponse:
        """Create an account."""

    async def login(self, email: str, password: str) -> AuthResponse:
        """Start a session."""

    async def logout(self) -> None:
        """End the session."""

    async def get_current_user(self) -> UserPayload:
        """Return the authenticated user."""


class ImageApi(Protocol):
    """Interface for the /api/images endpoints."""

    async def upload_image(self, file: SelectedFile) -> ImagePayload:
        """Upload one file and return the created image."""

    async def list_images(self) -> list[ImagePayload]:
        """Return the caller's images."""

    async def delete_image(self, image_id: UUID) -> None:
        """Delete one image."""


@dataclass
class HttpxApiClient(AuthApi, ImageApi):
    """REST client implemented with httpx.

    Cookies set by the server are kept by the underlying httpx session. When a
    token storage is configured, the stored token is also sent as a bearer
    header for environments where cookies do not survive.
    """

    http_client: httpx.AsyncClient
    token_storage: TokenStorage | None = None

    @classmethod
    def create(
        cls, base_url: str, token_storage: TokenStorage | None = None
    ) -> "HttpxApiClient":
        """Create a client with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(base_url=base_url, timeout=30),
            token_storage=token_storage,
        )

    async def register(self, email: str, password: str) -> AuthResponse:
        """Create an account via POST /api/auth/register."""
        payload = await self._request(
            "POST", "/api/auth/register", json={"email": email, "password": password}
        )
        return _auth_response(payload)

    async def login(self, email: str, password: str) -> AuthResponse:
        """Start a session via POST /api/auth/login."""
        payload = await self._request(
            "POST", "/api/auth/login", json={"email": email, "password": password}
        )
        return _auth_response(payload)

    async def logout(self) -> None:
        """End the session via POST /api/auth/logout."""
        await self._request("POST", "/api/auth/logout")

    async def get_current_user(self) -> UserPayload:
        """Return the authenticated user via GET /api/auth/me."""
        payload = await self._request("GET", "/api/auth/me")
        return _parse(payload, "user", UserPayload)

    async def upload_image(self, file: SelectedFile) -> ImagePayload:
        """Upload a file as the multipart field ``image``."""
        payload = await self._request(
            "POST",
            "/api/images/upload",
            files={"image": (file.filename, file.data, file.content_type)},
        )
        return _parse(payload, "image", ImagePayload)

    async def list_images(self) -> list[ImagePayload]:
        """Return the caller's images via GET /api/images."""
        payload = await self._request("GET", "/api/images")
        return _parse_list(payload, "images", ImagePayload)

    async def delete_image(self, image_id: UUID) -> None:
        """Delete one image via DELETE /api/images/{id}."""
        await self._request("DELETE", f"/api/images/{image_id}")

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(self, method: str, path: str, **kwargs: object) -> dict:
        headers: dict[str, str] = {}
        token = self.token_storage.get_token() if self.token_storage else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            response = await self.http_client.request(
                method, path, headers=headers, **kwargs
            )
        except httpx.HTTPError as exc:
            _logger.error("[API Error] No response received: %s %s", method, path)
            raise ApiError(str(exc) or "Network error. Please try again.") from exc

        _logger.debug("[API Response] %s %s: %s", method, path, response.status_code)
        if response.is_error:
            message = _error_message(response)
            _logger.error("[API Error] %s: %s", response.status_code, message)
            hint = _STATUS_HINTS.get(response.status_code)
            if hint:
                _logger.warning(hint)
            raise ApiError(message, response.status_code)
        body = _json_body(response)
        if body.get("success") is False:
            message = body.get("error")
            if not isinstance(message, str) or not message:
                message = "Request was not successful."
            _logger.error("[API Error] %s %s rejected: %s", method, path, message)
            raise ApiError(message, response.status_code, rejected=True)
        return body


def _auth_response(payload: dict) -> AuthResponse:
    return AuthResponse(
        user=_parse(payload, "user", UserPayload),
        token=payload.get("token"),
        message=payload.get("message"),
    )


def _parse(payload: dict, key: str, model: type[_Model]) -> _Model:
    try:
        return model.model_validate(payload[key])
    except (KeyError, PydanticValidationError) as exc:
        _logger.error('[API Error] Malformed "%s" in response', key)
        raise ApiError(UNEXPECTED_RESPONSE_MESSAGE) from exc


def _parse_list(payload: dict, key: str, model: type[_Model]) -> list[_Model]:
    items = payload.get(key)
    if not isinstance(items, list):
        _logger.error('[API Error] Missing "%s" list in response', key)
        raise ApiError(UNEXPECTED_RESPONSE_MESSAGE)
    try:
        return [model.model_validate(item) for item in items]
    except PydanticValidationError as exc:
        _logger.error('[API Error] Malformed "%s" in response', key)
        raise ApiError(UNEXPECTED_RESPONSE_MESSAGE) from exc


def _json_body(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _error_message(response: httpx.Response) -> str:
    body = _json_body(response)
    if isinstance(body.get("error"), str):
        return body["error"]
    return f"Request failed with status code {response.status_code}"
