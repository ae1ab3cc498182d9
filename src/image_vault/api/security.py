"""Request authentication via cookie or bearer token."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Cookie, Header, Request, Response

from image_vault.domain.models import AuthenticatedUser  # noqa: TC001

if TYPE_CHECKING:
    from image_vault.containers import AppContainer

TOKEN_COOKIE_NAME = "auth_token"


async def require_user(
    request: Request,
    auth_token: str | None = Cookie(default=None),
    authorization: str | None = Header(default=None),
) -> AuthenticatedUser:
    """Resolve the caller's identity; the cookie wins over the header."""
    container: AppContainer = request.app.state.container
    token = auth_token or _bearer_token(authorization)
    return container.auth_service.authenticate(token)


def set_token_cookie(response: Response, token: str, max_age: int) -> None:
    """Attach the access token as an HTTP-only cookie."""
    response.set_cookie(
        key=TOKEN_COOKIE_NAME,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=True,
        samesite="none",
    )


def clear_token_cookie(response: Response) -> None:
    response.delete_cookie(
        key=TOKEN_COOKIE_NAME, httponly=True, secure=True, samesite="none"
    )


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        return None
    return value.strip()
