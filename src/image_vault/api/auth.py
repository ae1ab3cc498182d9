"""Authentication endpoints."""

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Request, Response, status
from slowapi import Limiter

from image_vault.api.security import (
    clear_token_cookie,
    require_user,
    set_token_cookie,
)
from image_vault.domain.models import AuthenticatedUser
from image_vault.domain.payloads import Credentials, UserPayload
from image_vault.services.auth import AuthResult

if TYPE_CHECKING:
    from image_vault.containers import AppContainer


def build_auth_router(limiter: Limiter, rate_limit: str) -> APIRouter:
    """Create the /api/auth router with rate-limited credential endpoints."""
    router = APIRouter(prefix="/api/auth", tags=["auth"])

    @router.post("/register", status_code=status.HTTP_201_CREATED)
    @limiter.limit(rate_limit)
    async def register(
        request: Request, response: Response, credentials: Credentials
    ) -> dict[str, object]:
        """Create an account and start a session."""
        container: AppContainer = request.app.state.container
        result = container.auth_service.register(
            credentials.email, credentials.password
        )
        return _session_payload(
            container, response, result, "User registered successfully."
        )

    @router.post("/login")
    @limiter.limit(rate_limit)
    async def login(
        request: Request, response: Response, credentials: Credentials
    ) -> dict[str, object]:
        """Verify credentials and start a session."""
        container: AppContainer = request.app.state.container
        result = container.auth_service.login(credentials.email, credentials.password)
        return _session_payload(container, response, result, "Login successful.")

    @router.post("/logout")
    async def logout(response: Response) -> dict[str, object]:
        """End the cookie session."""
        clear_token_cookie(response)
        return {"success": True, "message": "Logout successful."}

    @router.get("/me")
    async def current_user(
        request: Request, identity: AuthenticatedUser = Depends(require_user)
    ) -> dict[str, object]:
        """Return the account behind the current credentials."""
        container: AppContainer = request.app.state.container
        user = container.auth_service.get_user(identity.id)
        return {"success": True, "user": UserPayload.from_record(user).to_json_dict()}

    return router


def _session_payload(
    container: "AppContainer", response: Response, result: AuthResult, message: str
) -> dict[str, object]:
    set_token_cookie(
        response, result.token, max_age=container.settings.token_ttl_seconds
    )
    return {
        "success": True,
        "message": message,
        "user": UserPayload.from_record(result.user).to_json_dict(),
        "token": result.token,
    }
