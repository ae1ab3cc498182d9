"""FastAPI application factory."""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from image_vault.api.auth import build_auth_router
from image_vault.api.images import router as images_router
from image_vault.app_logging import configure_logging
from image_vault.config import parse_allowed_origins
from image_vault.containers import AppContainer
from image_vault.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ImageVaultError,
    NotFoundError,
    StorageError,
    ValidationError,
)

_STATUS_BY_ERROR: dict[type[ImageVaultError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)
    settings = container.settings

    app = FastAPI()
    app.state.container = container

    limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
    app.state.limiter = limiter

    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_allowed_origins(settings.frontend_url),
        allow_origin_regex=r"https://.*\.vercel\.app",
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["Content-Type", "Authorization", "Cookie", "X-Requested-With"],
        expose_headers=["Set-Cookie"],
    )

    app.include_router(build_auth_router(limiter, settings.auth_rate_limit))
    app.include_router(images_router)

    @app.exception_handler(ImageVaultError)
    async def handle_domain_error(
        request: Request, exc: ImageVaultError
    ) -> JSONResponse:
        status_code = _status_for(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return _error_response(status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request.")

    @app.exception_handler(RateLimitExceeded)
    async def handle_rate_limit(
        request: Request, exc: RateLimitExceeded
    ) -> JSONResponse:
        logger.warning("Rate limit exceeded: path=%s", request.url.path)
        return _error_response(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "Too many attempts. Please try again later.",
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error: %s %s", request.method, request.url.path)
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred."
        )

    @app.get("/")
    async def root() -> dict[str, object]:
        return {"ok": True, "service": "api", "time": datetime.now(tz=UTC).isoformat()}

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def _status_for(exc: ImageVaultError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "error": message}
    )
