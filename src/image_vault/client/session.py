"""Client-side authentication session state."""

import logging

from image_vault.client.api_client import ApiError, AuthApi, AuthResponse
from image_vault.client.token_storage import TokenStorage
from image_vault.domain.payloads import UserPayload

_logger = logging.getLogger(__name__)


class SessionError(Exception):
    """A session operation failed; ``message`` is suitable for display."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class SessionStore:
    """Tracks the signed-in user.

    ``check_auth`` and ``fetch_user`` only sign the user out when the server
    says the session is gone: a 401 or 419, or a reply marked unsuccessful.
    Network failures and server errors keep the current user so a flaky
    connection does not log anyone out.
    """

    def __init__(self, api: AuthApi, token_storage: TokenStorage | None = None) -> None:
        self.api = api
        self.token_storage = token_storage
        self.user: UserPayload | None = None
        self.loading = False
        self.error: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    async def login(self, email: str, password: str) -> UserPayload:
        self._start()
        try:
            response = await self.api.login(email, password)
        except ApiError as exc:
            self.user = None
            raise self._fail(exc, "Login failed. Please try again.") from exc
        finally:
            self.loading = False
        return self._apply(response)

    async def register(self, email: str, password: str) -> UserPayload:
        self._start()
        try:
            response = await self.api.register(email, password)
        except ApiError as exc:
            self.user = None
            raise self._fail(exc, "Registration failed. Please try again.") from exc
        finally:
            self.loading = False
        return self._apply(response)

    async def logout(self) -> None:
        """End the session; local state is cleared even if the request fails."""
        self.loading = True
        try:
            await self.api.logout()
        except ApiError as exc:
            _logger.warning("Logout request failed: %s", exc.message)
        finally:
            self.clear_auth()
            self.loading = False

    async def check_auth(self) -> None:
        """Refresh the user from the server, signing out on 401 or 419."""
        self.loading = True
        try:
            self.user = await self.api.get_current_user()
        except ApiError as exc:
            if exc.ends_session:
                self.clear_auth()
            else:
                _logger.error("Auth check failed: %s", exc.message)
        finally:
            self.loading = False

    async def fetch_user(self) -> UserPayload:
        """Load the current user, raising ``SessionError`` on any failure."""
        self._start()
        try:
            user = await self.api.get_current_user()
        except ApiError as exc:
            if exc.ends_session:
                self.clear_auth()
            raise self._fail(exc, "Failed to fetch user.") from exc
        finally:
            self.loading = False
        self.user = user
        return user

    def clear_error(self) -> None:
        self.error = None

    def clear_auth(self) -> None:
        self.user = None
        self.error = None
        if self.token_storage is not None:
            self.token_storage.remove_token()

    def _start(self) -> None:
        self.loading = True
        self.error = None

    def _fail(self, exc: ApiError, fallback: str) -> SessionError:
        self.error = exc.message or fallback
        return SessionError(self.error)

    def _apply(self, response: AuthResponse) -> UserPayload:
        if response.token and self.token_storage is not None:
            self.token_storage.set_token(response.token)
        self.user = response.user
        return response.user
