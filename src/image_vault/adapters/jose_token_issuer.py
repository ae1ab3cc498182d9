"""JWT access tokens signed with python-jose."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

from jose import JWTError, jwt

from image_vault.domain.models import AuthenticatedUser
from image_vault.services.auth import TokenIssuer

_logger = logging.getLogger(__name__)


@dataclass
class JoseTokenIssuer(TokenIssuer):
    """Issues and verifies HMAC-signed JWTs."""

    secret: str
    ttl_seconds: int
    algorithm: str = "HS256"

    def issue(self, user_id: UUID, email: str) -> str:
        """Return a signed token carrying the user id and email."""
        now = datetime.now(tz=UTC)
        claims = {
            "sub": str(user_id),
            "email": email,
            "iat": now,
            "exp": now + timedelta(seconds=self.ttl_seconds),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> AuthenticatedUser | None:
        """Return the identity in a valid token, or None."""
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
            return AuthenticatedUser(id=UUID(claims["sub"]), email=claims["email"])
        except (JWTError, KeyError, ValueError):
            _logger.debug("Rejected access token")
            return None
