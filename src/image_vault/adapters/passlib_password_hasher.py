"""Password hashing backed by passlib's bcrypt scheme."""

from dataclasses import dataclass, field

from passlib.context import CryptContext

from image_vault.services.auth import PasswordHasher

# bcrypt only reads the first 72 bytes of a secret
_BCRYPT_MAX_BYTES = 72


@dataclass
class PasslibPasswordHasher(PasswordHasher):
    """Bcrypt password hasher."""

    rounds: int = 10
    _context: CryptContext = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=self.rounds
        )

    def hash(self, password: str) -> str:
        """Return a salted bcrypt hash."""
        return self._context.hash(_truncate(password))

    def verify(self, password: str, password_hash: str) -> bool:
        """Return true when the password matches the stored hash."""
        return self._context.verify(_truncate(password), password_hash)


def _truncate(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
