"""Supabase-backed user repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client, PostgrestAPIError

from image_vault.domain.models import UserRecord
from image_vault.errors import ConflictError
from image_vault.services.auth import UserRepository

_USER_COLUMNS = "id, email, password_hash, created_at, updated_at"
_UNIQUE_VIOLATION = "23505"


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user persistence."""

    client: Client

    def get_by_email(self, email: str) -> UserRecord | None:
        """Return the user for a normalized email, if present."""
        response = (
            self.client.table("users")
            .select(_USER_COLUMNS)
            .eq("email", email)
            .limit(1)
            .execute()
        )
        if response.data:
            return _to_user(response.data[0])
        return None

    def get_by_id(self, user_id: UUID) -> UserRecord | None:
        """Return the user for an id, if present."""
        response = (
            self.client.table("users")
            .select(_USER_COLUMNS)
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if response.data:
            return _to_user(response.data[0])
        return None

    def create_user(self, email: str, password_hash: str) -> UserRecord:
        """Create a new user row and return it."""
        try:
            response = (
                self.client.table("users")
                .insert({"email": email, "password_hash": password_hash})
                .execute()
            )
        except PostgrestAPIError as exc:
            if exc.code == _UNIQUE_VIOLATION:
                raise ConflictError("User with this email already exists.") from exc
            raise
        if not response.data:
            raise RuntimeError("Failed to create user in Supabase")
        return _to_user(response.data[0])


def _to_user(row: dict[str, object]) -> UserRecord:
    updated_at = row.get("updated_at")
    return UserRecord(
        id=UUID(str(row["id"])),
        email=str(row["email"]),
        password_hash=str(row["password_hash"]),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(updated_at)) if updated_at else None,
    )
