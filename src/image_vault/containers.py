"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from image_vault.adapters.jose_token_issuer import JoseTokenIssuer
from image_vault.adapters.passlib_password_hasher import PasslibPasswordHasher
from image_vault.adapters.supabase_image_repository import SupabaseImageRepository
from image_vault.adapters.supabase_media_store import SupabaseMediaStore
from image_vault.adapters.supabase_user_repository import SupabaseUserRepository
from image_vault.config import Settings
from image_vault.services.auth import AuthService
from image_vault.services.images import ImageService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    auth_service: AuthService
    image_service: ImageService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    auth_service = AuthService(
        repository=SupabaseUserRepository(supabase_client),
        password_hasher=PasslibPasswordHasher(),
        token_issuer=JoseTokenIssuer(
            secret=resolved_settings.jwt_secret,
            ttl_seconds=resolved_settings.token_ttl_seconds,
            algorithm=resolved_settings.jwt_algorithm,
        ),
    )
    image_service = ImageService(
        repository=SupabaseImageRepository(supabase_client),
        media_store=SupabaseMediaStore(
            supabase_client,
            bucket=resolved_settings.storage_bucket,
            folder=resolved_settings.storage_folder,
        ),
    )

    return AppContainer(
        settings=resolved_settings,
        auth_service=auth_service,
        image_service=image_service,
    )
