"""ASGI entrypoint for the image vault API."""

from image_vault.api.app import create_app
from image_vault.containers import build_container

app = create_app(build_container())
