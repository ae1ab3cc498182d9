"""Command-line client for an image vault server."""

import argparse
import asyncio
import getpass
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from uuid import UUID

from image_vault.app_logging import configure_logging
from image_vault.client.api_client import HttpxApiClient
from image_vault.client.images import ImageStore, ImageStoreError
from image_vault.client.session import SessionError, SessionStore
from image_vault.client.token_storage import FileTokenStorage
from image_vault.client.uploads import UploadProgress
from image_vault.config import ClientSettings
from image_vault.domain.uploads import SelectedFile
from image_vault.services.validation import (
    format_date_time,
    format_file_size,
    truncate_filename,
    validate_email,
    validate_password,
)

_logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="image-vault", description=__doc__)
    parser.add_argument("--api-url", help="Server base URL")
    parser.add_argument("-v", "--verbose", action="store_true")
    commands = parser.add_subparsers(dest="command", required=True)

    for name in ("login", "register"):
        command = commands.add_parser(name)
        command.add_argument("email")
        command.add_argument(
            "--password", help="Prompted for when omitted", default=None
        )
    commands.add_parser("logout")
    commands.add_parser("whoami")
    commands.add_parser("list")

    upload = commands.add_parser("upload", help="Upload up to 10 images")
    upload.add_argument("files", nargs="+", type=Path)

    delete = commands.add_parser("delete")
    delete.add_argument("image_ids", nargs="+", type=UUID)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)
    settings = ClientSettings()
    if args.api_url:
        settings = settings.model_copy(update={"api_base_url": args.api_url})
    return asyncio.run(run(args, settings))


async def run(args: argparse.Namespace, settings: ClientSettings) -> int:
    """Execute one parsed command and return the process exit code."""
    storage = FileTokenStorage(settings.token_path)
    client = HttpxApiClient.create(settings.api_base_url, token_storage=storage)
    session = SessionStore(client, token_storage=storage)
    images = ImageStore(client)
    try:
        return await _dispatch(args, session, images)
    except (SessionError, ImageStoreError) as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    finally:
        await client.close()


async def _dispatch(
    args: argparse.Namespace, session: SessionStore, images: ImageStore
) -> int:
    if args.command in {"login", "register"}:
        return await _sign_in(args, session)
    if args.command == "logout":
        await session.logout()
        print("Logged out.")
        return 0
    if args.command == "whoami":
        user = await session.fetch_user()
        print(user.email)
        return 0
    if args.command == "list":
        await images.fetch_images()
        for image in images.sorted_images:
            print(
                f"{image.id}  {truncate_filename(image.filename):<30}  "
                f"{format_file_size(image.file_size_bytes):>10}  "
                f"{format_date_time(image.uploaded_at)}"
            )
        print(f"{images.image_count} image(s)")
        return 0
    if args.command == "upload":
        return await _upload(args.files, images)
    if args.command == "delete":
        failed = 0
        for image_id in args.image_ids:
            try:
                await images.delete_image(image_id)
            except ImageStoreError as exc:
                failed += 1
                print(f"{image_id}: {exc.message}", file=sys.stderr)
            else:
                print(f"Deleted {image_id}")
        return 1 if failed else 0
    raise ValueError(f"Unknown command: {args.command}")


async def _sign_in(args: argparse.Namespace, session: SessionStore) -> int:
    email_check = validate_email(args.email)
    if not email_check.valid:
        print(f"Error: {email_check.message}", file=sys.stderr)
        return 2
    password = args.password or getpass.getpass("Password: ")
    if args.command == "register":
        password_check = validate_password(password)
        if not password_check.valid:
            print(f"Error: {password_check.message}", file=sys.stderr)
            return 2
        user = await session.register(args.email, password)
    else:
        user = await session.login(args.email, password)
    print(f"Signed in as {user.email}")
    return 0


async def _upload(paths: Sequence[Path], images: ImageStore) -> int:
    files: list[SelectedFile] = []
    for path in paths:
        try:
            files.append(SelectedFile.from_path(path))
        except OSError as exc:
            print(f"{path}: {exc.strerror or exc}", file=sys.stderr)
            return 2

    def report(progress: UploadProgress) -> None:
        _logger.debug(
            "Upload progress: %s/%s (%s%%)",
            progress.resolved,
            progress.total,
            progress.percentage,
        )

    result = await images.upload_images(files, on_progress=report)
    for line in result.errors:
        print(line, file=sys.stderr)
    print(f"Uploaded {result.success} of {len(files)} image(s).")
    return 1 if result.failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
