"""Image endpoints scoped to the authenticated owner."""

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter, Depends, File, Request, UploadFile, status

from image_vault.api.security import require_user
from image_vault.domain.models import AuthenticatedUser
from image_vault.domain.payloads import ImagePayload
from image_vault.domain.uploads import SelectedFile
from image_vault.errors import ValidationError
from image_vault.services.validation import MAX_FILE_SIZE

if TYPE_CHECKING:
    from image_vault.containers import AppContainer

router = APIRouter(prefix="/api/images", tags=["images"])


@router.post("/upload", status_code=status.HTTP_201_CREATED)
async def upload_image(
    request: Request,
    image: UploadFile | None = File(default=None),
    identity: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    """Upload a single image from the multipart field ``image``."""
    if image is None:
        raise ValidationError("No file uploaded")
    container: AppContainer = request.app.state.container
    selected = SelectedFile(
        filename=image.filename or "upload",
        content_type=image.content_type or "application/octet-stream",
        # One byte past the limit is enough for the size check to reject it.
        data=await image.read(MAX_FILE_SIZE + 1),
    )
    record = container.image_service.upload(identity.id, selected)
    return {
        "message": "Image uploaded successfully",
        "image": ImagePayload.from_record(record).to_json_dict(),
    }


@router.get("")
async def list_images(
    request: Request, identity: AuthenticatedUser = Depends(require_user)
) -> dict[str, object]:
    """Return the caller's images, newest first."""
    container: AppContainer = request.app.state.container
    images = container.image_service.list_images(identity.id)
    return {"images": [ImagePayload.from_record(img).to_json_dict() for img in images]}


@router.get("/{image_id}")
async def get_image(
    image_id: UUID,
    request: Request,
    identity: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    """Return one image owned by the caller."""
    container: AppContainer = request.app.state.container
    image = container.image_service.get_image(identity.id, image_id)
    return {"image": ImagePayload.from_record(image).to_json_dict()}


@router.delete("/{image_id}")
async def delete_image(
    image_id: UUID,
    request: Request,
    identity: AuthenticatedUser = Depends(require_user),
) -> dict[str, object]:
    """Delete one image owned by the caller."""
    container: AppContainer = request.app.state.container
    container.image_service.delete_image(identity.id, image_id)
    return {"message": "Image deleted successfully"}
