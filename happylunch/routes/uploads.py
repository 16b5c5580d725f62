from fastapi import APIRouter, Depends, File, UploadFile

from .. import local_storage
from ..auth import Identity, get_current_identity
from ..config import settings
from ..responses import bad_request, created

router = APIRouter(prefix="/api/uploads", tags=["uploads"])


@router.post("", status_code=201)
async def upload_image(
    image: UploadFile = File(...),
    identity: Identity = Depends(get_current_identity),
):
    image_data = await image.read()
    if not image_data:
        raise bad_request("File is empty")
    if len(image_data) > settings.max_upload_bytes:
        raise bad_request(f"Image size must be less than {settings.max_upload_bytes // (1024 * 1024)}MB")
    if image.content_type and not image.content_type.startswith('image/'):
        raise bad_request("File must be an image")

    try:
        url = await local_storage.save_file(image_data)
    except local_storage.InvalidImageError as e:
        raise bad_request(str(e))
    return created("Image uploaded successfully", url=url)
