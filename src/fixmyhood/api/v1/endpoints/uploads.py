# src/fixmyhood/api/v1/endpoints/uploads.py
"""Photo upload endpoint."""

from fastapi import APIRouter, HTTPException, UploadFile, status

from fixmyhood.core.settings import settings
from fixmyhood.services.storage import BlobStoreError

from ..dependencies import ActiveUserDep, BlobStoreDep

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post("/", status_code=status.HTTP_201_CREATED)
async def upload_photo(
    file: UploadFile,
    current_user: ActiveUserDep,
    blob_store: BlobStoreDep,
) -> dict[str, str]:
    """Store a report or evidence photo and return its public URL."""
    if file.size is not None and file.size > settings.upload_max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Image is too large",
        )
    try:
        url = blob_store.save(file.file, owner_id=current_user.id, filename=file.filename or "")
    except BlobStoreError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    return {"url": url}
