"""
CV upload relay endpoint.

Endpoints:
  POST /upload-cv   stage a multipart ``file`` part and forward it to Cloudinary
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.datastructures import UploadFile

from app.dependencies import get_cloudinary_client, get_staging
from app.models.notification import ErrorResponse
from app.models.upload import UploadResponse
from app.services.cloudinary import (
    CloudinaryClient,
    StorageNotConfiguredError,
    StorageUploadError,
)
from app.services.staging import UploadTooLargeError

logger = logging.getLogger(__name__)

router = APIRouter()

_MULTIPART_BODY = {
    "requestBody": {
        "required": True,
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {"file": {"type": "string", "format": "binary"}},
                },
            },
        },
    },
}


@router.post(
    "/upload-cv",
    response_model=UploadResponse,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    openapi_extra=_MULTIPART_BODY,
)
async def upload_cv(
    request: Request,
    staging=Depends(get_staging),
    storage: CloudinaryClient = Depends(get_cloudinary_client),
):
    """
    Upload a CV to Cloudinary and return its public URL.

    The part is staged (memory or temp file, per UPLOAD_STAGING) and the
    size limit is enforced while staging, so oversize files never reach
    Cloudinary. Staged data is released once the upload settles, on success
    and on failure. A form without a file part named ``file`` (missing, or a
    plain text field) is rejected before anything is staged.
    """
    form = await request.form()
    try:
        file = form.get("file")
        if not isinstance(file, UploadFile) or not file.filename:
            raise HTTPException(status_code=400, detail="No file uploaded")

        return await _relay_upload(file, staging, storage)
    finally:
        await form.close()


async def _relay_upload(
    file: UploadFile, staging, storage: CloudinaryClient
) -> UploadResponse:
    """Stage ``file`` and forward it, translating failures to HTTP errors."""
    logger.info(
        f"Upload request received: filename={file.filename!r}, "
        f"content_type={file.content_type!r}, staging={staging.name}"
    )

    try:
        async with staging.stage(file) as staged:
            result = await storage.upload(staged)
    except UploadTooLargeError as e:
        logger.info(f"Rejected oversize upload {file.filename!r}: {e}")
        raise HTTPException(status_code=413, detail=str(e))
    except StorageNotConfiguredError as e:
        logger.error(f"Cloudinary upload failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except StorageUploadError as e:
        logger.error(f"Cloudinary upload failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except OSError as e:
        logger.error(f"Failed to stage upload {file.filename!r}: {e}")
        raise HTTPException(status_code=500, detail="Failed to stage uploaded file")

    return UploadResponse(secure_url=result["secure_url"])
