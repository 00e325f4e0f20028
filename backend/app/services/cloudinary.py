"""
Cloudinary storage service for uploaded CVs.
Wraps the Cloudinary SDK uploader with per-app credentials.
"""

import asyncio
import logging
from typing import Any, Dict

import cloudinary.exceptions
import cloudinary.uploader

from app.config import Settings
from app.services.staging import StagedUpload

logger = logging.getLogger(__name__)


class StorageNotConfiguredError(Exception):
    """Cloudinary credentials are missing from the environment."""


class StorageUploadError(Exception):
    """Cloudinary rejected the upload or could not be reached."""


class CloudinaryClient:
    """Uploads staged files to one Cloudinary cloud."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def upload_options(self) -> Dict[str, Any]:
        """
        Per-call SDK options.

        Credentials travel with each call instead of through
        ``cloudinary.config()``, so nothing process-wide is mutated.
        """
        return {
            "folder": self.settings.upload_folder,
            "resource_type": self.settings.upload_resource_type,
            "cloud_name": self.settings.cloudinary_cloud_name,
            "api_key": self.settings.cloudinary_api_key,
            "api_secret": self.settings.cloudinary_api_secret,
            "upload_prefix": self.settings.cloudinary_api_url,
            "timeout": self.settings.outbound_timeout_seconds,
        }

    def _upload_sync(self, staged: StagedUpload) -> Dict[str, Any]:
        with staged.open() as stream:
            return cloudinary.uploader.upload(
                stream,
                filename=staged.filename,
                **self.upload_options(),
            )

    async def upload(self, staged: StagedUpload) -> Dict[str, Any]:
        """
        Upload a staged file.

        resource_type "auto" lets Cloudinary detect images/PDFs so they render
        inline; "raw" stores the bytes opaquely and the asset downloads. The
        SDK call is blocking, so it runs in a worker thread.

        Args:
            staged: File staged in memory or on disk

        Returns:
            Cloudinary's upload result (contains ``secure_url``)

        Raises:
            StorageNotConfiguredError: credentials missing
            StorageUploadError: the SDK raised, or no URL came back
        """
        if not self.settings.cloudinary_configured:
            raise StorageNotConfiguredError("Cloudinary is not configured")

        logger.info(
            f"Uploading {staged.filename!r} ({staged.size_bytes} bytes) to Cloudinary "
            f"folder={self.settings.upload_folder} resource_type={self.settings.upload_resource_type}"
        )

        try:
            result = await asyncio.to_thread(self._upload_sync, staged)
        except cloudinary.exceptions.Error as e:
            raise StorageUploadError(str(e) or "Cloudinary upload failed") from e
        except Exception as e:
            raise StorageUploadError(f"Failed to reach Cloudinary: {e}") from e

        if not isinstance(result, dict) or not result.get("secure_url"):
            raise StorageUploadError("No secure_url returned from Cloudinary")

        return result
