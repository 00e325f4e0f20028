"""
Pydantic models for the CV upload relay.
"""

from pydantic import BaseModel


class UploadResponse(BaseModel):
    """Public URL of the uploaded asset, as returned by Cloudinary."""

    secure_url: str
