"""
Request dependencies.

Provider clients and the staging backend are built once by ``create_app``
and parked on ``app.state``; these helpers hand them to route handlers.
"""

from fastapi import Request

from app.services.cloudinary import CloudinaryClient
from app.services.emailjs import EmailJSClient


def get_emailjs_client(request: Request) -> EmailJSClient:
    return request.app.state.emailjs


def get_cloudinary_client(request: Request) -> CloudinaryClient:
    return request.app.state.cloudinary


def get_staging(request: Request):
    """Return the configured MemoryStaging or DiskStaging backend."""
    return request.app.state.staging
