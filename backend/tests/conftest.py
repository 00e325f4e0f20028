"""
Shared fixtures: explicit Settings and stubs for both outbound providers.

No test talks to the real EmailJS or Cloudinary APIs. EmailJS calls go
through an httpx.MockTransport backed by ProviderStub; the Cloudinary SDK
uploader is patched with a Mock.
"""

import os
from unittest.mock import patch

import httpx
import pytest

# Keep the module-level app in app.main from picking up a developer's .env
for _name in ("UPLOAD_STAGING", "UPLOAD_RESOURCE_TYPE", "STATIC_DIR", "PORT"):
    os.environ.pop(_name, None)

from app.config import Settings


class ProviderStub:
    """Records outbound EmailJS requests and answers with canned responses."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        # (status_code, httpx.Response kwargs); a fresh Response is built per call
        self.email_reply = (200, {"text": "OK"})
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        status, kwargs = self.email_reply
        return httpx.Response(status, **kwargs)

    @property
    def email_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == "api.emailjs.com"]


@pytest.fixture
def upload_dir(tmp_path):
    """Dedicated temp dir for disk staging, so leaks are visible."""
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def settings(upload_dir) -> Settings:
    return Settings(
        cloudinary_cloud_name="demo-cloud",
        cloudinary_api_key="123456789",
        cloudinary_api_secret="cloud-secret",
        emailjs_service_id="service_abc",
        emailjs_template_id="template_xyz",
        emailjs_public_key="public_key_1",
        upload_temp_dir=str(upload_dir),
    )


@pytest.fixture
def provider() -> ProviderStub:
    return ProviderStub()


UPLOAD_RESULT = {
    "secure_url": "https://cdn.example/cv_uploads/abc.txt",
    "public_id": "cv_uploads/abc",
}


@pytest.fixture
def cloudinary_upload():
    """Patch the Cloudinary SDK uploader; returns UPLOAD_RESULT by default."""
    with patch("cloudinary.uploader.upload") as mock_upload:
        mock_upload.return_value = dict(UPLOAD_RESULT)
        yield mock_upload


@pytest.fixture
def make_client(settings, provider, cloudinary_upload):
    """Build a TestClient for an app created from (possibly overridden) settings."""
    from fastapi.testclient import TestClient
    from app.main import create_app

    def _make(**overrides) -> TestClient:
        effective = settings.model_copy(update=overrides)
        app = create_app(effective, transport=httpx.MockTransport(provider))
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client):
    return make_client()
