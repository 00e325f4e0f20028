"""
Process configuration.

Values are read once from the environment (and an optional .env file) by
``load_settings()`` and handed to the application factory. Nothing else in
the app reads os.environ directly.
"""

import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_PORT = 5000
DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5 MB
DEFAULT_TIMEOUT_SECONDS = 30.0

EMAILJS_SEND_URL = "https://api.emailjs.com/api/v1.0/email/send"
CLOUDINARY_API_URL = "https://api.cloudinary.com"

STAGING_MODES = ("memory", "disk")
RESOURCE_TYPES = ("auto", "raw")
LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


class Settings(BaseModel):
    """Everything the gateway needs to know about its environment."""

    port: int = DEFAULT_PORT

    # Cloudinary (object storage)
    cloudinary_cloud_name: Optional[str] = None
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None
    cloudinary_api_url: str = CLOUDINARY_API_URL

    # EmailJS (transactional email)
    emailjs_service_id: Optional[str] = None
    emailjs_template_id: Optional[str] = None
    emailjs_public_key: Optional[str] = None
    emailjs_private_key: Optional[str] = None
    emailjs_api_url: str = EMAILJS_SEND_URL

    # Upload relay
    upload_staging: str = "memory"
    upload_max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES  # 0 disables the limit
    upload_temp_dir: Optional[str] = None
    upload_folder: str = "cv_uploads"
    upload_resource_type: str = "auto"

    outbound_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    static_dir: Optional[str] = None
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"

    @property
    def cloudinary_configured(self) -> bool:
        return bool(
            self.cloudinary_cloud_name
            and self.cloudinary_api_key
            and self.cloudinary_api_secret
        )

    @property
    def emailjs_configured(self) -> bool:
        return bool(
            self.emailjs_service_id
            and self.emailjs_template_id
            and self.emailjs_public_key
        )

    def log_config(self) -> None:
        """Log the effective configuration without secrets."""
        logger.info(f"Port: {self.port}")
        logger.info(
            f"Upload staging: {self.upload_staging}, "
            f"max bytes: {self.upload_max_bytes or 'unlimited'}, "
            f"folder: {self.upload_folder}, resource_type: {self.upload_resource_type}"
        )
        logger.info(f"Outbound timeout: {self.outbound_timeout_seconds}s")
        logger.info(f"Static dir: {self.static_dir or '(disabled)'}")
        if not self.cloudinary_configured:
            logger.warning(
                "Cloudinary credentials missing (CLOUDINARY_CLOUD_NAME / "
                "CLOUDINARY_API_KEY / CLOUDINARY_API_SECRET); /upload-cv will fail"
            )
        if not self.emailjs_configured:
            logger.warning(
                "EmailJS identifiers missing (EMAILJS_SERVICE_ID / "
                "EMAILJS_TEMPLATE_ID / EMAILJS_PUBLIC_KEY); the provider will reject /send-email"
            )


def _env(name: str) -> Optional[str]:
    """Return a stripped env var, treating empty strings as unset."""
    value = os.getenv(name, "").strip()
    return value or None


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_choice(name: str, default: str, choices: tuple) -> str:
    value = (_env(name) or default).lower()
    if value not in choices:
        raise ValueError(f"{name} must be one of {list(choices)}, got {value!r}")
    return value


def parse_cors_origins(raw: Optional[str]) -> List[str]:
    """
    Split a comma-separated CORS_ORIGINS value.

    Unset or empty means every origin is allowed. Duplicates are removed
    while preserving order.
    """
    if not raw:
        return ["*"]

    seen: set = set()
    origins: List[str] = []
    for origin in (o.strip() for o in raw.split(",")):
        if origin and origin not in seen:
            seen.add(origin)
            origins.append(origin)
    return origins or ["*"]


def load_settings(dotenv: bool = True) -> Settings:
    """
    Build Settings from the process environment.

    Raises:
        ValueError: if a numeric or enumerated variable holds an invalid value
    """
    if dotenv:
        load_dotenv()

    upload_max_bytes = _env_int("UPLOAD_MAX_BYTES", DEFAULT_MAX_UPLOAD_BYTES)
    if upload_max_bytes < 0:
        raise ValueError("UPLOAD_MAX_BYTES must be >= 0")

    timeout = _env_float("OUTBOUND_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
    if timeout <= 0:
        raise ValueError("OUTBOUND_TIMEOUT_SECONDS must be > 0")

    return Settings(
        port=_env_int("PORT", DEFAULT_PORT),
        cloudinary_cloud_name=_env("CLOUDINARY_CLOUD_NAME"),
        cloudinary_api_key=_env("CLOUDINARY_API_KEY"),
        cloudinary_api_secret=_env("CLOUDINARY_API_SECRET"),
        cloudinary_api_url=_env("CLOUDINARY_API_URL") or CLOUDINARY_API_URL,
        emailjs_service_id=_env("EMAILJS_SERVICE_ID"),
        emailjs_template_id=_env("EMAILJS_TEMPLATE_ID"),
        emailjs_public_key=_env("EMAILJS_PUBLIC_KEY"),
        emailjs_private_key=_env("EMAILJS_PRIVATE_KEY"),
        emailjs_api_url=_env("EMAILJS_API_URL") or EMAILJS_SEND_URL,
        upload_staging=_env_choice("UPLOAD_STAGING", "memory", STAGING_MODES),
        upload_max_bytes=upload_max_bytes,
        upload_temp_dir=_env("UPLOAD_TEMP_DIR"),
        upload_folder=_env("UPLOAD_FOLDER") or "cv_uploads",
        upload_resource_type=_env_choice("UPLOAD_RESOURCE_TYPE", "auto", RESOURCE_TYPES),
        outbound_timeout_seconds=timeout,
        static_dir=_env("STATIC_DIR"),
        cors_origins=parse_cors_origins(_env("CORS_ORIGINS")),
        log_level=_env_choice("LOG_LEVEL", "info", LOG_LEVELS).upper(),
    )
