"""
Pydantic models for the contact-form relay.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict


class SendEmailRequest(BaseModel):
    """
    Contact-form submission as posted by the frontend.

    No field is required and no format is checked: EmailJS is the system of
    record for validation, so whatever arrives is forwarded as template params.
    """

    model_config = ConfigDict(extra="ignore")

    from_name: Optional[Any] = None
    from_email: Optional[Any] = None
    message: Optional[Any] = None
    cv_link: Optional[Any] = None

    def template_params(self) -> Dict[str, Any]:
        return {
            "from_name": self.from_name,
            "from_email": self.from_email,
            "message": self.message,
            "cv_link": self.cv_link,
        }


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Body of every non-2xx gateway response."""

    error: str
