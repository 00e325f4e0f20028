"""
Contact-form relay endpoint.

Endpoints:
  POST /send-email   forward a contact-form submission to EmailJS
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from app.dependencies import get_emailjs_client
from app.models.notification import ErrorResponse, MessageResponse, SendEmailRequest
from app.services.emailjs import EmailDeliveryError, EmailJSClient

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/send-email",
    response_model=MessageResponse,
    responses={500: {"model": ErrorResponse}},
)
async def send_email(
    notification: Optional[SendEmailRequest] = Body(None),
    client: EmailJSClient = Depends(get_emailjs_client),
):
    """
    Relay a contact-form message through EmailJS.

    Fields are forwarded verbatim; a missing body is treated as an empty
    message and left for EmailJS to reject. Any provider or transport
    failure becomes a 500 carrying the provider's detail where available.
    """
    if notification is None:
        notification = SendEmailRequest()

    try:
        await client.send(notification)
    except EmailDeliveryError as e:
        raise HTTPException(status_code=500, detail=e.detail)
    except Exception as e:
        logger.error(f"Email error: {e!r}")
        raise HTTPException(status_code=500, detail="Failed to send email")

    return MessageResponse(message="Email sent successfully")
