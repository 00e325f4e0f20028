"""
EmailJS relay service.

Forwards a contact-form submission to the EmailJS REST API and translates
its reply. EmailJS answers with plain text ("OK", or an error sentence) on
most paths but has been seen returning JSON, so the body is always read as
text first and decoded opportunistically.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from app.config import Settings
from app.models.notification import SendEmailRequest

logger = logging.getLogger(__name__)

# JSON members that carry a human-readable detail, in preference order
_DETAIL_KEYS = ("error", "message", "text")


class EmailDeliveryError(Exception):
    """EmailJS rejected the message or could not be reached."""

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


@dataclass
class ProviderReply:
    """The fully read EmailJS response."""

    status_code: int
    text: str
    data: Any = None  # decoded JSON, or None when the body is not JSON

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def detail(self) -> str:
        """
        Best human-readable description of the reply.

        A JSON object with a string error/message/text member yields that
        member; anything else (plain text, other JSON shapes) yields the raw
        body.
        """
        if isinstance(self.data, dict):
            for key in _DETAIL_KEYS:
                value = self.data.get(key)
                if isinstance(value, str) and value:
                    return value
        return self.text or f"EmailJS returned HTTP {self.status_code}"


def decode_reply(status_code: int, text: str) -> ProviderReply:
    """Attempt a JSON decode of ``text``; undecodable bodies keep data=None."""
    try:
        data = json.loads(text) if text else None
    except ValueError:
        data = None
    return ProviderReply(status_code=status_code, text=text, data=data)


class EmailJSClient:
    """Thin async client bound to one EmailJS service/template/account."""

    def __init__(self, settings: Settings, http: httpx.AsyncClient):
        self.settings = settings
        self.http = http

    def build_payload(self, notification: SendEmailRequest) -> Dict[str, Any]:
        """
        Build the EmailJS send payload.

        The private key (EmailJS "access token") is only included when
        configured; accounts with strict mode on require it for server calls.
        """
        payload: Dict[str, Any] = {
            "service_id": self.settings.emailjs_service_id,
            "template_id": self.settings.emailjs_template_id,
            "user_id": self.settings.emailjs_public_key,
            "template_params": notification.template_params(),
        }
        if self.settings.emailjs_private_key:
            payload["accessToken"] = self.settings.emailjs_private_key
        return payload

    async def send(self, notification: SendEmailRequest) -> ProviderReply:
        """
        Send one notification through EmailJS.

        Returns:
            The decoded provider reply (always a 2xx one).

        Raises:
            EmailDeliveryError: non-2xx reply (detail = provider detail) or a
                transport failure (detail = generic message, cause chained)
        """
        payload = self.build_payload(notification)
        logger.info(f"Sending EmailJS message with params: {payload['template_params']}")

        try:
            response = await self.http.post(self.settings.emailjs_api_url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"EmailJS request failed: {e!r}")
            raise EmailDeliveryError("Failed to send email") from e

        reply = decode_reply(response.status_code, response.text)
        logger.info(f"EmailJS response ({reply.status_code}): {reply.text}")

        if not reply.ok:
            raise EmailDeliveryError(reply.detail, status_code=reply.status_code)

        return reply
