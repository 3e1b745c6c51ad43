"""
Resend email provider implementation.

Sends transactional email through the Resend HTTP API
(``POST {base_url}/emails``). Delivery is attempted once; failures are
reported to the caller, never retried here.
"""

import asyncio

import httpx

from lumix.config import get_logger, get_settings
from lumix.config.settings import EmailSettings
from lumix.core.exceptions import DeliveryError
from lumix.core.interfaces.email import EmailMessage, EmailReceipt, IEmailSender

logger = get_logger(__name__)


class ResendEmailSender(IEmailSender):
    """Resend HTTP API sender with a lazily created, shared HTTP client."""

    def __init__(
        self,
        email_settings: EmailSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        if email_settings is None:
            email_settings = get_settings().email
        self._settings = email_settings
        self._client = client
        self._lock = asyncio.Lock()

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            async with self._lock:
                if self._client is None:
                    self._client = httpx.AsyncClient(
                        base_url=self._settings.base_url,
                        timeout=self._settings.timeout,
                    )
        return self._client

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def _payload(message: EmailMessage) -> dict:
        payload = {
            "from": message.sender,
            "to": message.to,
            "subject": message.subject,
            "text": message.text,
            "html": message.html,
        }
        if message.attachments:
            payload["attachments"] = [
                {"filename": a.filename, "content": a.content} for a in message.attachments
            ]
        return payload

    async def send(self, message: EmailMessage) -> EmailReceipt:
        if not self._settings.api_key:
            raise DeliveryError("Email API key is not configured.")

        client = await self._get_client()
        try:
            response = await client.post(
                "/emails",
                json=self._payload(message),
                headers={"Authorization": f"Bearer {self._settings.api_key}"},
            )
        except httpx.HTTPError as e:
            logger.warning("email_transport_error", error=str(e), to=message.to)
            raise DeliveryError(f"Email provider unreachable: {e}") from e

        if not response.is_success:
            error_text = response.text[:200]
            logger.warning(
                "email_rejected",
                status_code=response.status_code,
                error=error_text,
                to=message.to,
            )
            raise DeliveryError(
                f"Email provider returned HTTP {response.status_code}: {error_text}",
                status_code=response.status_code,
            )

        message_id = None
        try:
            message_id = response.json().get("id")
        except (ValueError, AttributeError):
            pass

        logger.info(
            "email_sent",
            message_id=message_id,
            status_code=response.status_code,
            to=message.to,
            attachments=len(message.attachments),
        )
        return EmailReceipt(message_id=message_id, status_code=response.status_code)
