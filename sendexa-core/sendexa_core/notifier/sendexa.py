"""
Sendexa SMS Notifier
====================
Delivers verification codes through the Sendexa SMS API.
"""

import httpx
from typing import Optional, Dict, Any
from base64 import b64encode
import structlog

from sendexa_core.messaging import mask_phone

from .base import Notifier, SendResult, MessageStatus

logger = structlog.get_logger(__name__)


class SendexaNotifier(Notifier):
    """
    Sendexa SMS API notifier.

    Sends ``{to, from, message}`` to ``{base_url}/send`` using Basic auth.
    """

    name = "sendexa"

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        base_url: str = "https://api.sendexa.co/v1/sms",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__()
        self.api_key = api_key
        self.api_secret = api_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        """Create HTTP client with auth."""
        await self._get_client()
        await super().initialize()

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            credentials = b64encode(f"{self.api_key}:{self.api_secret}".encode()).decode()
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Basic {credentials}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
        await super().close()

    async def send(
        self,
        to_phone_number: str,
        sender_label: str,
        message_body: str,
    ) -> SendResult:
        """Send SMS via Sendexa."""
        payload = {
            # Sendexa expects bare international digits
            "to": to_phone_number.lstrip("+"),
            "from": sender_label,
            "message": message_body,
        }

        try:
            client = await self._get_client()
            response = await client.post("/send", json=payload)
            data = self._parse_body(response)
        except httpx.HTTPError as e:
            logger.error("Sendexa send failed", to=mask_phone(to_phone_number), error=str(e))
            return SendResult(
                success=False,
                status=MessageStatus.FAILED,
                error_message=str(e),
            )

        if response.is_success:
            details = data.get("data") if isinstance(data.get("data"), dict) else {}
            return SendResult(
                success=True,
                provider_message_id=details.get("messageId") or details.get("id"),
                status=MessageStatus.SENT,
                raw_response=data,
            )

        logger.warning(
            "Sendexa rejected message",
            to=mask_phone(to_phone_number),
            status_code=response.status_code,
            error=data.get("message"),
        )
        return SendResult(
            success=False,
            status=MessageStatus.REJECTED if response.status_code < 500 else MessageStatus.FAILED,
            error_code=str(data.get("code", response.status_code)),
            error_message=data.get("message", "Failed to send SMS"),
            raw_response=data,
        )

    @staticmethod
    def _parse_body(response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            return {"message": response.text}
        return data if isinstance(data, dict) else {"data": data}

    async def health_check(self) -> bool:
        return self._client is not None
