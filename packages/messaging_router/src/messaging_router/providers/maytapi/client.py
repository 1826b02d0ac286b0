"""
Maytapi Provider

Legacy third-party WhatsApp gateway. Kept for existing tenants and as the
universal fallback when another provider fails.
"""

import logging
import time
from typing import Any

import httpx

from messaging_router.config import DeliveryConfig
from messaging_router.providers.base import (
    ConfigurationError,
    DeliveryAdapter,
    MessageId,
    ProviderError,
    ProviderHealth,
    ProviderKind,
    SendResult,
    SendStatus,
    strip_chat_suffix,
)

logger = logging.getLogger(__name__)


class MaytapiAdapter(DeliveryAdapter):
    """
    Legacy provider.

    One account (product + phone) is shared by all tenants.
    """

    provider = ProviderKind.MAYTAPI

    def __init__(self, config: DeliveryConfig):
        self.config = config
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.config.send_timeout,
                headers={
                    "Content-Type": "application/json",
                    "x-maytapi-key": self.config.maytapi_api_key or "",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    def send_endpoint(self) -> str:
        base = self.config.maytapi_api_url.rstrip("/")
        return f"{base}/{self.config.maytapi_product_id}/{self.config.maytapi_phone_id}/sendMessage"

    async def send(
        self,
        phone: str,
        message: str,
        media_url: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> SendResult:
        """Send a text or media message via Maytapi."""
        if not self.config.has_legacy_credentials:
            raise ConfigurationError("Maytapi credentials not configured", code="MAYTAPI_NOT_CONFIGURED")

        payload: dict[str, Any] = {
            "to_number": strip_chat_suffix(phone),
            "message": message,
            "type": "media" if media_url else "text",
        }
        if media_url:
            payload["media_url"] = media_url

        logger.info("Sending via Maytapi (legacy)", extra={"to": payload["to_number"]})

        client = await self._get_client()

        try:
            response = await client.post(self.send_endpoint(), json=payload)
        except httpx.RequestError as e:
            logger.error(f"Maytapi request failed: {e!r}")
            raise ProviderError(
                message=f"Maytapi send failed: {str(e) or e.__class__.__name__}",
                code="HTTP_ERROR",
                retryable=True,
            ) from e

        try:
            response_data = response.json()
        except ValueError:
            response_data = {"raw": response.text}
        if not isinstance(response_data, dict):
            response_data = {"data": response_data}

        if response.status_code >= 400 or response_data.get("success") is False:
            error = response_data.get("message") or f"HTTP {response.status_code}"
            logger.error(f"Maytapi error: {response_data}")
            raise ProviderError(
                message=f"Maytapi send failed: {error}",
                code=str(response.status_code),
                details=response_data,
                retryable=response.status_code >= 500,
            )

        data = response_data.get("data")
        message_id = (data.get("id") if isinstance(data, dict) else None) or f"maytapi-{int(time.time() * 1000)}"

        return SendResult(
            ok=True,
            provider=self.provider.value,
            message_id=MessageId(str(message_id)),
            status=SendStatus.SENT,
            data=response_data,
        )

    async def check_status(self) -> ProviderHealth:
        """Maytapi exposes no simple status endpoint; report unknown."""
        return ProviderHealth(
            ok=True,
            status="unknown",
            provider=self.provider.value,
            note="Maytapi status checking not implemented",
        )
