"""
Waha Cloud Provider

Sends through a hosted WhatsApp HTTP API (Waha) session bound to the tenant.
Delivery is synchronous: the API call either sends the message or fails.

Documentation: https://waha.devlike.pro/
"""

import logging
import time
from typing import Any

import httpx

from messaging_router.config import DeliveryConfig
from messaging_router.contracts.types import TenantProfile
from messaging_router.providers.base import (
    ConfigurationError,
    DeliveryAdapter,
    MessageId,
    ProviderError,
    ProviderHealth,
    ProviderKind,
    SendResult,
    SendStatus,
    to_chat_id,
)

logger = logging.getLogger(__name__)


class WahaAdapter(DeliveryAdapter):
    """
    Cloud-session provider.

    Each tenant has its own session, identified by waha_session_name.
    """

    provider = ProviderKind.WAHA

    def __init__(
        self,
        tenant: TenantProfile,
        config: DeliveryConfig,
    ):
        self.tenant = tenant
        self.config = config
        self._client: httpx.AsyncClient | None = None

    @property
    def api_url(self) -> str:
        return (self.config.waha_url or "").rstrip("/")

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.config.send_timeout,
                headers={
                    "Content-Type": "application/json",
                    "X-Api-Key": self.config.waha_api_key or "",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    def _require_config(self) -> str:
        """Return the session name, or fail before any network I/O."""
        if not self.config.has_waha_credentials:
            raise ConfigurationError("WAHA_API_KEY not configured", code="WAHA_NOT_CONFIGURED")
        if not self.tenant.waha_session_name:
            raise ConfigurationError(
                "Waha session not configured for tenant",
                code="WAHA_SESSION_MISSING",
            )
        return self.tenant.waha_session_name

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        json_data: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Make an authenticated API request."""
        client = await self._get_client()
        url = f"{self.api_url}{endpoint}"
        request_timeout = timeout or self.config.send_timeout

        try:
            if method.upper() == "GET":
                response = await client.get(url, timeout=request_timeout)
            else:
                response = await client.post(url, json=json_data, timeout=request_timeout)

        except httpx.RequestError as e:
            logger.error(f"Waha request failed: {e!r}")
            raise ProviderError(
                message=f"Waha send failed: {str(e) or e.__class__.__name__}",
                code="HTTP_ERROR",
                retryable=True,
            ) from e

        try:
            response_data = response.json()
        except ValueError:
            response_data = {"raw": response.text}
        if not isinstance(response_data, dict):
            response_data = {"data": response_data}

        if response.status_code >= 400:
            error = response_data.get("message") or response_data.get("error") or f"HTTP {response.status_code}"
            logger.error(f"Waha error: {response_data}")
            raise ProviderError(
                message=f"Waha send failed: {error}",
                code=str(response.status_code),
                details=response_data,
                retryable=response.status_code >= 500,
            )

        return response_data

    async def send(
        self,
        phone: str,
        message: str,
        media_url: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> SendResult:
        """Send text, then media as a separate message to the same chat."""
        session = self._require_config()
        chat_id = to_chat_id(phone)

        logger.info(
            "Sending via Waha session",
            extra={"tenant_id": str(self.tenant.id), "session": session, "to": chat_id},
        )

        response = await self._make_request(
            "POST",
            "/api/sendText",
            {
                "session": session,
                "chatId": chat_id,
                "text": message,
            },
        )
        message_id = response.get("id") or f"waha-{int(time.time() * 1000)}"

        if media_url:
            # The text already went out; a media failure does not undo it.
            try:
                await self._make_request(
                    "POST",
                    "/api/sendImage",
                    {
                        "session": session,
                        "chatId": chat_id,
                        "file": {"url": media_url},
                    },
                )
            except ProviderError as e:
                e.details = {**e.details, "text_message_id": message_id}
                raise

        return SendResult(
            ok=True,
            provider=self.provider.value,
            message_id=MessageId(str(message_id)),
            status=SendStatus.SENT,
            data=response,
        )

    async def check_status(self) -> ProviderHealth:
        """Query the tenant's session status."""
        try:
            session = self._require_config()
            data = await self._make_request(
                "GET",
                f"/api/sessions/{session}",
                timeout=self.config.health_timeout,
            )

        except (ConfigurationError, ProviderError) as e:
            logger.warning(f"Waha status check failed: {e}")
            return ProviderHealth(
                ok=False,
                status="disconnected",
                provider=self.provider.value,
                error=str(e),
            )

        return ProviderHealth(
            ok=True,
            status=data.get("status") or "unknown",
            provider=self.provider.value,
            data=data,
        )
