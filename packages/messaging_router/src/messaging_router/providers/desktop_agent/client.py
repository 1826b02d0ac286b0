"""
Desktop Agent Provider

Queues messages for a local WhatsApp Web client (the Desktop Agent).
The agent polls the gateway for pending entries, sends them, and reports back.
Sending never contacts the agent; only the health check does.
"""

import logging
from typing import Any

import httpx
from sqlalchemy.exc import SQLAlchemyError

from messaging_router.config import DeliveryConfig
from messaging_router.contracts.types import TenantProfile
from messaging_router.persistence.models import DeliveryMethod
from messaging_router.persistence.repo import DeliveryRepository
from messaging_router.providers.base import (
    DeliveryAdapter,
    MessageId,
    PersistenceError,
    ProviderHealth,
    ProviderKind,
    SendResult,
    SendStatus,
    to_chat_id,
)

logger = logging.getLogger(__name__)


class DesktopAgentAdapter(DeliveryAdapter):
    """
    Pull-queue provider.

    Writes a pending row per message; delivery happens asynchronously when the
    tenant's agent drains the queue.
    """

    provider = ProviderKind.DESKTOP_AGENT

    def __init__(
        self,
        tenant: TenantProfile,
        repo: DeliveryRepository,
        config: DeliveryConfig,
    ):
        self.tenant = tenant
        self.repo = repo
        self.config = config

    async def send(
        self,
        phone: str,
        message: str,
        media_url: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> SendResult:
        """Queue a message for the Desktop Agent."""
        options = options or {}
        chat_id = to_chat_id(phone)

        try:
            if self.repo.get_tenant(self.tenant.id) is None:
                raise PersistenceError(
                    f"Desktop Agent queue failed: unknown tenant {self.tenant.id}",
                    code="UNKNOWN_TENANT",
                )

            pending = self.repo.enqueue_message(
                tenant_id=self.tenant.id,
                phone=chat_id,
                message=message,
                media_url=media_url,
                name=options.get("recipient_name"),
                delivery_method=DeliveryMethod.DESKTOP,
            )
            self.repo.db.commit()

        except SQLAlchemyError as e:
            self.repo.db.rollback()
            logger.error(f"Desktop Agent queue error: {e}")
            raise PersistenceError(
                f"Desktop Agent queue failed: {e}",
                code="QUEUE_WRITE_FAILED",
            ) from e

        logger.info(
            "Queued message for Desktop Agent",
            extra={"tenant_id": str(self.tenant.id), "to": chat_id, "message_id": str(pending.id)},
        )

        return SendResult(
            ok=True,
            provider=self.provider.value,
            message_id=MessageId(str(pending.id)),
            status=SendStatus.QUEUED,
            note="Message queued for Desktop Agent to send",
        )

    async def check_status(self) -> ProviderHealth:
        """Probe the agent's /health endpoint."""
        if not self.config.desktop_agent_url:
            return ProviderHealth(
                ok=False,
                status="disconnected",
                provider=self.provider.value,
                error="Desktop Agent URL not configured",
            )

        url = f"{self.config.desktop_agent_url.rstrip('/')}/health"

        try:
            async with httpx.AsyncClient(timeout=self.config.health_timeout) as client:
                response = await client.get(url)
                response.raise_for_status()
                data = response.json()
                if not isinstance(data, dict):
                    data = {}

        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Desktop Agent health check failed: {e}")
            return ProviderHealth(
                ok=False,
                status="disconnected",
                provider=self.provider.value,
                error=str(e) or e.__class__.__name__,
            )

        return ProviderHealth(
            ok=True,
            status=data.get("status") or "running",
            provider=self.provider.value,
            data=data,
        )
