"""
Delivery Engine

Orchestrates outbound delivery for one tenant:
1. Resolves the tenant's provider once, at construction
2. Dispatches each send to that provider's adapter
3. On failure, retries once through Maytapi when it is configured
4. Runs broadcasts sequentially with a fixed pause between recipients
"""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from messaging_router.config import DeliveryConfig
from messaging_router.contracts.types import (
    BroadcastFailure,
    BroadcastResult,
    Recipient,
    TenantProfile,
    recipient_label,
)
from messaging_router.persistence.repo import DeliveryRepository
from messaging_router.providers.base import (
    DeliveryAdapter,
    DeliveryError,
    PersistenceError,
    ProviderChoice,
    ProviderHealth,
    ProviderKind,
    SendResult,
    UnknownProviderError,
)
from messaging_router.providers.registry import build_adapter
from messaging_router.routing.provider_selector import select_provider

logger = logging.getLogger(__name__)

# Errors that surface immediately, without the Maytapi fallback
NO_FALLBACK_ERRORS = (UnknownProviderError, PersistenceError)


class DeliveryEngine:
    """
    Sends messages for a tenant through its selected provider.

    Responsibilities:
    - Single sends with a one-shot Maytapi fallback
    - Paced broadcasts with per-recipient failure accounting
    - Provider health checks that never raise
    """

    def __init__(
        self,
        tenant: TenantProfile,
        config: DeliveryConfig | None = None,
        repo: DeliveryRepository | None = None,
        adapters: Mapping[ProviderKind, DeliveryAdapter] | None = None,
    ):
        self.tenant = tenant
        self.config = config or DeliveryConfig.from_settings()
        self.repo = repo
        self.provider: ProviderChoice = select_provider(tenant)
        self._adapters: dict[ProviderKind, DeliveryAdapter] = dict(adapters or {})

        logger.debug(
            "Selected provider",
            extra={"tenant_id": str(tenant.id), "provider": str(self.provider)},
        )

    def get_adapter(self, choice: ProviderChoice) -> DeliveryAdapter:
        """Get (or lazily build) the adapter for a provider."""
        if isinstance(choice, ProviderKind) and choice in self._adapters:
            return self._adapters[choice]

        adapter = build_adapter(choice, self.tenant, self.config, self.repo)
        self._adapters[adapter.provider] = adapter
        return adapter

    def can_fall_back(self) -> bool:
        """Maytapi fallback applies to non-Maytapi providers when it is configured."""
        return self.provider != ProviderKind.MAYTAPI and self.config.has_legacy_credentials

    async def send_message(
        self,
        phone: str,
        message: str,
        media_url: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> SendResult:
        """
        Send one message via the tenant's provider.

        Args:
            phone: Recipient phone (bare number or chat id)
            message: Message body
            media_url: Optional media URL
            options: Extra options (recipient_name)

        Returns:
            SendResult from the provider that handled the message

        Raises:
            DeliveryError subclass. When the fallback ran and failed, its own
            error is raised.
        """
        logger.info(
            f"Sending via {self.provider} to {phone}",
            extra={"tenant_id": str(self.tenant.id), "provider": str(self.provider), "to": phone},
        )

        try:
            adapter = self.get_adapter(self.provider)
            return await adapter.send(phone, message, media_url, options)

        except NO_FALLBACK_ERRORS:
            raise

        except DeliveryError as e:
            logger.error(
                f"Error with {self.provider}: {e}",
                extra={"tenant_id": str(self.tenant.id), "provider": str(self.provider), "code": e.code},
            )

            if not self.can_fall_back():
                raise

            logger.warning(
                "Falling back to Maytapi",
                extra={"tenant_id": str(self.tenant.id), "failed_provider": str(self.provider)},
            )
            fallback = self.get_adapter(ProviderKind.MAYTAPI)
            return await fallback.send(phone, message, media_url, options)

    async def send_broadcast(
        self,
        recipients: Sequence[Any],
        message: str,
        media_url: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> BroadcastResult:
        """
        Send the same message to many recipients, one at a time.

        Recipients may be bare phone strings or {phone, name} entries. A failure
        for one recipient is recorded and the broadcast continues.

        Returns:
            BroadcastResult with counts and per-recipient errors
        """
        result = BroadcastResult(total=len(recipients))

        for index, entry in enumerate(recipients):
            try:
                recipient = Recipient.coerce(entry)
                await self.send_message(
                    recipient.phone,
                    message,
                    media_url,
                    {**(options or {}), "recipient_name": recipient.name},
                )
                result.sent += 1

            except Exception as e:
                result.failed += 1
                result.errors.append(BroadcastFailure(recipient=recipient_label(entry), error=str(e)))
                logger.warning(
                    f"Broadcast send failed for {recipient_label(entry)}: {e}",
                    extra={"tenant_id": str(self.tenant.id)},
                )

            if index < len(recipients) - 1:
                await asyncio.sleep(self.config.broadcast_delay)

        logger.info(
            "Broadcast finished",
            extra={
                "tenant_id": str(self.tenant.id),
                "provider": str(self.provider),
                "total": result.total,
                "sent": result.sent,
                "failed": result.failed,
            },
        )

        return result

    async def check_status(self) -> ProviderHealth:
        """Report the selected provider's health. Never raises."""
        try:
            adapter = self.get_adapter(self.provider)
        except DeliveryError as e:
            status = "unknown" if isinstance(e, UnknownProviderError) else "disconnected"
            return ProviderHealth(
                ok=False,
                status=status,
                provider=str(self.provider),
                error=str(e),
            )

        return await adapter.check_status()

    async def close(self) -> None:
        """Close all adapters that were built."""
        for adapter in self._adapters.values():
            await adapter.close()
