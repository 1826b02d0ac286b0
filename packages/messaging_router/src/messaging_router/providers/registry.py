"""
Adapter Registry

Builds the adapter for a provider kind.
"""

from messaging_router.config import DeliveryConfig
from messaging_router.contracts.types import TenantProfile
from messaging_router.persistence.repo import DeliveryRepository
from messaging_router.providers.base import (
    ConfigurationError,
    DeliveryAdapter,
    ProviderChoice,
    ProviderKind,
    UnknownProviderError,
)
from messaging_router.providers.desktop_agent import DesktopAgentAdapter
from messaging_router.providers.maytapi import MaytapiAdapter
from messaging_router.providers.waha import WahaAdapter


def build_adapter(
    choice: ProviderChoice,
    tenant: TenantProfile,
    config: DeliveryConfig,
    repo: DeliveryRepository | None = None,
) -> DeliveryAdapter:
    """
    Get the adapter for a provider selection.

    Args:
        choice: Selected provider (or an unrecognized override)
        tenant: Tenant the adapter sends for
        config: Endpoints and credentials
        repo: Queue repository (Desktop Agent only)

    Raises:
        UnknownProviderError: For an unrecognized provider tag
        ConfigurationError: Desktop Agent requested without a repository
    """
    if choice == ProviderKind.DESKTOP_AGENT:
        if repo is None:
            raise ConfigurationError(
                "Desktop Agent queue requires a database session",
                code="QUEUE_NOT_CONFIGURED",
            )
        return DesktopAgentAdapter(tenant, repo, config)

    if choice == ProviderKind.WAHA:
        return WahaAdapter(tenant, config)

    if choice == ProviderKind.MAYTAPI:
        return MaytapiAdapter(config)

    raise UnknownProviderError(f"Unknown provider: {choice}", code="UNKNOWN_PROVIDER")
