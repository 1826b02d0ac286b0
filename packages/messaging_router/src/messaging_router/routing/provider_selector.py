"""
Provider Selector

Chooses the delivery provider for a tenant. Pure function of tenant state.

Priority:
1. Explicit tenant override (used verbatim, validated only at send time)
2. Plan tier: basic -> Desktop Agent, premium -> Waha
3. Maytapi, for backward compatibility
"""

from messaging_router.contracts.types import TenantProfile
from messaging_router.persistence.models import PlanTier
from messaging_router.providers.base import ProviderChoice, ProviderKind, UnrecognizedProvider


PLAN_DEFAULTS: dict[str, ProviderKind] = {
    PlanTier.BASIC.value: ProviderKind.DESKTOP_AGENT,
    PlanTier.PREMIUM.value: ProviderKind.WAHA,
}


def parse_provider_tag(tag: str) -> ProviderChoice:
    """Map a provider tag to a ProviderKind, or UnrecognizedProvider."""
    try:
        return ProviderKind(tag)
    except ValueError:
        return UnrecognizedProvider(tag)


def select_provider(tenant: TenantProfile) -> ProviderChoice:
    """
    Resolve the provider for a tenant.

    Args:
        tenant: Tenant profile

    Returns:
        ProviderKind, or UnrecognizedProvider for an unknown override tag
    """
    if tenant.whatsapp_provider:
        return parse_provider_tag(tenant.whatsapp_provider)

    return PLAN_DEFAULTS.get(tenant.plan or "", ProviderKind.MAYTAPI)
