"""
Routing

Provider selection per tenant.
"""

from messaging_router.routing.provider_selector import parse_provider_tag, select_provider

__all__ = ["parse_provider_tag", "select_provider"]
