"""
Delivery Contracts

Value types and HTTP payload models.
"""

from messaging_router.contracts.types import (
    BroadcastFailure,
    BroadcastResult,
    Recipient,
    TenantProfile,
)

__all__ = [
    "BroadcastFailure",
    "BroadcastResult",
    "Recipient",
    "TenantProfile",
]
