"""
Messaging Router Persistence

SQLAlchemy models and repository for tenants and the pending-work queue.
"""

from messaging_router.persistence.models import (
    DeliveryBase,
    DeliveryMethod,
    PendingMessage,
    PendingStatus,
    PlanTier,
    Tenant,
)
from messaging_router.persistence.repo import DeliveryRepository

__all__ = [
    "DeliveryBase",
    "DeliveryMethod",
    "DeliveryRepository",
    "PendingMessage",
    "PendingStatus",
    "PlanTier",
    "Tenant",
]
