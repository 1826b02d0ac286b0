"""
Delivery Service

Single-send, broadcast and health orchestration.
"""

from messaging_router.service.delivery_engine import DeliveryEngine

__all__ = ["DeliveryEngine"]
