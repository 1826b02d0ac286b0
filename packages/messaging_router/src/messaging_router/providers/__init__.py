"""
Delivery Providers

Adapters for the supported WhatsApp delivery backends:
Desktop Agent (queue), Waha (cloud session) and Maytapi (legacy).
"""

from messaging_router.providers.base import (
    ConfigurationError,
    DeliveryAdapter,
    DeliveryError,
    PersistenceError,
    ProviderError,
    ProviderHealth,
    ProviderKind,
    SendResult,
    SendStatus,
    UnknownProviderError,
    UnrecognizedProvider,
)

__all__ = [
    "ConfigurationError",
    "DeliveryAdapter",
    "DeliveryError",
    "PersistenceError",
    "ProviderError",
    "ProviderHealth",
    "ProviderKind",
    "SendResult",
    "SendStatus",
    "UnknownProviderError",
    "UnrecognizedProvider",
]
