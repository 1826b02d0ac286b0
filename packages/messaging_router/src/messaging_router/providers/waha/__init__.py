"""Waha cloud-session provider."""

from messaging_router.providers.waha.client import WahaAdapter

__all__ = ["WahaAdapter"]
