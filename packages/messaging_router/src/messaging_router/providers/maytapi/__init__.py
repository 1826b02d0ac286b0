"""Maytapi legacy provider."""

from messaging_router.providers.maytapi.client import MaytapiAdapter

__all__ = ["MaytapiAdapter"]
