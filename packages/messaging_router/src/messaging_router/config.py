"""
Delivery configuration.

Explicit configuration passed into every adapter. All values are optional;
each adapter checks the subset it needs only when it is actually used.
"""

from dataclasses import dataclass

from basecore.settings import Settings, get_settings

DEFAULT_MAYTAPI_API_URL = "https://api.maytapi.com/api"

# Seconds
SEND_TIMEOUT = 10.0
HEALTH_TIMEOUT = 5.0
BROADCAST_DELAY = 2.0


@dataclass(frozen=True)
class DeliveryConfig:
    """Endpoints and credentials for all delivery providers."""

    desktop_agent_url: str | None = None
    waha_url: str | None = None
    waha_api_key: str | None = None
    maytapi_product_id: str | None = None
    maytapi_phone_id: str | None = None
    maytapi_api_key: str | None = None
    maytapi_api_url: str = DEFAULT_MAYTAPI_API_URL
    broadcast_delay: float = BROADCAST_DELAY
    send_timeout: float = SEND_TIMEOUT
    health_timeout: float = HEALTH_TIMEOUT

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "DeliveryConfig":
        """Build configuration from application settings."""
        settings = settings or get_settings()
        return cls(
            desktop_agent_url=settings.DESKTOP_AGENT_URL,
            waha_url=settings.WAHA_URL,
            waha_api_key=settings.WAHA_API_KEY,
            maytapi_product_id=settings.MAYTAPI_PRODUCT_ID,
            maytapi_phone_id=settings.MAYTAPI_PHONE_ID,
            maytapi_api_key=settings.MAYTAPI_API_KEY,
            maytapi_api_url=settings.MAYTAPI_API_URL,
            broadcast_delay=settings.BROADCAST_DELAY_SECONDS,
        )

    @property
    def has_waha_credentials(self) -> bool:
        return bool(self.waha_url and self.waha_api_key)

    @property
    def has_legacy_credentials(self) -> bool:
        """True when Maytapi can be used (and therefore as a fallback)."""
        return bool(self.maytapi_product_id and self.maytapi_phone_id and self.maytapi_api_key)
