"""
Delivery Provider Base

Abstract interface for outbound delivery providers.
Implementations: Desktop Agent (queue), Waha (cloud session), Maytapi (legacy).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NewType

# Opaque message identifier shared by SendResult and the pending-work queue.
# Callers must not assume a format: it is a queue row UUID for the Desktop
# Agent and a provider-assigned string for Waha and Maytapi.
MessageId = NewType("MessageId", str)

CHAT_SUFFIX = "@c.us"


class DeliveryError(Exception):
    """Base error for message delivery."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.retryable = retryable


class ConfigurationError(DeliveryError):
    """A required credential or setting is missing."""


class ProviderError(DeliveryError):
    """The remote provider rejected or failed the request."""


class PersistenceError(DeliveryError):
    """Reading or writing the pending-work queue failed."""


class UnknownProviderError(DeliveryError):
    """The tenant's provider override names no known provider."""


class ProviderKind(str, Enum):
    """Known delivery providers."""

    DESKTOP_AGENT = "desktop-agent"
    WAHA = "waha"
    MAYTAPI = "maytapi"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class UnrecognizedProvider:
    """Selection result for an override tag that matches no ProviderKind."""

    tag: str

    def __str__(self) -> str:
        return self.tag


ProviderChoice = ProviderKind | UnrecognizedProvider


class SendStatus(str, Enum):
    """Outcome label of a single send."""

    QUEUED = "queued"
    SENT = "sent"


@dataclass
class SendResult:
    """
    Result of one adapter send.
    """

    ok: bool
    provider: str
    message_id: MessageId
    status: SendStatus
    data: dict[str, Any] = field(default_factory=dict)
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "ok": self.ok,
            "provider": self.provider,
            "messageId": self.message_id,
            "status": self.status.value,
        }
        if self.data:
            result["data"] = self.data
        if self.note:
            result["note"] = self.note
        return result


@dataclass
class ProviderHealth:
    """
    Health snapshot for a provider.

    Never raised as an error: failures become ok=False with a status label.
    """

    ok: bool
    status: str
    provider: str
    data: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "ok": self.ok,
            "status": self.status,
            "provider": self.provider,
        }
        if self.data:
            result["data"] = self.data
        if self.error:
            result["error"] = self.error
        if self.note:
            result["note"] = self.note
        return result


def to_chat_id(phone: str) -> str:
    """Convert a bare number to the addressed chat form (15551234567@c.us)."""
    return phone if "@" in phone else f"{phone}{CHAT_SUFFIX}"


def strip_chat_suffix(phone: str) -> str:
    """Remove the chat suffix; Maytapi expects bare numbers."""
    return phone.replace(CHAT_SUFFIX, "")


class DeliveryAdapter(ABC):
    """
    Abstract interface for delivery providers.

    Implementations must handle:
    - Sending one message (with optional media) to one recipient
    - Reporting provider health without raising
    """

    provider: ProviderKind

    @abstractmethod
    async def send(
        self,
        phone: str,
        message: str,
        media_url: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> SendResult:
        """
        Send a message to one recipient.

        Args:
            phone: Recipient phone (bare number or chat id)
            message: Message body
            media_url: Optional media to attach
            options: Extra send options (e.g. recipient_name)

        Returns:
            SendResult with provider message ID

        Raises:
            DeliveryError subclass on failure
        """
        ...

    @abstractmethod
    async def check_status(self) -> ProviderHealth:
        """Report provider health. Must not raise."""
        ...

    async def close(self) -> None:
        """Release any held resources."""
        return None
