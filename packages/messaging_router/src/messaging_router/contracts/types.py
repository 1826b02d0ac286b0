"""
Delivery Contract Types

Plain value types shared by the engine, the CLI and the agent gateway.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID


@dataclass(frozen=True)
class TenantProfile:
    """
    Read-only view of a tenant, as needed for provider selection and sending.

    Attributes:
        id: Tenant UUID
        plan: Plan tier ("basic", "premium", ...)
        whatsapp_provider: Explicit provider override, used verbatim when set
        waha_session_name: Waha session bound to this tenant
    """

    id: UUID
    plan: str | None = None
    whatsapp_provider: str | None = None
    waha_session_name: str | None = None

    @classmethod
    def from_model(cls, tenant: Any) -> "TenantProfile":
        """Build a profile from a Tenant row (or any object with the same attributes)."""
        return cls(
            id=tenant.id,
            plan=tenant.plan,
            whatsapp_provider=tenant.whatsapp_provider,
            waha_session_name=tenant.waha_session_name,
        )


@dataclass(frozen=True)
class Recipient:
    """A broadcast recipient."""

    phone: str
    name: str | None = None

    @classmethod
    def coerce(cls, entry: "str | Mapping[str, Any] | Recipient") -> "Recipient":
        """
        Accept a bare phone string, a {phone, name} mapping or a Recipient.

        Raises:
            ValueError: If no phone can be found
        """
        if isinstance(entry, Recipient):
            return entry
        if isinstance(entry, str):
            phone, name = entry, None
        elif isinstance(entry, Mapping):
            phone, name = entry.get("phone"), entry.get("name")
        else:
            raise ValueError(f"Unsupported recipient entry: {entry!r}")

        if not phone or not isinstance(phone, str):
            raise ValueError(f"Recipient has no phone: {entry!r}")
        return cls(phone=phone, name=name)


def recipient_label(entry: Any) -> str:
    """Best-effort phone label for error reporting."""
    if isinstance(entry, Recipient):
        return entry.phone
    if isinstance(entry, str):
        return entry
    if isinstance(entry, Mapping) and entry.get("phone"):
        return str(entry["phone"])
    return repr(entry)


@dataclass
class BroadcastFailure:
    recipient: str
    error: str


@dataclass
class BroadcastResult:
    """Aggregate outcome of a broadcast."""

    total: int
    sent: int = 0
    failed: int = 0
    errors: list[BroadcastFailure] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "sent": self.sent,
            "failed": self.failed,
            "errors": [{"recipient": e.recipient, "error": e.error} for e in self.errors],
        }
