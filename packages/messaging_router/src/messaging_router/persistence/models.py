"""
Messaging Router Database Models

Tables:
- tenants: Platform tenants (read here; connectivity flags written by the agent gateway)
- broadcast_recipients: Pending-work queue drained by the Desktop Agent
"""

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import declarative_base

DeliveryBase = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PendingStatus(str, Enum):
    """Lifecycle of a queued message."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class DeliveryMethod(str, Enum):
    DESKTOP = "desktop"


class PlanTier(str, Enum):
    """Plan tiers with a default provider."""

    BASIC = "basic"
    PREMIUM = "premium"


class Tenant(DeliveryBase):
    """
    A platform tenant.

    Owned by the platform. The delivery core only reads it; the agent gateway
    updates the desktop_agent_* connectivity flags.
    """

    __tablename__ = "tenants"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    business_name = Column(String(255), nullable=True)
    owner_whatsapp_number = Column(String(30), nullable=True)
    plan = Column(String(30), nullable=True)
    whatsapp_provider = Column(String(30), nullable=True)  # Explicit override
    waha_session_name = Column(String(100), nullable=True)

    desktop_agent_connected = Column(Boolean, nullable=False, default=False)
    desktop_agent_phone = Column(String(30), nullable=True)
    desktop_agent_last_seen = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class PendingMessage(DeliveryBase):
    """
    A message queued for the Desktop Agent.

    Created once with status=pending by the delivery engine; moved to sent or
    failed only by the agent, scoped by (id, tenant_id). Never deleted here.
    """

    __tablename__ = "broadcast_recipients"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id"), nullable=False, index=True)
    phone = Column(String(50), nullable=False)  # Addressed form (...@c.us)
    name = Column(String(255), nullable=True)
    message = Column(Text, nullable=False)
    media_url = Column(Text, nullable=True)
    delivery_method = Column(String(20), nullable=False, default=DeliveryMethod.DESKTOP.value)
    status = Column(String(20), nullable=False, default=PendingStatus.PENDING.value)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    sent_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_broadcast_recipients_tenant_status_created", "tenant_id", "status", "created_at"),
    )
