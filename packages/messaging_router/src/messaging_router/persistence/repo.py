"""
Delivery Repository

Repository pattern for the tenant store and the pending-work queue.
Callers own the transaction (commit/rollback).
"""

from uuid import UUID

from sqlalchemy.orm import Session

from messaging_router.persistence.models import (
    DeliveryMethod,
    PendingMessage,
    PendingStatus,
    Tenant,
    utcnow,
)


class DeliveryRepository:
    """Repository for tenant and queue database operations."""

    def __init__(self, db: Session):
        self.db = db

    # =========================================================================
    # Tenants
    # =========================================================================

    def get_tenant(self, tenant_id: UUID) -> Tenant | None:
        """Get tenant by ID."""
        return self.db.query(Tenant).filter(Tenant.id == tenant_id).first()

    def mark_agent_connected(self, tenant_id: UUID, phone_number: str | None) -> Tenant | None:
        """Record a Desktop Agent registration. Returns None for an unknown tenant."""
        tenant = self.get_tenant(tenant_id)
        if tenant is None:
            return None

        now = utcnow()
        tenant.desktop_agent_connected = True
        tenant.desktop_agent_phone = phone_number
        tenant.desktop_agent_last_seen = now
        tenant.updated_at = now
        return tenant

    def mark_agent_disconnected(self, tenant_id: UUID) -> Tenant | None:
        """Clear the Desktop Agent connected flag."""
        tenant = self.get_tenant(tenant_id)
        if tenant is None:
            return None

        tenant.desktop_agent_connected = False
        tenant.updated_at = utcnow()
        return tenant

    # =========================================================================
    # Pending-work queue
    # =========================================================================

    def enqueue_message(
        self,
        tenant_id: UUID,
        phone: str,
        message: str,
        media_url: str | None = None,
        name: str | None = None,
        delivery_method: DeliveryMethod = DeliveryMethod.DESKTOP,
    ) -> PendingMessage:
        """Create a pending queue entry. Flushes so the ID is available."""
        pending = PendingMessage(
            tenant_id=tenant_id,
            phone=phone,
            name=name,
            message=message,
            media_url=media_url,
            delivery_method=delivery_method.value,
            status=PendingStatus.PENDING.value,
            created_at=utcnow(),
        )
        self.db.add(pending)
        self.db.flush()
        return pending

    def get_message(self, message_id: UUID, tenant_id: UUID) -> PendingMessage | None:
        """Get a queue entry, scoped to its tenant."""
        return (
            self.db.query(PendingMessage)
            .filter(
                PendingMessage.id == message_id,
                PendingMessage.tenant_id == tenant_id,
            )
            .first()
        )

    def list_pending(self, tenant_id: UUID, limit: int = 10) -> list[PendingMessage]:
        """List pending entries for a tenant, oldest first."""
        return (
            self.db.query(PendingMessage)
            .filter(
                PendingMessage.tenant_id == tenant_id,
                PendingMessage.status == PendingStatus.PENDING.value,
            )
            .order_by(PendingMessage.created_at.asc())
            .limit(limit)
            .all()
        )

    def mark_message_status(
        self,
        message_id: UUID,
        tenant_id: UUID,
        status: PendingStatus,
        error_message: str | None = None,
    ) -> bool:
        """
        Update a queue entry's status.

        Scoped by both message ID and tenant ID so one tenant's agent cannot
        touch another tenant's entries.

        Returns:
            True if an entry matched
        """
        pending = self.get_message(message_id, tenant_id)
        if pending is None:
            return False

        pending.status = status.value
        if status == PendingStatus.SENT:
            pending.sent_at = utcnow()
        if error_message:
            pending.error_message = error_message
        return True
