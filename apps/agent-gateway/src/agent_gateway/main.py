"""
Agent Gateway Service

FastAPI app serving the Desktop Agent and tenant-facing delivery endpoints.

Responsibilities:
- Track Desktop Agent connectivity per tenant
- Hand pending queue entries to the agent and record their outcome
- Send single messages and broadcasts through the tenant's provider
- Report the tenant's provider health
"""

import logging
from typing import Any
from uuid import UUID

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from basecore.db import get_db
from basecore.logging import setup_logging
from basecore.settings import get_settings

from messaging_router.config import DeliveryConfig
from messaging_router.contracts.payloads import (
    AgentRegisterRequest,
    AgentRequest,
    BroadcastRequest,
    MessageFailedRequest,
    MessageStatusRequest,
    PendingMessagePayload,
    SendMessageRequest,
    TenantInfoPayload,
)
from messaging_router.contracts.types import TenantProfile
from messaging_router.persistence.models import PendingStatus
from messaging_router.persistence.repo import DeliveryRepository
from messaging_router.providers.base import (
    DeliveryError,
    PersistenceError,
    ProviderError,
)
from messaging_router.service.delivery_engine import DeliveryEngine

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Agent Gateway",
    description="Desktop Agent queue and tenant message delivery",
    version="1.0.0",
)


def get_delivery_config() -> DeliveryConfig:
    """Provider configuration dependency."""
    return DeliveryConfig.from_settings()


def error_response(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


def status_for_error(error: DeliveryError) -> int:
    """Map a delivery error to an HTTP status code."""
    if isinstance(error, ProviderError):
        return 502
    if isinstance(error, PersistenceError) and error.code == "UNKNOWN_TENANT":
        return 404
    return 400


@app.exception_handler(DeliveryError)
async def delivery_error_handler(request: Request, exc: DeliveryError) -> JSONResponse:
    status_code = status_for_error(exc)
    logger.warning(
        f"Delivery error on {request.url.path}: {exc}",
        extra={"code": exc.code, "status_code": status_code},
    )
    return error_response(status_code, str(exc))


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "service": "agent-gateway"}


# =============================================================================
# Desktop Agent
# =============================================================================


@app.post("/desktop-agent/register")
async def register_agent(body: AgentRegisterRequest, db: Session = Depends(get_db)):
    """Mark the tenant's Desktop Agent as connected."""
    logger.info(
        "Desktop Agent registration",
        extra={"tenant_id": str(body.tenant_id), "agent_version": body.agent_version},
    )

    repo = DeliveryRepository(db)
    tenant = repo.mark_agent_connected(body.tenant_id, body.phone_number)
    if tenant is None:
        return error_response(404, "Tenant not found")

    db.commit()

    return {
        "success": True,
        "message": "Desktop agent registered successfully",
        "tenant": TenantInfoPayload.model_validate(tenant).model_dump(mode="json"),
    }


@app.post("/desktop-agent/disconnect")
async def disconnect_agent(body: AgentRequest, db: Session = Depends(get_db)):
    """Clear the tenant's Desktop Agent connected flag."""
    repo = DeliveryRepository(db)
    if repo.mark_agent_disconnected(body.tenant_id) is None:
        return error_response(404, "Tenant not found")

    db.commit()
    logger.info("Desktop Agent disconnected", extra={"tenant_id": str(body.tenant_id)})

    return {"success": True, "message": "Desktop agent disconnected"}


@app.post("/desktop-agent/process-message")
async def process_messages(body: AgentRequest, db: Session = Depends(get_db)):
    """Return the oldest pending queue entries for the tenant."""
    repo = DeliveryRepository(db)
    entries = repo.list_pending(body.tenant_id, limit=get_settings().AGENT_QUEUE_PAGE_SIZE)

    return {
        "success": True,
        "messages": [PendingMessagePayload.model_validate(e).model_dump(mode="json") for e in entries],
    }


def update_message_status(
    db: Session,
    body: MessageStatusRequest,
    status: PendingStatus,
    error_message: str | None = None,
) -> bool:
    repo = DeliveryRepository(db)
    matched = repo.mark_message_status(body.message_id, body.tenant_id, status, error_message)
    if matched:
        db.commit()
        logger.info(
            f"Queue entry marked {status.value}",
            extra={"tenant_id": str(body.tenant_id), "message_id": str(body.message_id)},
        )
    return matched


@app.post("/desktop-agent/message-sent")
async def message_sent(body: MessageStatusRequest, db: Session = Depends(get_db)):
    """Record that the agent delivered a queue entry."""
    if not update_message_status(db, body, PendingStatus.SENT):
        return error_response(404, "Message not found")
    return {"success": True, "message": "Message marked as sent"}


@app.post("/desktop-agent/message-failed")
async def message_failed(body: MessageFailedRequest, db: Session = Depends(get_db)):
    """Record that the agent could not deliver a queue entry."""
    if not update_message_status(db, body, PendingStatus.FAILED, body.error):
        return error_response(404, "Message not found")
    return {"success": True, "message": "Message marked as failed"}


@app.post("/agent-get-tenant")
async def agent_get_tenant(body: AgentRequest, db: Session = Depends(get_db)):
    """Tenant info for agent validation."""
    tenant = DeliveryRepository(db).get_tenant(body.tenant_id)
    if tenant is None:
        return error_response(404, "Tenant not found")

    return {
        "success": True,
        "tenant": TenantInfoPayload.model_validate(tenant).model_dump(mode="json"),
    }


# =============================================================================
# Tenant delivery
# =============================================================================


def build_engine(db: Session, tenant_id: UUID, config: DeliveryConfig) -> DeliveryEngine | None:
    repo = DeliveryRepository(db)
    tenant = repo.get_tenant(tenant_id)
    if tenant is None:
        return None
    return DeliveryEngine(TenantProfile.from_model(tenant), config, repo)


@app.post("/tenants/{tenant_id}/messages")
async def send_message(
    tenant_id: UUID,
    body: SendMessageRequest,
    db: Session = Depends(get_db),
    config: DeliveryConfig = Depends(get_delivery_config),
):
    """Send one message through the tenant's provider."""
    engine = build_engine(db, tenant_id, config)
    if engine is None:
        return error_response(404, "Tenant not found")

    try:
        result = await engine.send_message(
            body.phone,
            body.message,
            body.media_url,
            {"recipient_name": body.recipient_name},
        )
    finally:
        await engine.close()

    return {"success": True, **result.to_dict()}


@app.post("/tenants/{tenant_id}/broadcasts")
async def send_broadcast(
    tenant_id: UUID,
    body: BroadcastRequest,
    db: Session = Depends(get_db),
    config: DeliveryConfig = Depends(get_delivery_config),
):
    """Send the same message to several recipients."""
    engine = build_engine(db, tenant_id, config)
    if engine is None:
        return error_response(404, "Tenant not found")

    try:
        result = await engine.send_broadcast(body.recipient_entries(), body.message, body.media_url)
    finally:
        await engine.close()

    response: dict[str, Any] = {"success": True}
    response.update(result.to_dict())
    return response


@app.get("/tenants/{tenant_id}/provider-status")
async def provider_status(
    tenant_id: UUID,
    db: Session = Depends(get_db),
    config: DeliveryConfig = Depends(get_delivery_config),
):
    """Health of the tenant's selected provider."""
    engine = build_engine(db, tenant_id, config)
    if engine is None:
        return error_response(404, "Tenant not found")

    try:
        health = await engine.check_status()
    finally:
        await engine.close()

    return health.to_dict()
