"""
Agent Gateway Payload Models

Pydantic models for the HTTP bodies exchanged with the Desktop Agent and
with callers of the send/broadcast endpoints. The agent sends camelCase keys.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AgentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tenant_id: UUID = Field(..., alias="tenantId", description="Tenant owning the agent")


class AgentRegisterRequest(AgentRequest):
    phone_number: str | None = Field(None, alias="phoneNumber", description="Phone linked to the agent")
    agent_version: str | None = Field(None, alias="agentVersion")


class MessageStatusRequest(AgentRequest):
    message_id: UUID = Field(..., alias="messageId", description="Queue entry ID")


class MessageFailedRequest(MessageStatusRequest):
    error: str | None = Field(None, description="Failure reason reported by the agent")


class PendingMessagePayload(BaseModel):
    """A queue entry handed to the Desktop Agent."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    phone: str
    name: str | None = None
    message: str
    media_url: str | None = None
    delivery_method: str
    status: str
    created_at: datetime


class TenantInfoPayload(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    business_name: str | None = None
    owner_whatsapp_number: str | None = None
    plan: str | None = None


class RecipientPayload(BaseModel):
    phone: str
    name: str | None = None


class SendMessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    phone: str = Field(..., description="Bare number or chat id")
    message: str
    media_url: str | None = Field(None, alias="mediaUrl")
    recipient_name: str | None = Field(None, alias="recipientName")


class BroadcastRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recipients: list[str | RecipientPayload] = Field(..., description="Bare phones or {phone, name}")
    message: str
    media_url: str | None = Field(None, alias="mediaUrl")

    def recipient_entries(self) -> list[Any]:
        return [r if isinstance(r, str) else r.model_dump() for r in self.recipients]
