"""
Tests for the agent gateway HTTP routes.
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import httpx
import pytest
import respx
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agent_gateway.main import app, get_delivery_config
from basecore.db import get_db
from messaging_router.config import DeliveryConfig
from messaging_router.persistence.models import DeliveryBase, PendingMessage, Tenant

TENANT_ID = UUID("12345678-1234-1234-1234-123456789012")
OTHER_TENANT_ID = UUID("87654321-4321-4321-4321-210987654321")

CONFIG = DeliveryConfig(
    desktop_agent_url="http://agent.test",
    waha_url="http://waha.test",
    waha_api_key="waha-key",
    maytapi_api_url="https://maytapi.test/api",
    broadcast_delay=0,
)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    DeliveryBase.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    DeliveryBase.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_delivery_config] = lambda: CONFIG
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def tenants(db_session):
    """A basic tenant and a premium tenant."""
    db_session.add_all(
        [
            Tenant(id=TENANT_ID, business_name="Loja A", owner_whatsapp_number="5511", plan="basic"),
            Tenant(id=OTHER_TENANT_ID, business_name="Loja B", plan="premium", waha_session_name="loja-b"),
        ]
    )
    db_session.commit()


def add_pending(db_session, tenant_id, phone, minutes):
    entry = PendingMessage(
        tenant_id=tenant_id,
        phone=phone,
        message="Olá",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes),
    )
    db_session.add(entry)
    db_session.commit()
    return entry.id


class TestHealth:
    """Tests for the service health endpoint."""

    def test_health(self, client):
        """Test health check."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "agent-gateway"}


class TestAgentConnectivity:
    """Tests for agent register/disconnect."""

    def test_register(self, client, tenants, db_session):
        """Test that registration marks the agent connected."""
        response = client.post(
            "/desktop-agent/register",
            json={"tenantId": str(TENANT_ID), "phoneNumber": "5511999999999", "agentVersion": "1.2.0"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["tenant"]["business_name"] == "Loja A"

        tenant = db_session.get(Tenant, TENANT_ID)
        assert tenant.desktop_agent_connected is True
        assert tenant.desktop_agent_phone == "5511999999999"
        assert tenant.desktop_agent_last_seen is not None

    def test_register_unknown_tenant(self, client, tenants):
        """Test that registering an unknown tenant is a 404."""
        response = client.post("/desktop-agent/register", json={"tenantId": str(uuid4())})

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Tenant not found"}

    def test_register_invalid_body(self, client):
        """Test that a malformed tenant id is rejected."""
        response = client.post("/desktop-agent/register", json={"tenantId": "not-a-uuid"})
        assert response.status_code == 422

    def test_disconnect(self, client, tenants, db_session):
        """Test that disconnect clears the connected flag."""
        client.post("/desktop-agent/register", json={"tenantId": str(TENANT_ID)})
        response = client.post("/desktop-agent/disconnect", json={"tenantId": str(TENANT_ID)})

        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.get(Tenant, TENANT_ID).desktop_agent_connected is False


class TestAgentQueue:
    """Tests for the agent's pull queue."""

    def test_process_message_oldest_first(self, client, tenants, db_session):
        """Test that pending entries come back oldest first, scoped to the tenant."""
        add_pending(db_session, TENANT_ID, "second", minutes=2)
        add_pending(db_session, TENANT_ID, "first", minutes=1)
        add_pending(db_session, OTHER_TENANT_ID, "theirs", minutes=0)

        response = client.post("/desktop-agent/process-message", json={"tenantId": str(TENANT_ID)})

        assert response.status_code == 200
        assert [m["phone"] for m in response.json()["messages"]] == ["first", "second"]

    def test_process_message_page_size(self, client, tenants, db_session):
        """Test that at most one page of entries is returned."""
        for i in range(12):
            add_pending(db_session, TENANT_ID, f"p{i}", minutes=i)

        response = client.post("/desktop-agent/process-message", json={"tenantId": str(TENANT_ID)})

        assert len(response.json()["messages"]) == 10

    def test_message_sent(self, client, tenants, db_session):
        """Test that the agent can mark its entry as sent."""
        message_id = add_pending(db_session, TENANT_ID, "a", minutes=0)

        response = client.post(
            "/desktop-agent/message-sent",
            json={"tenantId": str(TENANT_ID), "messageId": str(message_id)},
        )

        assert response.status_code == 200
        db_session.expire_all()
        entry = db_session.get(PendingMessage, message_id)
        assert entry.status == "sent"
        assert entry.sent_at is not None

    def test_message_failed(self, client, tenants, db_session):
        """Test that the agent can mark its entry as failed with a reason."""
        message_id = add_pending(db_session, TENANT_ID, "a", minutes=0)

        response = client.post(
            "/desktop-agent/message-failed",
            json={"tenantId": str(TENANT_ID), "messageId": str(message_id), "error": "not on WhatsApp"},
        )

        assert response.status_code == 200
        db_session.expire_all()
        entry = db_session.get(PendingMessage, message_id)
        assert entry.status == "failed"
        assert entry.error_message == "not on WhatsApp"

    def test_message_sent_wrong_tenant(self, client, tenants, db_session):
        """Test that another tenant's agent cannot update the entry."""
        message_id = add_pending(db_session, TENANT_ID, "a", minutes=0)

        response = client.post(
            "/desktop-agent/message-sent",
            json={"tenantId": str(OTHER_TENANT_ID), "messageId": str(message_id)},
        )

        assert response.status_code == 404
        db_session.expire_all()
        assert db_session.get(PendingMessage, message_id).status == "pending"

    def test_agent_get_tenant(self, client, tenants):
        """Test tenant info lookup."""
        response = client.post("/agent-get-tenant", json={"tenantId": str(TENANT_ID)})

        assert response.status_code == 200
        assert response.json()["tenant"] == {
            "id": str(TENANT_ID),
            "business_name": "Loja A",
            "owner_whatsapp_number": "5511",
            "plan": "basic",
        }

    def test_agent_get_unknown_tenant(self, client, tenants):
        """Test tenant info for an unknown tenant."""
        response = client.post("/agent-get-tenant", json={"tenantId": str(uuid4())})
        assert response.status_code == 404


class TestTenantDelivery:
    """Tests for the tenant-facing delivery routes."""

    def test_send_queues_for_basic_tenant(self, client, tenants, db_session):
        """Test that a basic tenant's message is queued."""
        response = client.post(
            f"/tenants/{TENANT_ID}/messages",
            json={"phone": "5511999999999", "message": "Olá", "recipientName": "Ana"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["provider"] == "desktop-agent"
        assert body["status"] == "queued"

        entry = db_session.query(PendingMessage).one()
        assert str(entry.id) == body["messageId"]
        assert entry.name == "Ana"

    def test_send_unknown_tenant(self, client, tenants):
        """Test sending for a tenant that does not exist."""
        response = client.post(f"/tenants/{uuid4()}/messages", json={"phone": "5511", "message": "Olá"})
        assert response.status_code == 404

    def test_send_provider_error_is_502(self, client, tenants):
        """Test that a provider failure without fallback maps to 502."""
        with respx.mock:
            respx.post("http://waha.test/api/sendText").mock(
                return_value=httpx.Response(500, json={"message": "engine crashed"})
            )
            response = client.post(
                f"/tenants/{OTHER_TENANT_ID}/messages",
                json={"phone": "5511", "message": "Olá"},
            )

        assert response.status_code == 502
        assert response.json() == {"success": False, "error": "Waha send failed: engine crashed"}

    def test_send_unknown_provider_is_400(self, client, db_session):
        """Test that an unknown provider override maps to 400."""
        db_session.add(Tenant(id=TENANT_ID, plan="basic", whatsapp_provider="twilio"))
        db_session.commit()

        response = client.post(f"/tenants/{TENANT_ID}/messages", json={"phone": "5511", "message": "Olá"})

        assert response.status_code == 400
        assert response.json()["error"] == "Unknown provider: twilio"

    def test_broadcast(self, client, tenants, db_session):
        """Test a broadcast queued for a basic tenant."""
        response = client.post(
            f"/tenants/{TENANT_ID}/broadcasts",
            json={"recipients": ["5511", {"phone": "5522", "name": "Bia"}], "message": "Promo"},
        )

        assert response.status_code == 200
        body = response.json()
        assert (body["total"], body["sent"], body["failed"]) == (2, 2, 0)
        assert db_session.query(PendingMessage).count() == 2

    def test_provider_status(self, client, tenants):
        """Test provider health for a premium tenant."""
        with respx.mock:
            respx.get("http://waha.test/api/sessions/loja-b").mock(
                return_value=httpx.Response(200, json={"status": "WORKING"})
            )
            response = client.get(f"/tenants/{OTHER_TENANT_ID}/provider-status")

        assert response.status_code == 200
        assert response.json()["status"] == "WORKING"
        assert response.json()["provider"] == "waha"
