"""
Pytest fixtures for messaging router tests.
"""

from datetime import datetime, timezone
from uuid import UUID

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from messaging_router.config import DeliveryConfig
from messaging_router.contracts.types import TenantProfile
from messaging_router.persistence.models import DeliveryBase, Tenant
from messaging_router.persistence.repo import DeliveryRepository


@pytest.fixture
def sample_tenant_id():
    """Sample tenant UUID."""
    return UUID("12345678-1234-1234-1234-123456789012")


@pytest.fixture
def other_tenant_id():
    """A second tenant, for scoping tests."""
    return UUID("87654321-4321-4321-4321-210987654321")


@pytest.fixture
def sample_phone():
    """Sample bare phone number."""
    return "5511999999999"


@pytest.fixture
def delivery_config():
    """Configuration with every provider fully configured and no broadcast pause."""
    return DeliveryConfig(
        desktop_agent_url="http://agent.test",
        waha_url="http://waha.test",
        waha_api_key="waha-key",
        maytapi_product_id="prod-1",
        maytapi_phone_id="phone-1",
        maytapi_api_key="maytapi-key",
        maytapi_api_url="https://maytapi.test/api",
        broadcast_delay=0,
    )


@pytest.fixture
def no_legacy_config(delivery_config):
    """Configuration without Maytapi credentials (no fallback)."""
    from dataclasses import replace
    return replace(
        delivery_config,
        maytapi_product_id=None,
        maytapi_phone_id=None,
        maytapi_api_key=None,
    )


@pytest.fixture
def db_session():
    """In-memory SQLite session with the delivery tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    DeliveryBase.metadata.create_all(engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        DeliveryBase.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def repo(db_session):
    return DeliveryRepository(db_session)


@pytest.fixture
def make_tenant(db_session):
    """Factory that persists a tenant row."""

    def _make(tenant_id: UUID, plan: str | None = "basic", **kwargs) -> Tenant:
        tenant = Tenant(
            id=tenant_id,
            business_name=kwargs.pop("business_name", "Loja Teste"),
            plan=plan,
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            updated_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            **kwargs,
        )
        db_session.add(tenant)
        db_session.commit()
        return tenant

    return _make


@pytest.fixture
def basic_tenant(make_tenant, sample_tenant_id):
    """Persisted basic-plan tenant and its profile."""
    return TenantProfile.from_model(make_tenant(sample_tenant_id, plan="basic"))


@pytest.fixture
def premium_profile(sample_tenant_id):
    """Premium tenant with a Waha session (not persisted)."""
    return TenantProfile(id=sample_tenant_id, plan="premium", waha_session_name="loja-session")
