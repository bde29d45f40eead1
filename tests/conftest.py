import os

# must be set before the app modules read their configuration
os.environ["LEASING_DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")

import uuid
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shared.core.auth import validate_current_token
from shared.core.database import Base, get_leasing_db
from shared.core.schemas import UserToken
from leasing_service.app.enum.leasing_enum import LeaseStatus, PaymentCycle, TenantStatus
from leasing_service.app.main import app
from leasing_service.app.models.leasing.lease_agreements import LeaseAgreement
from leasing_service.app.models.leasing.tenants import Tenant
from leasing_service.app.models.leasing.units import Unit


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def org_id():
    return uuid.uuid4()


@pytest.fixture
def make_unit(db, org_id):
    def _make(name="Room 01", daily_rate=Decimal("150000"), monthly_rate=Decimal("3000000"),
              annual_rate=Decimal("33000000"), is_unavailable=False, org=None):
        unit = Unit(
            id=uuid.uuid4(),
            org_id=org or org_id,
            name=name,
            property_name="Kost Melati",
            daily_rate=daily_rate,
            monthly_rate=monthly_rate,
            annual_rate=annual_rate,
            is_unavailable=is_unavailable,
        )
        db.add(unit)
        db.commit()
        return unit
    return _make


@pytest.fixture
def make_tenant(db, org_id):
    def _make(full_name="Budi Santoso", org=None):
        tenant = Tenant(
            id=uuid.uuid4(),
            org_id=org or org_id,
            full_name=full_name,
            email="budi@example.com",
            status=TenantStatus.new,
        )
        db.add(tenant)
        db.commit()
        return tenant
    return _make


@pytest.fixture
def unit(make_unit):
    return make_unit()


@pytest.fixture
def tenant(make_tenant):
    return make_tenant()


@pytest.fixture
def lease_factory():
    """Transient leases for engine tests that need no database."""
    unit_id = uuid.uuid4()

    def _make(start_date=date(2025, 1, 1), end_date=date(2025, 1, 31), **overrides):
        values = dict(
            id=uuid.uuid4(),
            org_id=uuid.uuid4(),
            tenant_id=uuid.uuid4(),
            unit_id=unit_id,
            start_date=start_date,
            end_date=end_date,
            payment_cycle=PaymentCycle.monthly,
            rent_amount=Decimal("3000000"),
            status=LeaseStatus.draft,
            is_auto_renew=False,
            grace_period_days=None,
            auto_renewal_notice_days=None,
            deposit_amount=None,
            deposit_status=None,
            renewed_from_id=None,
            renewed_to_id=None,
            paid_at=None,
            payment_method=None,
        )
        values.update(overrides)
        return LeaseAgreement(**values)
    return _make


@pytest.fixture
def client(engine, org_id):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_leasing_db] = override_get_db
    app.dependency_overrides[validate_current_token] = lambda: UserToken(
        user_id="tester", org_id=org_id, name="Tester")

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
