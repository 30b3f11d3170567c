"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, Generator, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from commission_engine.api.main import create_app
from commission_engine.infrastructure.database.models import Base, DealTypeRecord, PaymentRecord
from commission_engine.infrastructure.database.session import get_db


# Test database (in-memory, shared across the session's connections)
TEST_DATABASE_URL = "sqlite://"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEAL_TYPES = [
    # name, display name, conversion rate, is_backend
    ("google_ads", "Google Ads", 3.0, False),
    ("referral_network_6_months", "Referral Network (6 months)", 1.0, False),
    ("referral_network_3_months", "Referral Network (3 months)", 2.0, False),
    ("referral_network_4_months", "Referral Network (4 months)", 2.0, False),
    ("service_upgrade", "Service Upgrade", 0.0, True),
]


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def deal_types(db: Session) -> Dict[str, DealTypeRecord]:
    """Seed the standard deal types"""
    records = {}
    for name, display_name, conversion_rate, is_backend in DEAL_TYPES:
        record = DealTypeRecord(
            name=name,
            display_name=display_name,
            conversion_rate=conversion_rate,
            is_backend=is_backend,
        )
        db.add(record)
        records[name] = record
    db.commit()
    return records


@pytest.fixture
def add_payment(db: Session, deal_types: Dict[str, DealTypeRecord]) -> Callable[..., PaymentRecord]:
    """Factory inserting a committed payment; defaults to a completed 6-month referral"""

    def _add(
        payment_date: date,
        amount: str = "5000",
        deal_type: Optional[str] = "referral_network_6_months",
        closer: Optional[str] = None,
        setter: Optional[str] = None,
        csm: Optional[str] = None,
        status: str = "completed",
        payment_type: str = "New Deal",
        parent: Optional[PaymentRecord] = None,
    ) -> PaymentRecord:
        record = PaymentRecord(
            amount=Decimal(amount),
            payment_date=payment_date,
            payment_type=payment_type,
            deal_type_id=deal_types[deal_type].id if deal_type else None,
            closer_assigned=closer,
            setter_assigned=setter,
            assigned_csm=csm,
            service_agreement_status=status,
            parent_payment_id=parent.id if parent else None,
        )
        db.add(record)
        db.commit()
        return record

    return _add
