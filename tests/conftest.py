import io
import itertools
import os
import tempfile
from datetime import datetime, timedelta

# Point the application at throwaway resources before it is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="upi-events-storage-"))
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.api.dependencies import get_db
from app.core.database import Base
from app.models.event import Event, EventStatus, PricingTier
from app.models.user import User, UserRole
from app.services import auth_service


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def make_user(db_session):
    counter = itertools.count(1)

    def _make_user(name=None, email=None, role=UserRole.USER):
        n = next(counter)
        user = User(name=name or f"User {n}", email=email or f"user{n}@example.com", role=role)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def organizer(make_user):
    return make_user(name="Olivia Organizer", email="organizer@example.com")


@pytest.fixture
def attendee(make_user):
    return make_user(name="Arjun Attendee", email="attendee@example.com")


@pytest.fixture
def make_event(db_session):
    """Insert an event straight through the ORM, bypassing request validation."""
    def _make_event(organizer, prices=(100.0,), **fields):
        values = {
            "title": "Campus Fest",
            "upi_id": "fest@upi",
            "qr_code_url": "/storage/qr/fest.png",
            "event_date": datetime.utcnow() + timedelta(days=30),
            "status": EventStatus.ACTIVE,
        }
        values.update(fields)
        event = Event(organizer_id=organizer.id, **values)
        event.pricing_tiers = [
            PricingTier(name=f"Tier {i + 1}", price=price) for i, price in enumerate(prices)
        ]
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event
    return _make_event


@pytest.fixture
def event_payload():
    def _event_payload(**overrides):
        payload = {
            "title": "Campus Fest",
            "description": "Annual cultural fest",
            "upiId": "fest@upi",
            "qrCodeUrl": "/storage/qr/fest.png",
            "eventDate": (datetime.utcnow() + timedelta(days=30)).isoformat(),
            "pricingTiers": [{"name": "Standard", "price": 100}],
        }
        payload.update(overrides)
        return payload
    return _event_payload


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def login_as(client):
    def _login_as(user):
        app.dependency_overrides[auth_service.get_current_user] = lambda: user
    return _login_as


@pytest.fixture
def image_bytes():
    def _image_bytes(image_format="PNG", size=(4, 4)):
        buffer = io.BytesIO()
        Image.new("RGB", size, color=(30, 120, 200)).save(buffer, format=image_format)
        return buffer.getvalue()
    return _image_bytes
