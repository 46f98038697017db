import os

# Settings are read on first use, so the environment has to be in place before
# anything from booking_api is imported.
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-pytest-only-0123456789")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from booking_api.auth.schemas import UserCreate
from booking_api.auth.service import UserService
from booking_api.auth.utils import PasswordHasher, TokenService
from booking_api.config import get_settings
from booking_api.database import Base, get_db
from booking_api.main import app
from booking_api.models import Role
from booking_api.payments.gateway import FakePaymentGateway
from booking_api.payments.router import get_payment_gateway

TEST_PASSWORD = "secret1"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def token_service(settings):
    return TokenService.from_settings(settings)


@pytest.fixture
def user_service(db, token_service, settings):
    return UserService(
        db,
        PasswordHasher(rounds=settings.BCRYPT_ROUNDS),
        token_service,
        password_min_length=settings.PASSWORD_MIN_LENGTH,
    )


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


@pytest.fixture
def client(engine, payment_gateway):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: payment_gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(user_service):
    def _make_user(email: str, password: str = TEST_PASSWORD, role: Role = Role.USER, name: str = None):
        return user_service.create_user(UserCreate(email=email, password=password, name=name), role=role)

    return _make_user


@pytest.fixture
def test_user(make_user):
    return make_user("owner@example.com", name="Owner")


@pytest.fixture
def other_user(make_user):
    return make_user("other@example.com", name="Other")


@pytest.fixture
def admin_user(make_user):
    return make_user("admin@example.com", role=Role.ADMIN, name="Admin")


def _headers(token_service, user):
    return {"Authorization": f"Bearer {token_service.issue(user.id, user.role)}"}


@pytest.fixture
def auth_headers(token_service, test_user):
    return _headers(token_service, test_user)


@pytest.fixture
def other_headers(token_service, other_user):
    return _headers(token_service, other_user)


@pytest.fixture
def admin_headers(token_service, admin_user):
    return _headers(token_service, admin_user)


@pytest.fixture
def booking_payload():
    return {"name": "A", "email": "a@example.com", "calendarDate": "2025-01-01"}


@pytest.fixture
def create_booking(client, booking_payload):
    def _create_booking(headers, **overrides):
        payload = {**booking_payload, **overrides}
        response = client.post("/bookings", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create_booking
