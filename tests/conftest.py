import os

# ustawione przed importem app.*, settings czyta env przy imporcie
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BACK_OFFICE_API_KEY"] = "test-back-office-key"

import uuid
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_lock_service, get_notification_service, get_rate_limiter
from app.data import models  # noqa: F401
from app.data.database import Base, get_db
from app.domain.schemas import CheckoutIn, TextOrderIn
from app.main import create_app
from app.services.cart_service import CartService
from app.services.order_service import OrderService

BACK_OFFICE_KEY = "test-back-office-key"

ADDRESS = {
    "delivery_house_type": "apartment",
    "delivery_house_number": "221",
    "delivery_street_name": "Bedford Ave",
    "delivery_apt_number": "4B",
    "delivery_city": "Brooklyn",
    "delivery_state": "NY",
    "delivery_zip_code": "11211",
    "delivery_instructions": "Ring twice",
}


class FakeLockService:
    def __init__(self):
        self.held = {}

    def new_token(self):
        return uuid.uuid4().hex

    def acquire_checkout_lock(self, user_id, token, ttl=30):
        if user_id in self.held:
            return False
        self.held[user_id] = token
        return True

    def release_checkout_lock(self, user_id, token):
        if self.held.get(user_id) == token:
            del self.held[user_id]
            return True
        return False


class RecordingNotificationService:
    def __init__(self):
        self.sent = []

    def send_order_created(self, order):
        self.sent.append(("order_created", order["order_number"]))

    def send_text_order_received(self, order):
        self.sent.append(("text_order", order["order_number"]))

    def send_order_cancelled(self, order):
        self.sent.append(("order_cancelled", order["order_number"]))


class AllowAllRateLimiter:
    def __init__(self):
        self.calls = []

    def hit(self, scope, user_id):
        self.calls.append((scope, user_id))
        return 1


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
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def lock_service():
    return FakeLockService()


@pytest.fixture
def notifications():
    return RecordingNotificationService()


@pytest.fixture
def rate_limiter():
    return AllowAllRateLimiter()


@pytest.fixture
def cart_service(db_session):
    return CartService(db_session)


@pytest.fixture
def order_service(db_session, lock_service, notifications):
    return OrderService(db_session, lock_service=lock_service, notification_service=notifications)


@pytest.fixture
def app(session_factory, lock_service, notifications, rate_limiter):
    app = create_app()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    app.dependency_overrides[get_notification_service] = lambda: notifications
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def add(cart_service, user_id, product_id, price, quantity, name=None):
    cart_service.add_item(
        user_id=user_id,
        product_id=product_id,
        product_name=name or f"Product {product_id}",
        product_price=Decimal(price),
        quantity=quantity,
    )


def checkout_payload(**overrides) -> CheckoutIn:
    data = {**ADDRESS, "payment_method": "card", "tip": Decimal("5.00")}
    data.update(overrides)
    return CheckoutIn(**data)


def text_order_payload(**overrides) -> TextOrderIn:
    data = {**ADDRESS, "phone_number": "+17185550123"}
    data.update(overrides)
    return TextOrderIn(**data)
