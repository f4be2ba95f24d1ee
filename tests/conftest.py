"""
Shared fixtures: in-memory database, fake publisher and fake email dispatcher
"""
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from price_notifier.config import Settings
from price_notifier.database import create_session_factory, init_db
from price_notifier.exceptions import EmailDeliveryError, EventPublishError
from price_notifier.models import Product, ProductSubscription


class FakePublisher:
    """Records events instead of talking to RabbitMQ"""
    
    def __init__(self, fail_changes=False, fail_alerts=False):
        self.changes = []
        self.alerts = []
        self.fail_changes = fail_changes
        self.fail_alerts = fail_alerts
    
    def publish_price_changed(self, event):
        if self.fail_changes:
            raise EventPublishError("broker unavailable")
        self.changes.append(event)
    
    def publish_price_alert(self, alert):
        if self.fail_alerts:
            raise EventPublishError("broker unavailable")
        self.alerts.append(alert)


class FakeDispatcher:
    """Records sent emails; raises for configured recipients"""
    
    def __init__(self, failing=(), broken=()):
        self.sent = []
        self.failing = set(failing)
        self.broken = set(broken)
    
    def send_price_alert(self, recipient, **kwargs):
        if recipient in self.failing:
            raise EmailDeliveryError(f"mailbox unavailable: {recipient}")
        if recipient in self.broken:
            raise RuntimeError("transport crashed")
        self.sent.append((recipient, kwargs))
    
    @property
    def recipients(self):
        return [recipient for recipient, _ in self.sent]


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        EMAIL_SERVICE="console",
        PUBLISH_MAX_RETRIES=1,
        SMTP_HOST="smtp.test",
        SMTP_USER="mailer",
        SMTP_PASSWORD="secret",
        SMTP_FROM_EMAIL="alerts@shop.test",
        SMTP_FROM_NAME="Shop Alerts",
        PRODUCT_URL="https://shop.test/"
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def publisher():
    return FakePublisher()


@pytest.fixture
def dispatcher():
    return FakeDispatcher()


@pytest.fixture
def make_dispatcher():
    return FakeDispatcher


@pytest.fixture
def make_publisher():
    return FakePublisher


@pytest.fixture
def add_subscription(db):
    """Insert a subscription row directly"""
    def _add(product_id, email, notify_on_increase=False, notify_on_decrease=True, product_name="Widget"):
        subscription = ProductSubscription(
            product_id=product_id,
            email=email,
            product_name=product_name,
            notify_on_increase=notify_on_increase,
            notify_on_decrease=notify_on_decrease,
            subscribed_at=datetime.now(timezone.utc)
        )
        db.add(subscription)
        db.commit()
        return subscription
    return _add


@pytest.fixture
def widget(db):
    product = Product(name="Widget", price=1000.0)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product
