from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from price_notifier.exceptions import SubscriptionValidationError
from price_notifier.models import ProductSubscription
from price_notifier.schemas.subscription import SubscriptionCreate
from price_notifier.services.subscription_service import SubscriptionService, validate_subscription


def request(**overrides):
    data = {
        "product_id": "p1",
        "product_name": "Widget",
        "email": "alice@example.com",
    }
    data.update(overrides)
    return SubscriptionCreate(**data)


def test_request_defaults_notify_on_decrease_only():
    data = request()
    assert data.notify_on_decrease is True
    assert data.notify_on_increase is False


@pytest.mark.parametrize("product_id,email", [
    ("p1", ""),
    ("p1", "   "),
    ("p1", "alice.example.com"),
    ("p1", None),
    ("", "alice@example.com"),
    ("  ", "alice@example.com"),
])
def test_validate_subscription_rejects(product_id, email):
    with pytest.raises(SubscriptionValidationError):
        validate_subscription(product_id, email)


def test_validate_subscription_accepts():
    validate_subscription("p1", "alice@example.com")


def test_subscribe_stores_preferences(db):
    service = SubscriptionService(db)
    subscribed_at = datetime(2026, 3, 1, tzinfo=timezone.utc)
    
    assert service.subscribe(request(notify_on_increase=True), subscribed_at=subscribed_at) is True
    
    stored = db.query(ProductSubscription).one()
    assert stored.product_id == "p1"
    assert stored.email == "alice@example.com"
    assert stored.product_name == "Widget"
    assert stored.notify_on_increase is True
    assert stored.notify_on_decrease is True


def test_resubscribe_overwrites_preferences(db):
    service = SubscriptionService(db)
    service.subscribe(request())
    service.subscribe(request(notify_on_increase=True, notify_on_decrease=False))
    
    stored = db.query(ProductSubscription).one()
    assert stored.notify_on_increase is True
    assert stored.notify_on_decrease is False


def test_subscribe_invalid_request_returns_false_without_storing(db):
    service = SubscriptionService(db)
    
    assert service.subscribe(request(email="not-an-email")) is False
    assert service.subscribe(request(product_id="")) is False
    assert db.query(ProductSubscription).count() == 0


def test_subscribe_store_failure_returns_false(db, monkeypatch):
    service = SubscriptionService(db)
    
    def fail(subscription):
        raise OperationalError("INSERT", {}, Exception("database is locked"))
    
    monkeypatch.setattr(service.repository, "upsert", fail)
    assert service.subscribe(request()) is False


def test_unsubscribe_removes_subscription(db):
    service = SubscriptionService(db)
    service.subscribe(request())
    service.subscribe(request(email="bob@example.com"))
    
    assert service.unsubscribe("alice@example.com", "p1") is True
    assert [s.email for s in service.list_subscribers("p1")] == ["bob@example.com"]


def test_unsubscribe_missing_subscription_succeeds(db):
    assert SubscriptionService(db).unsubscribe("ghost@example.com", "p404") is True


def test_unsubscribe_trims_whitespace(db):
    service = SubscriptionService(db)
    service.subscribe(request())
    
    assert service.unsubscribe(" alice@example.com ", " p1 ") is True
    assert service.list_subscribers("p1") == []


def test_unsubscribe_then_resubscribe(db):
    service = SubscriptionService(db)
    service.subscribe(request())
    service.unsubscribe("alice@example.com", "p1")
    
    assert service.subscribe(request(notify_on_increase=True)) is True
    assert service.list_subscribers("p1")[0].notify_on_increase is True


def test_list_subscribers_is_unfiltered(db):
    service = SubscriptionService(db)
    service.subscribe(request(email="down@example.com"))
    service.subscribe(request(email="up@example.com", notify_on_increase=True, notify_on_decrease=False))
    service.subscribe(request(email="none@example.com", notify_on_decrease=False))
    service.subscribe(request(product_id="p2", email="other@example.com"))
    
    emails = [s.email for s in service.list_subscribers("p1")]
    assert emails == ["down@example.com", "none@example.com", "up@example.com"]
