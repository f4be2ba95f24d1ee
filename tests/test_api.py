import pytest
from fastapi.testclient import TestClient

from price_notifier.main import create_app
from price_notifier.models import PriceHistory


@pytest.fixture
def client(settings, session_factory, publisher):
    app = create_app(settings, session_factory=session_factory, publisher=publisher)
    return TestClient(app)


def test_health(client):
    response = client.get("/health")
    
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["database"] == "healthy"


def test_subscribe_defaults(client):
    response = client.post("/subscriptions", json={
        "productId": "p1",
        "productName": "Widget",
        "email": "alice@example.com"
    })
    
    assert response.status_code == 200
    assert response.json()["email"] == "alice@example.com"
    assert response.json()["productName"] == "Widget"
    
    listed = client.get("/subscriptions/p1").json()
    assert listed["productId"] == "p1"
    assert listed["total"] == 1
    assert listed["subscriptions"][0]["notifyOnDecrease"] is True
    assert listed["subscriptions"][0]["notifyOnIncrease"] is False


def test_subscribe_reads_camel_case_preferences(client):
    response = client.post("/subscriptions", json={
        "productId": "p1",
        "email": "alice@example.com",
        "notifyOnIncrease": True,
        "notifyOnDecrease": False
    })
    
    assert response.status_code == 200
    [subscription] = client.get("/subscriptions/p1").json()["subscriptions"]
    assert subscription["productId"] == "p1"
    assert subscription["notifyOnIncrease"] is True
    assert subscription["notifyOnDecrease"] is False
    assert "subscribedAt" in subscription


@pytest.mark.parametrize("body", [
    {"productId": "p1", "email": "alice.example.com"},
    {"productId": "p1", "email": ""},
    {"productId": "", "email": "alice@example.com"},
])
def test_subscribe_rejects_invalid_requests(client, body):
    response = client.post("/subscriptions", json=body)
    
    assert response.status_code == 400
    assert client.get("/subscriptions/p1").json()["total"] == 0


def test_unsubscribe(client):
    client.post("/subscriptions", json={"productId": "p1", "email": "alice@example.com"})
    
    response = client.delete("/subscriptions", params={"email": "alice@example.com", "productId": "p1"})
    
    assert response.status_code == 200
    assert client.get("/subscriptions/p1").json()["total"] == 0


def test_unsubscribe_unknown_pair_succeeds(client):
    response = client.delete("/subscriptions", params={"email": "ghost@example.com", "productId": "p404"})
    assert response.status_code == 200


def test_unsubscribe_requires_both_parameters(client):
    assert client.delete("/subscriptions", params={"email": "alice@example.com"}).status_code == 400
    assert client.delete("/subscriptions", params={"productId": "p1"}).status_code == 400


def test_price_update_publishes_change_event(client, publisher, widget):
    response = client.put(f"/products/{widget.id}", json={"price": 700.0, "updated_by": "alice"})
    
    assert response.status_code == 200
    assert response.json()["price"] == 700.0
    [event] = publisher.changes
    assert event.product_id == str(widget.id)
    assert event.product_name == "Widget"
    assert event.old_price == 1000.0
    assert event.new_price == 700.0
    assert event.updated_by == "alice"


def test_rename_without_price_change_publishes_nothing(client, publisher, widget):
    response = client.put(f"/products/{widget.id}", json={"name": "Widget Pro"})
    
    assert response.status_code == 200
    assert response.json()["name"] == "Widget Pro"
    assert publisher.changes == []


def test_price_update_fails_loudly_when_publish_fails(settings, session_factory, make_publisher, widget):
    client = TestClient(create_app(settings, session_factory=session_factory, publisher=make_publisher(fail_changes=True)))
    
    response = client.put(f"/products/{widget.id}", json={"price": 700.0})
    
    assert response.status_code == 503


def test_update_missing_product(client):
    assert client.put("/products/999", json={"price": 1.0}).status_code == 404
    assert client.get("/products/999").status_code == 404


def test_price_history(client, db, widget):
    for sequence_key, new_price in (("00000000000000000001-a", 900.0), ("00000000000000000002-b", 800.0)):
        db.add(PriceHistory(
            product_id=str(widget.id),
            sequence_key=sequence_key,
            idempotency_key=sequence_key,
            product_name="Widget",
            old_price=1000.0,
            new_price=new_price,
            change_amount=new_price - 1000.0,
            change_percentage=(new_price - 1000.0) / 10,
            updated_by="seller",
            change_time=widget.created_at
        ))
    db.commit()
    
    response = client.get(f"/products/{widget.id}/price-history", params={"limit": 10})
    
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert [r["new_price"] for r in body["records"]] == [800.0, 900.0]
