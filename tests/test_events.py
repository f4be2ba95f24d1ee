import json
from datetime import datetime, timezone, timedelta

import pytest

from price_notifier.exceptions import MalformedMessageError
from price_notifier.schemas.events import AlertEvent, AlertType, ChangeEvent, compute_change

T0 = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_compute_change_drop():
    assert compute_change(1000.0, 700.0) == (-300.0, -30.0)


def test_compute_change_zero_old_price_has_no_percentage():
    amount, percentage = compute_change(0.0, 50.0)
    assert amount == 50.0
    assert percentage is None


@pytest.mark.parametrize("old_price,new_price", [
    (1000.0, 700.0),
    (100.0, 119.99),
    (0.1, 0.12),
    (49.5, 12.25),
])
def test_change_event_derives_amount_and_percentage(old_price, new_price):
    event = ChangeEvent.from_prices("p1", "Widget", old_price, new_price, timestamp=T0)
    
    assert event.change_amount == pytest.approx(new_price - old_price)
    assert event.change_percentage == pytest.approx(100 * (new_price - old_price) / old_price)


def test_percentage_rounding_keeps_exact_twenty_percent():
    # 0.12 - 0.1 is 0.019999999999999997 in floating point
    event = ChangeEvent.from_prices("p1", "Widget", 0.1, 0.12, timestamp=T0)
    assert event.change_percentage == 20.0


def test_payload_derived_fields_are_recomputed():
    payload = json.dumps({
        "productId": "p1",
        "productName": "Widget",
        "oldPrice": 1000,
        "newPrice": 700,
        "changeAmount": 5,
        "changePercentage": 99,
        "updatedBy": "seller",
        "timestamp": "2026-03-01T12:00:00Z"
    })
    event = ChangeEvent.from_json(payload)
    assert event.change_amount == -300.0
    assert event.change_percentage == -30.0


def test_unknown_fields_are_ignored():
    payload = json.dumps({
        "productId": "p1",
        "oldPrice": 10,
        "newPrice": 12,
        "timestamp": "2026-03-01T12:00:00Z",
        "schemaVersion": 7,
        "source": "catalog"
    }).encode("utf-8")
    event = ChangeEvent.from_json(payload)
    assert event.product_id == "p1"
    assert event.updated_by == "seller"


def test_wire_format_uses_camel_case():
    event = ChangeEvent.from_prices("p1", "Widget", 1000.0, 700.0, updated_by="alice", timestamp=T0)
    data = json.loads(event.to_json())
    
    assert data["productId"] == "p1"
    assert data["changePercentage"] == -30.0
    assert data["updatedBy"] == "alice"
    assert "product_id" not in data


def test_naive_timestamp_is_treated_as_utc():
    event = ChangeEvent.from_prices("p1", "Widget", 1.0, 2.0, timestamp=datetime(2026, 3, 1, 12, 0))
    assert event.timestamp == T0


def test_event_is_immutable():
    event = ChangeEvent.from_prices("p1", "Widget", 1.0, 2.0, timestamp=T0)
    with pytest.raises(Exception):
        event.new_price = 3.0


@pytest.mark.parametrize("body", [
    b"not json",
    b"[1, 2, 3]",
    b"\xff\xfe",
    json.dumps({"productId": "p1", "oldPrice": 1}).encode(),
    json.dumps({"productId": "", "oldPrice": 1, "newPrice": 2, "timestamp": "2026-03-01T12:00:00Z"}).encode(),
    json.dumps({"productId": "p1", "oldPrice": "abc", "newPrice": 2, "timestamp": "2026-03-01T12:00:00Z"}).encode(),
])
def test_malformed_change_payloads(body):
    with pytest.raises(MalformedMessageError):
        ChangeEvent.from_json(body)


def test_idempotency_key_survives_redelivery():
    event = ChangeEvent.from_prices("p1", "Widget", 1000.0, 700.0, timestamp=T0 + timedelta(microseconds=250))
    redelivered = ChangeEvent.from_json(event.to_json())
    
    assert redelivered.idempotency_key == event.idempotency_key
    assert ChangeEvent.from_prices("p1", "Widget", 1000.0, 650.0, timestamp=T0).idempotency_key != event.idempotency_key


def test_idempotency_key_separates_changes_within_one_second():
    flip = ChangeEvent.from_prices("p1", "Widget", 100.0, 70.0, timestamp=T0 + timedelta(milliseconds=100))
    flip_again = ChangeEvent.from_prices("p1", "Widget", 100.0, 70.0, timestamp=T0 + timedelta(milliseconds=600))
    
    assert flip.idempotency_key != flip_again.idempotency_key


def test_alert_event_dedup_key_prefers_alert_id():
    alert = AlertEvent(
        alert_id="abc",
        alert_type=AlertType.DECREASE,
        product_id="p1",
        old_price=1000.0,
        new_price=700.0,
        change_amount=-300.0,
        change_percentage=-30.0,
        alert_time=T0
    )
    assert alert.dedup_key == "abc"
    assert not alert.is_increase
    
    legacy = AlertEvent.from_json(json.dumps({
        "alertType": "increase",
        "productId": "p1",
        "oldPrice": 100,
        "newPrice": 150,
        "changeAmount": 50,
        "changePercentage": 50,
        "alertTime": "2026-03-01T12:00:00Z"
    }))
    assert legacy.is_increase
    assert len(legacy.dedup_key) == 64


def test_alert_event_rejects_unknown_direction():
    with pytest.raises(MalformedMessageError):
        AlertEvent.from_json(json.dumps({
            "alertType": "sideways",
            "productId": "p1",
            "oldPrice": 100,
            "newPrice": 150,
            "changeAmount": 50,
            "changePercentage": 50,
            "alertTime": "2026-03-01T12:00:00Z"
        }))
