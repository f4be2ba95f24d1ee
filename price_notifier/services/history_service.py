"""
History Service - records price changes and decides significance
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from price_notifier.metrics import ALERTS_EMITTED, DUPLICATE_CHANGE_EVENTS, HISTORY_RECORDS_APPENDED
from price_notifier.models.price_history import PriceHistory
from price_notifier.repositories.history_repository import HistoryRepository
from price_notifier.schemas.events import AlertEvent, AlertType, ChangeEvent
from price_notifier.schemas.history import HistoryRecord

logger = logging.getLogger(__name__)

# Fixed policy, not configurable per product
ALERT_THRESHOLD_PERCENT = 20.0

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def make_sequence_key(timestamp: datetime) -> str:
    """
    Build a sequence key that sorts chronologically within a product

    Zero-padded microseconds since the epoch plus a random suffix, so two
    events stamped in the same microsecond still get distinct keys.
    """
    micros = (timestamp - _EPOCH) // timedelta(microseconds=1)
    return f"{micros:020d}-{secrets.token_hex(6)}"


def is_significant(change_percentage: Optional[float]) -> bool:
    """A change is significant when |percentage| >= threshold; undefined never is"""
    if change_percentage is None:
        return False
    return abs(change_percentage) >= ALERT_THRESHOLD_PERCENT


def build_alert(event: ChangeEvent, alert_time: Optional[datetime] = None) -> AlertEvent:
    """Derive the alert for a significant change event"""
    alert_type = AlertType.INCREASE if event.change_percentage > 0 else AlertType.DECREASE
    return AlertEvent(
        alert_id=event.idempotency_key,
        alert_type=alert_type,
        product_id=event.product_id,
        product_name=event.product_name,
        old_price=event.old_price,
        new_price=event.new_price,
        change_amount=event.change_amount,
        change_percentage=event.change_percentage,
        alert_time=alert_time or datetime.now(timezone.utc)
    )


class HistoryService:
    """Service layer for the history consumer"""
    
    def __init__(self, db: Session, publisher=None):
        self.repository = HistoryRepository(db)
        self.publisher = publisher
    
    def record_change(self, event: ChangeEvent) -> tuple[PriceHistory, bool]:
        """
        Append the history record for an event (no-op on redelivery)
        
        Returns:
            (record, created)
        """
        record = PriceHistory(
            product_id=event.product_id,
            sequence_key=make_sequence_key(event.timestamp),
            idempotency_key=event.idempotency_key,
            product_name=event.product_name,
            old_price=event.old_price,
            new_price=event.new_price,
            change_amount=event.change_amount,
            change_percentage=event.change_percentage,
            updated_by=event.updated_by,
            change_time=event.timestamp
        )
        return self.repository.append(record)
    
    def process_change_event(self, event: ChangeEvent) -> Optional[AlertEvent]:
        """
        Persist history for a PriceChanged event and raise an alert if significant
        
        The threshold check also runs for duplicates so that a redelivery
        after a failed alert publish still emits the alert.
        
        Args:
            event: Deserialized change event
        
        Returns:
            The published AlertEvent, or None
        
        Raises:
            SQLAlchemyError, EventPublishError: left to the consumer so the
                message is redelivered
        """
        record, created = self.record_change(event)
        if created:
            HISTORY_RECORDS_APPENDED.inc()
            logger.info(
                "✓ History appended for product %s [%s]: %.2f -> %.2f (%s%%)",
                event.product_id, record.sequence_key, event.old_price, event.new_price,
                event.change_percentage
            )
        else:
            DUPLICATE_CHANGE_EVENTS.inc()
            logger.info(
                "Duplicate PriceChanged for product %s; history already has %s",
                event.product_id, record.sequence_key
            )
        
        if event.change_percentage is None:
            logger.info("Old price of product %s was 0; percentage undefined, no alert", event.product_id)
            return None
        
        if not is_significant(event.change_percentage):
            return None
        
        alert = build_alert(event)
        logger.warning(
            "Price of %s (%s) changed %.2f%% (>= %.0f%%): raising %s alert",
            event.product_name, event.product_id, event.change_percentage,
            ALERT_THRESHOLD_PERCENT, alert.alert_type.value
        )
        self.publisher.publish_price_alert(alert)
        ALERTS_EMITTED.labels(alert_type=alert.alert_type.value).inc()
        return alert
    
    def get_history(self, product_id: str, limit: int = 100) -> List[HistoryRecord]:
        """Get a product's history, newest first"""
        records = self.repository.list_for_product(product_id, limit=limit)
        return [HistoryRecord.model_validate(r) for r in records]
    
    def count_history(self, product_id: str) -> int:
        return self.repository.count_for_product(product_id)
