"""
Notification Service - fans one price alert out to matching subscribers
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from price_notifier.exceptions import EmailDeliveryError
from price_notifier.metrics import NOTIFICATIONS
from price_notifier.models.subscription import ProductSubscription
from price_notifier.repositories.subscription_repository import (
    SentNotificationRepository,
    SubscriptionRepository
)
from price_notifier.schemas.events import AlertEvent, AlertType

logger = logging.getLogger(__name__)


class DispatchStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of one attempt to notify one recipient"""
    recipient: str
    status: DispatchStatus
    reason: Optional[str] = None


@dataclass
class FanOutResult:
    """Aggregated outcomes for one alert"""
    alert_id: str
    product_id: str
    subscriber_count: int
    outcomes: List[DispatchOutcome] = field(default_factory=list)
    
    @property
    def matched(self) -> int:
        return len(self.outcomes)
    
    @property
    def sent(self) -> List[DispatchOutcome]:
        return [o for o in self.outcomes if o.status == DispatchStatus.SENT]
    
    @property
    def failed(self) -> List[DispatchOutcome]:
        return [o for o in self.outcomes if o.status == DispatchStatus.FAILED]
    
    @property
    def duplicates(self) -> List[DispatchOutcome]:
        return [o for o in self.outcomes if o.status == DispatchStatus.DUPLICATE]


def matches(subscription: ProductSubscription, alert_type: AlertType) -> bool:
    """Whether a subscriber asked to hear about this direction of change"""
    if alert_type == AlertType.INCREASE:
        return bool(subscription.notify_on_increase)
    return bool(subscription.notify_on_decrease)


class NotificationService:
    """Service layer for the notification fan-out consumer"""
    
    def __init__(self, db: Session, dispatcher, dedup_ttl_hours: int = 24):
        self.db = db
        self.subscriptions = SubscriptionRepository(db)
        self.sent_markers = SentNotificationRepository(db)
        self.dispatcher = dispatcher
        self.dedup_ttl = timedelta(hours=dedup_ttl_hours)
    
    def process_alert(self, alert: AlertEvent) -> FanOutResult:
        """
        Email every subscriber whose preferences match the alert direction
        
        Each recipient is attempted independently; failures are collected
        in the result, never raised. Only a failure to read the
        subscription store propagates (so the alert is redelivered).
        
        Args:
            alert: Deserialized alert event
        
        Returns:
            FanOutResult with one outcome per matching subscriber
        """
        alert_id = alert.dedup_key
        self.sent_markers.purge_expired(datetime.now(timezone.utc) - self.dedup_ttl)
        
        subscriptions = self.subscriptions.list_by_product(alert.product_id)
        matching = [s for s in subscriptions if matches(s, alert.alert_type)]
        logger.info(
            "Alert %s (%s) for product %s: %d subscriber(s), %d match",
            alert_id[:12], alert.alert_type.value, alert.product_id,
            len(subscriptions), len(matching)
        )
        
        result = FanOutResult(
            alert_id=alert_id,
            product_id=alert.product_id,
            subscriber_count=len(subscriptions)
        )
        for subscription in matching:
            outcome = self._notify(alert, alert_id, subscription)
            NOTIFICATIONS.labels(status=outcome.status.value).inc()
            result.outcomes.append(outcome)
        
        if result.failed:
            logger.warning(
                "✗ Alert %s: %d of %d notification(s) failed: %s",
                alert_id[:12], len(result.failed), result.matched,
                ", ".join(f"{o.recipient} ({o.reason})" for o in result.failed)
            )
        logger.info(
            "✓ Alert %s fan-out complete: %d sent, %d failed, %d already sent",
            alert_id[:12], len(result.sent), len(result.failed), len(result.duplicates)
        )
        return result
    
    def _notify(self, alert: AlertEvent, alert_id: str, subscription: ProductSubscription) -> DispatchOutcome:
        recipient = subscription.email
        
        if self.sent_markers.is_sent(alert_id, recipient):
            logger.info("Alert %s already sent to %s; skipping", alert_id[:12], recipient)
            return DispatchOutcome(recipient, DispatchStatus.DUPLICATE)
        
        try:
            self.dispatcher.send_price_alert(
                recipient=recipient,
                product_name=alert.product_name or subscription.product_name,
                old_price=alert.old_price,
                new_price=alert.new_price,
                change_percentage=alert.change_percentage,
                direction=alert.alert_type
            )
        except EmailDeliveryError as e:
            logger.error("✗ Notifying %s failed: %s", recipient, e)
            return DispatchOutcome(recipient, DispatchStatus.FAILED, str(e))
        except Exception as e:
            logger.exception("✗ Unexpected error notifying %s", recipient)
            return DispatchOutcome(recipient, DispatchStatus.FAILED, f"{type(e).__name__}: {e}")
        
        try:
            self.sent_markers.mark_sent(alert_id, recipient, datetime.now(timezone.utc))
        except SQLAlchemyError as e:
            # Delivered; a redelivery of this alert may email the recipient again
            self.db.rollback()
            logger.warning("Could not record sent marker for %s: %s", recipient, e)
        
        logger.info("✓ Notified %s", recipient)
        return DispatchOutcome(recipient, DispatchStatus.SENT)
