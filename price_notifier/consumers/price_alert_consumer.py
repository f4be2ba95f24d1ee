"""
RabbitMQ Consumer for PriceAlert events (notification fan-out stage)
"""
import logging

from sqlalchemy.orm import sessionmaker

from price_notifier.config import Settings
from price_notifier.consumers.base import consume
from price_notifier.schemas.events import AlertEvent
from price_notifier.services.notification_service import FanOutResult, NotificationService

logger = logging.getLogger(__name__)


class PriceAlertConsumer:
    """Emails matching subscribers for each alert event"""
    
    def __init__(self, session_factory: sessionmaker, dispatcher, dedup_ttl_hours: int = 24):
        self.session_factory = session_factory
        self.dispatcher = dispatcher
        self.dedup_ttl_hours = dedup_ttl_hours
    
    def handle(self, body: bytes) -> FanOutResult:
        """
        Process one raw message
        
        Per-recipient failures do not raise, so the message is
        acknowledged even on partial delivery.
        
        Raises:
            MalformedMessageError: If the payload is not an AlertEvent
        """
        alert = AlertEvent.from_json(body)
        logger.warning(
            "🔔 Received event: PriceAlert (%s) for %s: %.2f -> %.2f (%.2f%%)",
            alert.alert_type.value, alert.product_name, alert.old_price,
            alert.new_price, alert.change_percentage
        )
        
        db = self.session_factory()
        try:
            service = NotificationService(db, self.dispatcher, self.dedup_ttl_hours)
            return service.process_alert(alert)
        finally:
            db.close()


def start_consumer(settings: Settings, session_factory: sessionmaker, dispatcher) -> None:
    """Start consuming the alert queue"""
    consumer = PriceAlertConsumer(session_factory, dispatcher, settings.NOTIFICATION_DEDUP_TTL_HOURS)
    consume(settings, settings.PRICE_ALERT_QUEUE, consumer.handle)
