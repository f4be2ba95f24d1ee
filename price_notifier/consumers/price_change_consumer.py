"""
RabbitMQ Consumer for PriceChanged events (history stage)
"""
import logging
from typing import Optional

from sqlalchemy.orm import sessionmaker

from price_notifier.config import Settings
from price_notifier.consumers.base import consume
from price_notifier.schemas.events import AlertEvent, ChangeEvent
from price_notifier.services.history_service import HistoryService

logger = logging.getLogger(__name__)


class PriceChangeConsumer:
    """Persists history for each change event and emits alerts"""
    
    def __init__(self, session_factory: sessionmaker, publisher):
        self.session_factory = session_factory
        self.publisher = publisher
    
    def handle(self, body: bytes) -> Optional[AlertEvent]:
        """
        Process one raw message
        
        Raises:
            MalformedMessageError: If the payload is not a ChangeEvent
        """
        event = ChangeEvent.from_json(body)
        logger.info(
            "Received event: PriceChanged for product %s (%s)",
            event.product_id, event.product_name
        )
        
        db = self.session_factory()
        try:
            service = HistoryService(db, self.publisher)
            return service.process_change_event(event)
        finally:
            db.close()


def start_consumer(settings: Settings, session_factory: sessionmaker, publisher) -> None:
    """Start consuming the change queue"""
    consumer = PriceChangeConsumer(session_factory, publisher)
    consume(settings, settings.PRICE_CHANGE_QUEUE, consumer.handle)
