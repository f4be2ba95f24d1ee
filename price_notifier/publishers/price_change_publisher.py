"""
Price Change Publisher - emits a change event for every actual repricing
"""
import logging
from datetime import datetime
from typing import Optional

from price_notifier.metrics import CHANGE_EVENTS_PUBLISHED
from price_notifier.schemas.events import ChangeEvent

logger = logging.getLogger(__name__)


class PriceChangePublisher:
    """Turns product price updates into PriceChanged events"""
    
    def __init__(self, event_publisher):
        self.event_publisher = event_publisher
    
    def on_price_update(
        self,
        product_id: str,
        product_name: str,
        old_price: float,
        new_price: float,
        updated_by: str = "seller",
        timestamp: Optional[datetime] = None
    ) -> Optional[ChangeEvent]:
        """
        Enqueue a ChangeEvent if the price actually changed
        
        Returns:
            The published event, or None when the price is unchanged
        
        Raises:
            EventPublishError: If enqueueing failed; the caller's update
                must fail with it
        """
        if new_price == old_price:
            logger.debug("Price of product %s unchanged (%.2f); nothing to publish", product_id, old_price)
            return None
        
        event = ChangeEvent.from_prices(
            product_id=product_id,
            product_name=product_name,
            old_price=old_price,
            new_price=new_price,
            updated_by=updated_by,
            timestamp=timestamp
        )
        self.event_publisher.publish_price_changed(event)
        CHANGE_EVENTS_PUBLISHED.inc()
        return event
