"""
RabbitMQ Event Publisher
"""
import logging

import pika
from pika.exceptions import AMQPConnectionError, AMQPError, NackError, UnroutableError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from price_notifier.config import Settings
from price_notifier.exceptions import EventPublishError
from price_notifier.messaging import declare_topology
from price_notifier.schemas.events import AlertEvent, ChangeEvent, EventModel

logger = logging.getLogger(__name__)


class EventPublisher:
    """Publisher for sending price events to RabbitMQ"""
    
    def __init__(self, settings: Settings):
        self.settings = settings
        self.rabbitmq_url = settings.RABBITMQ_URL
        self.exchange = settings.RABBITMQ_EXCHANGE
        self._connect_retrying = Retrying(
            stop=stop_after_attempt(settings.PUBLISH_MAX_RETRIES),
            wait=wait_exponential(multiplier=settings.PUBLISH_RETRY_DELAY, min=1, max=10),
            retry=retry_if_exception_type(AMQPConnectionError),
            reraise=True
        )
    
    def publish_price_changed(self, event: ChangeEvent) -> None:
        """
        Publish PriceChanged event to the change queue
        
        Raises:
            EventPublishError: If the broker did not accept the message
        """
        self._publish(
            routing_key=self.settings.PRICE_CHANGED_ROUTING_KEY,
            event=event,
            event_type="PriceChanged",
            message_id=event.idempotency_key
        )
        logger.info(
            "✓ Event published: PriceChanged for product %s (%.2f -> %.2f, %s%%)",
            event.product_id, event.old_price, event.new_price, event.change_percentage
        )
    
    def publish_price_alert(self, alert: AlertEvent) -> None:
        """
        Publish PriceAlert event to the alert queue
        
        Raises:
            EventPublishError: If the broker did not accept the message
        """
        self._publish(
            routing_key=self.settings.PRICE_ALERT_ROUTING_KEY,
            event=alert,
            event_type="PriceAlert",
            message_id=alert.dedup_key
        )
        logger.info(
            "✓ Event published: PriceAlert (%s) for product %s (%.2f%%)",
            alert.alert_type.value, alert.product_id, alert.change_percentage
        )
    
    def _connect(self) -> pika.BlockingConnection:
        return self._connect_retrying.copy()(
            pika.BlockingConnection,
            pika.URLParameters(self.rabbitmq_url)
        )
    
    def _publish(self, routing_key: str, event: EventModel, event_type: str, message_id: str) -> None:
        connection = None
        try:
            connection = self._connect()
            channel = connection.channel()
            declare_topology(channel, self.settings)
            
            # Enable publisher confirms
            channel.confirm_delivery()
            
            channel.basic_publish(
                exchange=self.exchange,
                routing_key=routing_key,
                body=event.to_json().encode("utf-8"),
                properties=pika.BasicProperties(
                    delivery_mode=2,  # Persistent message
                    content_type='application/json',
                    content_encoding='utf-8',
                    type=event_type,
                    message_id=message_id
                ),
                mandatory=True
            )
        except UnroutableError as e:
            logger.error("✗ %s could not be routed to any queue", event_type)
            raise EventPublishError(f"{event_type} was not routed to any queue") from e
        except NackError as e:
            logger.error("✗ Broker rejected %s", event_type)
            raise EventPublishError(f"{event_type} was rejected by the broker") from e
        except (AMQPError, OSError) as e:
            logger.error("✗ Error publishing %s: %s", event_type, e)
            raise EventPublishError(f"Error publishing {event_type}: {e}") from e
        finally:
            if connection is not None and connection.is_open:
                connection.close()
