"""
Shared RabbitMQ consumer plumbing
"""
import logging
from typing import Callable

import pika

from price_notifier.config import Settings
from price_notifier.exceptions import MalformedMessageError
from price_notifier.messaging import declare_topology
from price_notifier.metrics import MALFORMED_MESSAGES

logger = logging.getLogger(__name__)


def make_callback(handle: Callable[[bytes], object], queue: str):
    """
    Wrap a message handler in an AMQP callback
    
    - handler returns: ack
    - MalformedMessageError: nack without requeue (dead-lettered, never retried)
    - anything else: nack with requeue; the broker redelivers until the
      queue's delivery limit, then dead-letters
    """
    def callback(ch, method, properties, body):
        message_id = getattr(properties, "message_id", None)
        headers = getattr(properties, "headers", None) or {}
        
        try:
            handle(body)
        except MalformedMessageError as e:
            MALFORMED_MESSAGES.labels(queue=queue).inc()
            logger.error("✗ Dropping malformed message %s from %s: %s", message_id, queue, e)
            ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
            return
        except Exception:
            logger.exception(
                "✗ Error processing message %s from %s (delivery count %s); requeueing",
                message_id, queue, headers.get("x-delivery-count", 0)
            )
            ch.basic_nack(delivery_tag=method.delivery_tag, requeue=True)
            return
        
        ch.basic_ack(delivery_tag=method.delivery_tag)
        logger.info("✓ Message %s from %s processed", message_id, queue)
    
    return callback


def consume(settings: Settings, queue: str, handle: Callable[[bytes], object]) -> None:
    """Connect, declare topology and block consuming one queue"""
    logger.info("Connecting to RabbitMQ: %s", settings.RABBITMQ_URL)
    connection = pika.BlockingConnection(pika.URLParameters(settings.RABBITMQ_URL))
    channel = connection.channel()
    
    try:
        declare_topology(channel, settings)
        logger.info("✓ Topology declared on exchange: %s", settings.RABBITMQ_EXCHANGE)
        
        channel.basic_qos(prefetch_count=settings.CONSUMER_PREFETCH_COUNT)
        channel.basic_consume(
            queue=queue,
            on_message_callback=make_callback(handle, queue),
            auto_ack=False  # Manual acknowledgement
        )
        
        logger.info("✓ Waiting for messages on queue: %s", queue)
        channel.start_consuming()
    finally:
        if connection.is_open:
            connection.close()
