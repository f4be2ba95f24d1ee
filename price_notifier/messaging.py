"""
RabbitMQ topology shared by publishers and consumers

Both channels run over one topic exchange. Queues are durable quorum
queues: a nack with requeue counts as a delivery attempt and after
QUEUE_DELIVERY_LIMIT attempts the broker dead-letters the message.
Declarations are idempotent, so every connection declares the full
topology before use.
"""
from price_notifier.config import Settings


def dead_letter_queue_name(queue: str) -> str:
    return f"{queue}.dead-letter"


def queue_bindings(settings: Settings) -> dict:
    """Map queue name -> routing key"""
    return {
        settings.PRICE_CHANGE_QUEUE: settings.PRICE_CHANGED_ROUTING_KEY,
        settings.PRICE_ALERT_QUEUE: settings.PRICE_ALERT_ROUTING_KEY,
    }


def declare_topology(channel, settings: Settings) -> None:
    """Declare exchanges, work queues and their dead-letter queues"""
    channel.exchange_declare(
        exchange=settings.RABBITMQ_EXCHANGE,
        exchange_type='topic',
        durable=True
    )
    channel.exchange_declare(
        exchange=settings.RABBITMQ_DEAD_LETTER_EXCHANGE,
        exchange_type='direct',
        durable=True
    )
    
    for queue, routing_key in queue_bindings(settings).items():
        dead_letter_queue = dead_letter_queue_name(queue)
        channel.queue_declare(queue=dead_letter_queue, durable=True)
        channel.queue_bind(
            exchange=settings.RABBITMQ_DEAD_LETTER_EXCHANGE,
            queue=dead_letter_queue,
            routing_key=dead_letter_queue
        )
        
        channel.queue_declare(
            queue=queue,
            durable=True,
            arguments={
                "x-queue-type": "quorum",
                "x-delivery-limit": settings.QUEUE_DELIVERY_LIMIT,
                "x-dead-letter-exchange": settings.RABBITMQ_DEAD_LETTER_EXCHANGE,
                "x-dead-letter-routing-key": dead_letter_queue,
            }
        )
        channel.queue_bind(
            exchange=settings.RABBITMQ_EXCHANGE,
            queue=queue,
            routing_key=routing_key
        )
