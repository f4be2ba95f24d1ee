"""
Consumers package and command-line entry point
"""
import argparse
import logging
import sys

import pika

from price_notifier.config import get_settings
from price_notifier.database import create_db_engine, create_session_factory, init_db
from price_notifier.logging_config import setup_logging
from price_notifier.consumers import price_alert_consumer, price_change_consumer
from price_notifier.publishers.event_publisher import EventPublisher
from price_notifier.services.email_service import EmailDispatcher

logger = logging.getLogger(__name__)

STAGES = ("history", "notification")


def main(argv=None) -> int:
    """Run one pipeline stage: history or notification"""
    parser = argparse.ArgumentParser(description="Run a price notification pipeline consumer")
    parser.add_argument("stage", choices=STAGES, help="Pipeline stage to run")
    args = parser.parse_args(argv)
    
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    
    engine = create_db_engine(settings.DATABASE_URL)
    init_db(engine)
    session_factory = create_session_factory(engine)
    logger.info("Starting %s %s consumer...", settings.SERVICE_NAME, args.stage)
    
    try:
        if args.stage == "history":
            price_change_consumer.start_consumer(settings, session_factory, EventPublisher(settings))
        else:
            price_alert_consumer.start_consumer(settings, session_factory, EmailDispatcher(settings))
    except KeyboardInterrupt:
        logger.info("Consumer stopped by user")
        return 0
    except pika.exceptions.AMQPError as e:
        logger.error("✗ Consumer stopped: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
