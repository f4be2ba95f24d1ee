#!/usr/bin/env python
"""
Script to run a RabbitMQ consumer: python run_consumer.py {history|notification}
"""
import sys

from price_notifier.consumers import main

if __name__ == "__main__":
    sys.exit(main())
