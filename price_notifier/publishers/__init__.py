"""
Publishers package
"""
from price_notifier.publishers.event_publisher import EventPublisher
from price_notifier.publishers.price_change_publisher import PriceChangePublisher

__all__ = ["EventPublisher", "PriceChangePublisher"]
