"""
Models package
"""
from price_notifier.models.product import Product
from price_notifier.models.price_history import PriceHistory
from price_notifier.models.subscription import ProductSubscription, SentNotification

__all__ = [
    "Product",
    "PriceHistory",
    "ProductSubscription",
    "SentNotification"
]
