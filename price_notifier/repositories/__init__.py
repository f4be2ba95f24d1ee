"""
Repositories package
"""
from price_notifier.repositories.history_repository import HistoryRepository
from price_notifier.repositories.product_repository import ProductRepository
from price_notifier.repositories.subscription_repository import (
    SubscriptionRepository,
    SentNotificationRepository
)

__all__ = [
    "HistoryRepository",
    "ProductRepository",
    "SubscriptionRepository",
    "SentNotificationRepository"
]
