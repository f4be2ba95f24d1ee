"""
Services package
"""
from price_notifier.services.email_service import EmailDispatcher
from price_notifier.services.history_service import HistoryService, ALERT_THRESHOLD_PERCENT
from price_notifier.services.notification_service import NotificationService, FanOutResult
from price_notifier.services.product_service import ProductService
from price_notifier.services.subscription_service import SubscriptionService

__all__ = [
    "EmailDispatcher",
    "HistoryService",
    "ALERT_THRESHOLD_PERCENT",
    "NotificationService",
    "FanOutResult",
    "ProductService",
    "SubscriptionService"
]
