"""
Schemas package
"""
from price_notifier.schemas.events import AlertEvent, AlertType, ChangeEvent, compute_change
from price_notifier.schemas.history import HistoryRecord, PriceHistoryResponse
from price_notifier.schemas.product import ProductUpdate, ProductResponse
from price_notifier.schemas.subscription import (
    SubscriptionCreate,
    SubscriptionResponse,
    SubscriptionListResponse,
    SubscribeResult,
    MessageResponse
)

__all__ = [
    "AlertEvent",
    "AlertType",
    "ChangeEvent",
    "compute_change",
    "HistoryRecord",
    "PriceHistoryResponse",
    "ProductUpdate",
    "ProductResponse",
    "SubscriptionCreate",
    "SubscriptionResponse",
    "SubscriptionListResponse",
    "SubscribeResult",
    "MessageResponse"
]
