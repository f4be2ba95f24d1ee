"""
Exceptions raised across the pipeline
"""


class PriceNotifierError(Exception):
    """Base exception for the price notification pipeline"""
    pass


class SubscriptionValidationError(PriceNotifierError):
    """Subscription request rejected before reaching the store"""
    pass


class MalformedMessageError(PriceNotifierError):
    """Queue payload could not be deserialized; never retried"""
    pass


class EventPublishError(PriceNotifierError):
    """Event could not be enqueued"""
    pass


class EmailDeliveryError(PriceNotifierError):
    """A single notification email could not be sent"""
    pass


class ProductNotFoundError(PriceNotifierError):
    """Product not found"""
    pass
