"""
Subscription Service - Business Logic
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from price_notifier.exceptions import SubscriptionValidationError
from price_notifier.models.subscription import ProductSubscription
from price_notifier.repositories.subscription_repository import SubscriptionRepository
from price_notifier.schemas.subscription import SubscriptionCreate

logger = logging.getLogger(__name__)


def validate_subscription(product_id: Optional[str], email: Optional[str]) -> None:
    """
    Reject a subscription request before it reaches the store
    
    Raises:
        SubscriptionValidationError: If email is empty or has no "@",
            or product_id is empty
    """
    if not email or not email.strip() or "@" not in email:
        raise SubscriptionValidationError(f"Invalid email: {email!r}")
    if not product_id or not product_id.strip():
        raise SubscriptionValidationError("Product ID is required")


class SubscriptionService:
    """Service for subscriber notification preferences"""
    
    def __init__(self, db: Session):
        self.db = db
        self.repository = SubscriptionRepository(db)
    
    def subscribe(self, data: SubscriptionCreate, subscribed_at: Optional[datetime] = None) -> bool:
        """
        Create or overwrite a subscription for (product_id, email)
        
        Args:
            data: Subscription request
            subscribed_at: Defaults to now
        
        Returns:
            True if stored, False if rejected or the store failed
        """
        try:
            validate_subscription(data.product_id, data.email)
        except SubscriptionValidationError as e:
            logger.warning("Subscription rejected: %s", e)
            return False
        
        subscription = ProductSubscription(
            product_id=data.product_id.strip(),
            email=data.email.strip(),
            product_name=data.product_name,
            notify_on_increase=data.notify_on_increase,
            notify_on_decrease=data.notify_on_decrease,
            subscribed_at=subscribed_at or datetime.now(timezone.utc)
        )
        try:
            self.repository.upsert(subscription)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("✗ Subscribe failed for %s on %s: %s", subscription.email, subscription.product_id, e)
            return False
        
        logger.info(
            "✓ %s subscribed to %s (increase=%s, decrease=%s)",
            subscription.email, subscription.product_id,
            subscription.notify_on_increase, subscription.notify_on_decrease
        )
        return True
    
    def unsubscribe(self, email: str, product_id: str) -> bool:
        """
        Remove a subscription; removing a missing one also succeeds
        
        Returns:
            False only if the store failed
        """
        try:
            deleted = self.repository.delete(product_id.strip(), email.strip())
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("✗ Unsubscribe failed for %s on %s: %s", email, product_id, e)
            return False
        
        if deleted:
            logger.info("✓ %s unsubscribed from %s", email, product_id)
        else:
            logger.info("%s had no subscription to %s; nothing to remove", email, product_id)
        return True
    
    def list_subscribers(self, product_id: str) -> List[ProductSubscription]:
        """All subscriptions for a product; direction filtering is the caller's job"""
        return self.repository.list_by_product(product_id)
