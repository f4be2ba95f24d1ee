"""
Subscription Repository - Data Access Layer
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from price_notifier.models.subscription import ProductSubscription, SentNotification


class SubscriptionRepository:
    """Repository for subscriptions partitioned by product"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def get(self, product_id: str, email: str) -> Optional[ProductSubscription]:
        """Point lookup by composite key"""
        return self.db.query(ProductSubscription).filter(
            ProductSubscription.product_id == product_id,
            ProductSubscription.email == email
        ).first()
    
    def upsert(self, subscription: ProductSubscription) -> ProductSubscription:
        """Insert or overwrite preferences for (product_id, email)"""
        stored = self.db.merge(subscription)
        self.db.commit()
        return stored
    
    def delete(self, product_id: str, email: str) -> bool:
        """
        Delete by composite key
        
        Returns:
            True if a row was removed
        """
        subscription = self.get(product_id, email)
        if not subscription:
            return False
        
        self.db.delete(subscription)
        self.db.commit()
        return True
    
    def list_by_product(self, product_id: str) -> List[ProductSubscription]:
        """Partition scan: every subscription for a product, unfiltered"""
        return self.db.query(ProductSubscription).filter(
            ProductSubscription.product_id == product_id
        ).order_by(ProductSubscription.email).all()


class SentNotificationRepository:
    """Repository for per-recipient sent markers (duplicate email guard)"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def is_sent(self, alert_id: str, email: str) -> bool:
        """Check if this alert was already emailed to the recipient"""
        return self.db.query(SentNotification).filter(
            SentNotification.alert_id == alert_id,
            SentNotification.email == email
        ).first() is not None
    
    def mark_sent(self, alert_id: str, email: str, sent_at: datetime) -> SentNotification:
        """Record a delivered alert email"""
        marker = self.db.merge(SentNotification(alert_id=alert_id, email=email, sent_at=sent_at))
        self.db.commit()
        return marker
    
    def purge_expired(self, cutoff: datetime) -> int:
        """Remove markers older than cutoff"""
        deleted = self.db.query(SentNotification).filter(
            SentNotification.sent_at < cutoff
        ).delete(synchronize_session="fetch")
        self.db.commit()
        return deleted
