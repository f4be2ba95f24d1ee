"""
SQLAlchemy ProductSubscription and SentNotification models
"""
from sqlalchemy import Column, String, Boolean, DateTime
from price_notifier.database import Base


class ProductSubscription(Base):
    """Subscriber notification preferences, keyed by (product_id, email)"""
    
    __tablename__ = "product_subscriptions"
    
    product_id = Column(String(64), primary_key=True)
    email = Column(String(255), primary_key=True)
    product_name = Column(String(255), nullable=False, default="")
    notify_on_increase = Column(Boolean, nullable=False, default=False)
    notify_on_decrease = Column(Boolean, nullable=False, default=True)
    subscribed_at = Column(DateTime(timezone=True), nullable=False)
    
    def __repr__(self):
        return (
            f"<ProductSubscription(product_id='{self.product_id}', email='{self.email}', "
            f"increase={self.notify_on_increase}, decrease={self.notify_on_decrease})>"
        )


class SentNotification(Base):
    """Marker for an alert email already delivered to a recipient"""
    
    __tablename__ = "sent_notifications"
    
    alert_id = Column(String(64), primary_key=True)
    email = Column(String(255), primary_key=True)
    sent_at = Column(DateTime(timezone=True), nullable=False, index=True)
    
    def __repr__(self):
        return f"<SentNotification(alert_id='{self.alert_id}', email='{self.email}')>"
