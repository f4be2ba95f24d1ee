"""
SQLAlchemy PriceHistory model (append-only)
"""
from sqlalchemy import Column, String, Float, DateTime
from sqlalchemy.sql import func
from price_notifier.database import Base


class PriceHistory(Base):
    """
    One row per price change of a product

    Partitioned by product_id; sequence_key orders rows chronologically
    within a product. idempotency_key is derived from the change event so
    redelivered events do not append twice.
    """
    
    __tablename__ = "price_history"
    
    product_id = Column(String(64), primary_key=True)
    sequence_key = Column(String(64), primary_key=True)
    idempotency_key = Column(String(64), unique=True, nullable=False, index=True)
    product_name = Column(String(255), nullable=False)
    old_price = Column(Float, nullable=False)
    new_price = Column(Float, nullable=False)
    change_amount = Column(Float, nullable=False)
    change_percentage = Column(Float, nullable=True)  # NULL when old price was 0
    updated_by = Column(String(255), nullable=False)
    change_time = Column(DateTime(timezone=True), nullable=False)
    recorded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    def __repr__(self):
        return (
            f"<PriceHistory(product_id='{self.product_id}', sequence_key='{self.sequence_key}', "
            f"{self.old_price} -> {self.new_price})>"
        )
