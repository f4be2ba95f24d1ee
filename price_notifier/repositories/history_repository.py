"""
Price History Repository - Data Access Layer
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from price_notifier.models.price_history import PriceHistory

logger = logging.getLogger(__name__)


class HistoryRepository:
    """Repository for the append-only price history table"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def get_by_idempotency_key(self, idempotency_key: str) -> Optional[PriceHistory]:
        """Get the record appended for a given change event"""
        return self.db.query(PriceHistory).filter(
            PriceHistory.idempotency_key == idempotency_key
        ).first()
    
    def append(self, record: PriceHistory) -> tuple[PriceHistory, bool]:
        """
        Append a record unless one with the same idempotency key exists
        
        Args:
            record: New (transient) history row
        
        Returns:
            (stored record, created) where created is False for a duplicate
        """
        existing = self.get_by_idempotency_key(record.idempotency_key)
        if existing:
            return existing, False
        
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            # Another consumer instance appended the same event concurrently
            self.db.rollback()
            existing = self.get_by_idempotency_key(record.idempotency_key)
            if existing is None:
                raise
            return existing, False
        
        self.db.refresh(record)
        return record, True
    
    def list_for_product(self, product_id: str, limit: int = 100) -> List[PriceHistory]:
        """Get a product's history, newest first"""
        return self.db.query(PriceHistory).filter(
            PriceHistory.product_id == product_id
        ).order_by(PriceHistory.sequence_key.desc()).limit(limit).all()
    
    def count_for_product(self, product_id: str) -> int:
        """Get total count of history records for a product"""
        return self.db.query(PriceHistory).filter(
            PriceHistory.product_id == product_id
        ).count()
