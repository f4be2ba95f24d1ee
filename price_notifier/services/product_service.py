"""
Product Service - price updates and price history
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from price_notifier.publishers.price_change_publisher import PriceChangePublisher
from price_notifier.repositories.product_repository import ProductRepository
from price_notifier.schemas.history import PriceHistoryResponse
from price_notifier.schemas.product import ProductResponse, ProductUpdate
from price_notifier.services.history_service import HistoryService

logger = logging.getLogger(__name__)


class ProductService:
    """Service layer for repricing products"""
    
    def __init__(self, db: Session, event_publisher=None):
        self.repository = ProductRepository(db)
        self.history = HistoryService(db)
        self.price_change_publisher = PriceChangePublisher(event_publisher)
    
    def get_product_by_id(self, product_id: int) -> Optional[ProductResponse]:
        """Get product by ID"""
        product = self.repository.get_by_id(product_id)
        if not product:
            return None
        return ProductResponse.model_validate(product)
    
    def update_product(self, product_id: int, product_data: ProductUpdate) -> Optional[ProductResponse]:
        """
        Update a product and publish a PriceChanged event if its price moved
        
        The database write and the publish are not transactional: if the
        publish fails the new price is already stored and the error
        propagates to the caller.
        
        Raises:
            EventPublishError: If the change event could not be enqueued
        """
        product = self.repository.get_by_id(product_id)
        if not product:
            return None
        
        old_price = product.price
        update_data = product_data.model_dump(exclude_unset=True, exclude={"updated_by"})
        product = self.repository.update(product, update_data)
        
        self.price_change_publisher.on_price_update(
            product_id=str(product.id),
            product_name=product.name,
            old_price=old_price,
            new_price=product.price,
            updated_by=product_data.updated_by
        )
        return ProductResponse.model_validate(product)
    
    def get_price_history(self, product_id: int, limit: int = 100) -> PriceHistoryResponse:
        """Get a product's price history, newest first"""
        key = str(product_id)
        return PriceHistoryResponse(
            product_id=key,
            records=self.history.get_history(key, limit=limit),
            total=self.history.count_history(key)
        )
