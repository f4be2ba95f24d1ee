"""
Product Repository - Data Access Layer
"""
from typing import Optional

from sqlalchemy.orm import Session

from price_notifier.models.product import Product


class ProductRepository:
    """Repository for reading and repricing products"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def get_by_id(self, product_id: int) -> Optional[Product]:
        """Get product by ID"""
        return self.db.query(Product).filter(Product.id == product_id).first()
    
    def update(self, product: Product, update_data: dict) -> Product:
        """Apply provided fields and commit"""
        for field, value in update_data.items():
            setattr(product, field, value)
        
        self.db.commit()
        self.db.refresh(product)
        return product
