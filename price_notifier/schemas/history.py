"""
Price history schemas
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class HistoryRecord(BaseModel):
    """Schema for a persisted price history row"""
    product_id: str
    sequence_key: str
    product_name: str
    old_price: float
    new_price: float
    change_amount: float
    change_percentage: Optional[float] = None
    updated_by: str
    change_time: datetime
    
    model_config = ConfigDict(from_attributes=True)


class PriceHistoryResponse(BaseModel):
    """Schema for a product's price history, newest first"""
    product_id: str
    records: list[HistoryRecord]
    total: int
