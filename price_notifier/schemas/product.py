"""
Pydantic schemas for product price updates
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class ProductUpdate(BaseModel):
    """Schema for updating a product (all fields optional)"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[float] = Field(None, ge=0)
    updated_by: str = Field("seller", max_length=255, description="Who made the change")


class ProductResponse(BaseModel):
    """Schema for product response"""
    id: int
    name: str
    price: float
    created_at: datetime
    updated_at: datetime
    
    model_config = ConfigDict(from_attributes=True)
