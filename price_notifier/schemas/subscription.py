"""
Pydantic schemas for subscription requests and responses

Request and response bodies use camelCase keys, like the queue payloads.
"""
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from datetime import datetime


class CamelModel(BaseModel):
    """Base schema accepting camelCase keys (and field names)"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SubscriptionCreate(CamelModel):
    """Schema for subscribing to price change notifications"""
    product_id: str = Field(..., description="Product ID")
    product_name: str = Field("", max_length=255, description="Product name shown in emails")
    email: str = Field(..., max_length=255, description="Subscriber email")
    notify_on_increase: bool = Field(False, description="Notify when the price goes up")
    notify_on_decrease: bool = Field(True, description="Notify when the price goes down")


class SubscriptionResponse(CamelModel):
    """Schema for subscription response"""
    product_id: str
    product_name: str
    email: str
    notify_on_increase: bool
    notify_on_decrease: bool
    subscribed_at: datetime
    
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class SubscriptionListResponse(CamelModel):
    """Schema for list of subscriptions response"""
    product_id: str
    subscriptions: list[SubscriptionResponse]
    total: int


class SubscribeResult(CamelModel):
    """Schema for subscribe acknowledgement"""
    message: str
    email: str
    product_name: str


class MessageResponse(BaseModel):
    message: str
