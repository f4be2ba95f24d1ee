"""
Subscription API endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from price_notifier.api.dependencies import get_subscription_service
from price_notifier.exceptions import SubscriptionValidationError
from price_notifier.schemas.subscription import (
    MessageResponse,
    SubscribeResult,
    SubscriptionCreate,
    SubscriptionListResponse,
    SubscriptionResponse
)
from price_notifier.services.subscription_service import SubscriptionService, validate_subscription

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.post("", response_model=SubscribeResult, summary="Subscribe to price changes")
def subscribe(
    subscription: SubscriptionCreate,
    service: SubscriptionService = Depends(get_subscription_service)
):
    """
    Subscribe an email to price change notifications for a product
    
    Re-subscribing with the same product and email overwrites the preferences.
    
    - **productId**: Product ID (required)
    - **email**: Subscriber email (required)
    - **notifyOnIncrease**: Notify on price increases (default: false)
    - **notifyOnDecrease**: Notify on price drops (default: true)
    """
    try:
        validate_subscription(subscription.product_id, subscription.email)
    except SubscriptionValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    
    if not service.subscribe(subscription):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Subscription failed, please try again later"
        )
    
    return SubscribeResult(
        message="Subscribed. You will be emailed when the price changes.",
        email=subscription.email,
        product_name=subscription.product_name
    )


@router.delete("", response_model=MessageResponse, summary="Unsubscribe")
def unsubscribe(
    email: Optional[str] = Query(None, description="Subscriber email"),
    product_id: Optional[str] = Query(None, alias="productId", description="Product ID"),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """
    Remove a subscription. Removing one that does not exist also succeeds.
    
    - **email**: Subscriber email
    - **productId**: Product ID
    """
    if not email or not product_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Both email and productId are required"
        )
    
    if not service.unsubscribe(email, product_id):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unsubscribe failed, please try again later"
        )
    return MessageResponse(message="Unsubscribed")


@router.get("/{product_id}", response_model=SubscriptionListResponse, summary="List subscribers")
def list_subscribers(
    product_id: str,
    service: SubscriptionService = Depends(get_subscription_service)
):
    """
    List every subscription for a product, regardless of preferences
    
    - **product_id**: Product ID
    """
    subscriptions = service.list_subscribers(product_id)
    return SubscriptionListResponse(
        product_id=product_id,
        subscriptions=[SubscriptionResponse.model_validate(s) for s in subscriptions],
        total=len(subscriptions)
    )
