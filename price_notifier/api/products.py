"""
Product price API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, status, Query

from price_notifier.api.dependencies import get_product_service
from price_notifier.exceptions import EventPublishError
from price_notifier.schemas.history import PriceHistoryResponse
from price_notifier.schemas.product import ProductResponse, ProductUpdate
from price_notifier.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/{product_id}", response_model=ProductResponse, summary="Get product by ID")
def get_product(
    product_id: int,
    service: ProductService = Depends(get_product_service)
):
    """
    Retrieve a specific product by ID
    
    - **product_id**: Product ID
    """
    product = service.get_product_by_id(product_id)
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with id={product_id} not found"
        )
    return product


@router.put("/{product_id}", response_model=ProductResponse, summary="Update product")
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    service: ProductService = Depends(get_product_service)
):
    """
    Update a product's name and/or price
    
    A price change publishes a PriceChanged event. If the event cannot be
    enqueued the request fails with 503 even though the new price is stored.
    
    - **product_id**: Product ID
    """
    try:
        product = service.update_product(product_id, product_data)
    except EventPublishError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Price updated but change event was not published: {e}"
        )
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with id={product_id} not found"
        )
    return product


@router.get("/{product_id}/price-history", response_model=PriceHistoryResponse, summary="Get price history")
def get_price_history(
    product_id: int,
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of records to return"),
    service: ProductService = Depends(get_product_service)
):
    """
    Retrieve a product's price changes, newest first
    
    - **product_id**: Product ID
    - **limit**: Maximum number of records (default: 100, max: 1000)
    """
    return service.get_price_history(product_id, limit=limit)
