"""
Shared FastAPI dependencies
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from price_notifier.config import Settings
from price_notifier.database import get_db
from price_notifier.services.product_service import ProductService
from price_notifier.services.subscription_service import SubscriptionService


def get_app_settings(request: Request) -> Settings:
    """Settings the app was built with"""
    return request.app.state.settings


def get_product_service(request: Request, db: Session = Depends(get_db)) -> ProductService:
    """Dependency to get ProductService instance"""
    return ProductService(db, request.app.state.publisher)


def get_subscription_service(db: Session = Depends(get_db)) -> SubscriptionService:
    """Dependency to get SubscriptionService instance"""
    return SubscriptionService(db)
