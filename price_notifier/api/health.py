"""
Health check endpoint
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime, timezone

from price_notifier import __version__
from price_notifier.api.dependencies import get_app_settings
from price_notifier.config import Settings
from price_notifier.database import get_db

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings)
):
    """
    Health check endpoint
    
    Returns service health status including database connectivity
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {str(e)}"
    
    return {
        "service": settings.SERVICE_NAME,
        "status": "healthy" if db_status == "healthy" else "unhealthy",
        "database": db_status,
        "email_service": settings.EMAIL_SERVICE,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/")
def root(settings: Settings = Depends(get_app_settings)):
    """Root endpoint"""
    return {
        "service": settings.SERVICE_NAME,
        "version": __version__,
        "docs": "/docs"
    }
