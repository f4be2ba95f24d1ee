"""
FastAPI Application Entry Point - Price Notifier
"""
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.orm import sessionmaker

from price_notifier import __version__
from price_notifier.api import health, products, subscriptions
from price_notifier.config import Settings, get_settings
from price_notifier.database import create_db_engine, create_session_factory, init_db
from price_notifier.logging_config import setup_logging
from price_notifier.publishers.event_publisher import EventPublisher

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[sessionmaker] = None,
    publisher=None
) -> FastAPI:
    """Build the API with explicit settings and collaborators"""
    settings = settings or get_settings()
    if session_factory is None:
        session_factory = create_session_factory(create_db_engine(settings.DATABASE_URL))
    
    app = FastAPI(
        title="Price Notifier",
        description="Price change subscriptions, repricing and price history",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.publisher = publisher or EventPublisher(settings)
    
    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    # Include routers
    app.include_router(health.router)
    app.include_router(subscriptions.router)
    app.include_router(products.router)
    
    # Prometheus metrics
    Instrumentator().instrument(app).expose(app)
    
    @app.on_event("startup")
    def startup_event():
        """Initialize logging and database on startup"""
        setup_logging(settings.LOG_LEVEL)
        init_db(session_factory.kw["bind"])
        logger.info("✓ Database initialized")
        logger.info("✓ RabbitMQ URL: %s", settings.RABBITMQ_URL)
        logger.info("✓ %s is running on port %s", settings.SERVICE_NAME, settings.SERVICE_PORT)
    
    @app.on_event("shutdown")
    def shutdown_event():
        """Cleanup on shutdown"""
        logger.info("Shutting down %s...", settings.SERVICE_NAME)
    
    return app


app = create_app()
