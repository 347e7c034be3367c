"""Main FastAPI application for merchant order notifications and reports."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from merchant_notifications.api.v1 import api_router
from merchant_notifications.config.logging import get_logger, setup_logging
from merchant_notifications.config.settings import settings
from merchant_notifications.db.mongodb import MongoDBManager
from merchant_notifications.models import BranchScope
from merchant_notifications.services import (
    BranchConfigStore,
    MailRelayClient,
    OrderChangeListener,
    ReportRequester,
    make_feed_factory,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting application", app=settings.APP_NAME, version=settings.APP_VERSION)

    await MongoDBManager.connect_to_mongo()

    config_store = BranchConfigStore(MongoDBManager.config_collection())
    mail_relay = MailRelayClient()
    order_listener = OrderChangeListener(
        feed_factory=make_feed_factory(MongoDBManager.orders_collection()),
        config_store=config_store,
        mail_relay=mail_relay,
    )

    app.state.config_store = config_store
    app.state.mail_relay = mail_relay
    app.state.report_requester = ReportRequester(config_store, mail_relay)
    app.state.order_listener = order_listener

    for entry in settings.WATCHED_BRANCHES:
        await order_listener.start(BranchScope.parse(entry))

    yield

    # Shutdown
    logger.info("Shutting down application")

    await order_listener.stop_all()
    await order_listener.drain()
    await mail_relay.aclose()
    await MongoDBManager.close_mongo_connection()


def create_app(use_lifespan: bool = True) -> FastAPI:
    setup_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="New-order emails and sales reports for merchants",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan if use_lifespan else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn; auto-reload only in development."""
    import uvicorn

    uvicorn.run(
        "merchant_notifications.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development(),
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
