from fastapi import APIRouter

from merchant_notifications.api.v1 import health, listeners, notifications, reports

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router)
api_router.include_router(notifications.router)
api_router.include_router(reports.router)
api_router.include_router(listeners.router)
