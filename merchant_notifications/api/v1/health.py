"""Health check endpoint."""

from enum import Enum
from typing import List

from fastapi import APIRouter, Request
from pydantic import BaseModel

from merchant_notifications.config.settings import settings
from merchant_notifications.db.mongodb import ping_mongodb

router = APIRouter(prefix="/health", tags=["health"])


class HealthStatus(str, Enum):
    """Health check status values."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"


class HealthResponse(BaseModel):
    status: HealthStatus
    app: str
    version: str
    mongodb: bool
    listening: List[str]


@router.get("", response_model=HealthResponse)
async def health(request: Request):
    mongodb_ok = await ping_mongodb()
    listener = getattr(request.app.state, "order_listener", None)
    scopes = [str(scope) for scope in listener.active_scopes] if listener else []
    return HealthResponse(
        status=HealthStatus.HEALTHY if mongodb_ok else HealthStatus.DEGRADED,
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        mongodb=mongodb_ok,
        listening=scopes,
    )
