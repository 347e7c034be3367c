"""
Notification Settings API
=========================
Backs the settings screen: read and update a branch's email preferences.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from merchant_notifications.api.deps import get_config_store, get_scope
from merchant_notifications.config.logging import get_logger
from merchant_notifications.core.exceptions import ConfigUnavailableError, NotConfiguredError
from merchant_notifications.models import BranchScope
from merchant_notifications.services import BranchConfigStore

logger = get_logger(__name__)

router = APIRouter(
    prefix="/merchants/{merchant_id}/branches/{branch_id}/notifications",
    tags=["Notification Settings"],
)


class NotificationSettingsUpdate(BaseModel):
    """Request to change email notification preferences"""
    enabled: bool
    email: str = Field("", max_length=320)


class NotificationSettingsResponse(BaseModel):
    """Current email notification preferences"""
    enabled: bool
    email: str
    updated_at: Optional[datetime] = None


@router.get("", response_model=NotificationSettingsResponse)
async def read_notification_settings(
    scope: BranchScope = Depends(get_scope),
    store: BranchConfigStore = Depends(get_config_store),
):
    try:
        config = await store.get_notification_config(scope)
    except ConfigUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    if config is None:
        return NotificationSettingsResponse(enabled=False, email="")
    return NotificationSettingsResponse(
        enabled=config.enabled,
        email=config.email,
        updated_at=config.updated_at,
    )


@router.put("", response_model=NotificationSettingsResponse)
async def update_notification_settings(
    body: NotificationSettingsUpdate,
    scope: BranchScope = Depends(get_scope),
    store: BranchConfigStore = Depends(get_config_store),
):
    try:
        config = await store.update_notification_config(scope, body.enabled, body.email)
    except NotConfiguredError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ConfigUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return NotificationSettingsResponse(
        enabled=config.enabled,
        email=config.email,
        updated_at=config.updated_at,
    )
