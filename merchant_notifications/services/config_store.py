"""
Branch Configuration Store
==========================
Reads and writes the per-branch ``settings`` and ``branding`` documents.

Each branch has at most one document of each kind in the config collection::

    {"merchantId": "m1", "branchId": "b1", "kind": "settings",
     "emailNotifications": {"enabled": true, "email": "m@x.com", "updatedAt": ...}}
    {"merchantId": "m1", "branchId": "b1", "kind": "branding", "title": "Cafe"}

Nothing is cached: every call goes to the database.
"""

from datetime import datetime, timezone
from typing import Optional

from pymongo.errors import PyMongoError
from pydantic import ValidationError

from merchant_notifications.config.logging import get_logger
from merchant_notifications.core.exceptions import ConfigUnavailableError, NotConfiguredError
from merchant_notifications.models import BranchScope, Branding, NotificationConfig

logger = get_logger(__name__)

SETTINGS_KIND = "settings"
BRANDING_KIND = "branding"


class BranchConfigStore:
    """Accessor for branch configuration documents."""

    def __init__(self, collection):
        """
        Args:
            collection: Motor collection (or any object with async
                ``find_one``/``update_one``) holding config documents
        """
        self.collection = collection

    @staticmethod
    def _key(scope: BranchScope, kind: str) -> dict:
        return {**scope.as_filter(), "kind": kind}

    async def _read(self, scope: BranchScope, kind: str) -> Optional[dict]:
        try:
            return await self.collection.find_one(self._key(scope, kind))
        except PyMongoError as e:
            logger.error("Config read failed", scope=str(scope), kind=kind, error=str(e))
            raise ConfigUnavailableError(str(scope), str(e)) from e

    async def _write(self, scope: BranchScope, kind: str, fields: dict) -> None:
        try:
            await self.collection.update_one(
                self._key(scope, kind),
                {"$set": fields},
                upsert=True,
            )
        except PyMongoError as e:
            logger.error("Config write failed", scope=str(scope), kind=kind, error=str(e))
            raise ConfigUnavailableError(str(scope), str(e)) from e

    async def get_notification_config(self, scope: BranchScope) -> Optional[NotificationConfig]:
        """
        Fetch notification preferences.

        Returns:
            The stored config, or None when the branch has none

        Raises:
            ConfigUnavailableError: the document could not be read or parsed
        """
        document = await self._read(scope, SETTINGS_KIND)
        if not document or not document.get("emailNotifications"):
            return None
        try:
            return NotificationConfig.model_validate(document["emailNotifications"])
        except ValidationError as e:
            raise ConfigUnavailableError(str(scope), "malformed emailNotifications") from e

    async def get_branding(self, scope: BranchScope) -> Branding:
        """Fetch branding; an absent document yields empty branding."""
        document = await self._read(scope, BRANDING_KIND)
        if not document:
            return Branding()
        try:
            return Branding(title=document.get("title"))
        except ValidationError as e:
            raise ConfigUnavailableError(str(scope), "malformed branding") from e

    async def update_notification_config(
        self,
        scope: BranchScope,
        enabled: bool,
        email: str,
    ) -> NotificationConfig:
        """Overwrite the notification preferences of a branch."""
        email = (email or "").strip()
        if enabled and not email:
            raise NotConfiguredError("An email address is required to enable notifications")

        config = NotificationConfig(
            enabled=enabled,
            email=email,
            updated_at=datetime.now(timezone.utc),
        )
        await self._write(
            scope,
            SETTINGS_KIND,
            {"emailNotifications": config.model_dump(by_alias=True)},
        )
        logger.info("Notification settings updated", scope=str(scope), enabled=enabled)
        return config

    async def update_branding(self, scope: BranchScope, title: str) -> Branding:
        branding = Branding(title=title)
        await self._write(scope, BRANDING_KIND, {"title": branding.title})
        return branding
