"""Exception hierarchy for the notification and report flows."""

from typing import Optional


class MerchantNotificationsError(Exception):
    """Base class for all service errors."""


class ConfigUnavailableError(MerchantNotificationsError):
    """Branch configuration could not be read from the document store."""

    def __init__(self, scope: str, reason: Optional[str] = None):
        self.scope = scope
        self.reason = reason
        message = f"Configuration unavailable for {scope}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class NotConfiguredError(MerchantNotificationsError):
    """Notifications are enabled but no destination email is set."""
