"""Per-branch notification preferences, branding and relay payloads."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from merchant_notifications.models.orders import CamelModel, OrderItem, OrderRecord


class NotificationConfig(CamelModel):
    """The ``emailNotifications`` block of a branch's settings document."""
    enabled: bool = False
    email: str = ""
    updated_at: Optional[datetime] = None

    @property
    def is_deliverable(self) -> bool:
        """True when an email can actually be sent."""
        return self.enabled and bool(self.email.strip())


class Branding(CamelModel):
    """Branch branding; only the store title matters for emails."""
    title: Optional[str] = None

    def display_name(self, default: str) -> str:
        if self.title and self.title.strip():
            return self.title.strip()
        return default


class OrderNotificationPayload(CamelModel):
    """Relay body announcing a single new order."""
    type: Literal["order"] = "order"
    to_email: str
    merchant_name: str
    order_number: str
    table: str
    items: List[OrderItem] = Field(default_factory=list)
    subtotal: float
    timestamp: datetime

    @classmethod
    def from_order(
        cls,
        order: OrderRecord,
        to_email: str,
        merchant_name: str,
    ) -> "OrderNotificationPayload":
        return cls(
            to_email=to_email,
            merchant_name=merchant_name,
            order_number=order.order_number,
            table=str(order.table),
            items=list(order.items),
            subtotal=order.subtotal,
            timestamp=order.created_at,
        )
