"""Analytics inputs, report payloads and dispatch results."""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import List, Literal, Optional, Tuple, Union

from pydantic import Field

from merchant_notifications.models.orders import CamelModel


class DateRange(str, Enum):
    """Dashboard period presets."""
    TODAY = "today"
    YESTERDAY = "yesterday"
    LAST_7_DAYS = "last7Days"
    LAST_30_DAYS = "last30Days"
    THIS_MONTH = "thisMonth"

    def bounds(self, now: datetime) -> Tuple[datetime, datetime]:
        """Start (inclusive) and end (exclusive) of the period containing ``now``."""
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        tomorrow = today + timedelta(days=1)
        if self is DateRange.TODAY:
            return today, tomorrow
        if self is DateRange.YESTERDAY:
            return today - timedelta(days=1), today
        if self is DateRange.LAST_7_DAYS:
            return tomorrow - timedelta(days=7), tomorrow
        if self is DateRange.LAST_30_DAYS:
            return tomorrow - timedelta(days=30), tomorrow
        return today.replace(day=1), tomorrow


def format_date_range(start: Union[date, datetime], end: Union[date, datetime]) -> str:
    """Render a period as ``M/D/YYYY - M/D/YYYY``."""
    return f"{start.month}/{start.day}/{start.year} - {end.month}/{end.day}/{end.year}"


class SalesAnalytics(CamelModel):
    total_orders: int = 0
    total_revenue: float = 0.0
    completed_orders: int = 0
    cancelled_orders: int = 0
    average_order_value: float = 0.0


class TopProduct(CamelModel):
    name: str
    order_count: int = 0
    revenue: float = 0.0


class AnalyticsDashboard(CamelModel):
    """Prebuilt dashboard produced by the analytics service."""
    start_date: datetime
    end_date: datetime
    sales: SalesAnalytics = Field(default_factory=SalesAnalytics)
    top_products: List[TopProduct] = Field(default_factory=list)

    @property
    def date_range_label(self) -> str:
        return format_date_range(self.start_date, self.end_date)


class TopItem(CamelModel):
    name: str
    count: int
    revenue: float


class StatusCount(CamelModel):
    status: str
    count: int


class ReportPayload(CamelModel):
    """Relay body for a sales summary email."""
    type: Literal["report"] = "report"
    merchant_name: str
    date_range_label: str
    total_orders: int
    total_revenue: float
    served_orders: int
    cancelled_orders: int
    average_order: float
    top_items: List[TopItem] = Field(default_factory=list)
    orders_by_status: List[StatusCount] = Field(default_factory=list)
    to_email: str


class DispatchResult(CamelModel):
    """Outcome of a single relay call."""
    success: bool
    error: Optional[str] = None
    status_code: Optional[int] = None

    @classmethod
    def ok(cls, status_code: Optional[int] = None) -> "DispatchResult":
        return cls(success=True, status_code=status_code)

    @classmethod
    def failure(cls, error: str, status_code: Optional[int] = None) -> "DispatchResult":
        return cls(success=False, error=error or "Unknown mail relay error", status_code=status_code)


class ReportStatus(str, Enum):
    SENT = "sent"
    NOT_CONFIGURED = "not_configured"
    FAILED = "failed"


class ReportOutcome(CamelModel):
    """What the report screen shows after a send attempt."""
    status: ReportStatus
    email: Optional[str] = None
    error: Optional[str] = None

    @property
    def sent(self) -> bool:
        return self.status == ReportStatus.SENT
