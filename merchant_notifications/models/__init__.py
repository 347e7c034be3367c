from merchant_notifications.models.scope import BranchScope
from merchant_notifications.models.orders import OrderItem, OrderRecord, OrderStatus
from merchant_notifications.models.notifications import (
    Branding,
    NotificationConfig,
    OrderNotificationPayload,
)
from merchant_notifications.models.reports import (
    AnalyticsDashboard,
    DateRange,
    DispatchResult,
    ReportOutcome,
    ReportPayload,
    ReportStatus,
    SalesAnalytics,
    StatusCount,
    TopItem,
    TopProduct,
)

__all__ = [
    "AnalyticsDashboard",
    "BranchScope",
    "Branding",
    "DateRange",
    "DispatchResult",
    "NotificationConfig",
    "OrderItem",
    "OrderNotificationPayload",
    "OrderRecord",
    "OrderStatus",
    "ReportOutcome",
    "ReportPayload",
    "ReportStatus",
    "SalesAnalytics",
    "StatusCount",
    "TopItem",
    "TopProduct",
]
