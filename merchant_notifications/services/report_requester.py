"""Email a sales report built from the analytics dashboard."""

from typing import List, Optional

from merchant_notifications.config.logging import get_logger
from merchant_notifications.config.settings import get_settings
from merchant_notifications.core.exceptions import ConfigUnavailableError
from merchant_notifications.models import (
    AnalyticsDashboard,
    BranchScope,
    Branding,
    OrderStatus,
    ReportOutcome,
    ReportPayload,
    ReportStatus,
    SalesAnalytics,
    StatusCount,
    TopItem,
)
from merchant_notifications.services.config_store import BranchConfigStore
from merchant_notifications.services.mail_relay import MailRelayClient

logger = get_logger(__name__)


def status_breakdown(sales: SalesAnalytics) -> List[StatusCount]:
    """Completed, cancelled and pending counts, without empty buckets.

    Counts are clamped so the buckets never add up to more than the total,
    even when the supplied aggregates disagree.
    """
    total = max(sales.total_orders, 0)
    completed = min(max(sales.completed_orders, 0), total)
    cancelled = min(max(sales.cancelled_orders, 0), total - completed)
    pending = total - completed - cancelled
    buckets = [
        StatusCount(status=OrderStatus.COMPLETED.value, count=completed),
        StatusCount(status=OrderStatus.CANCELLED.value, count=cancelled),
        StatusCount(status=OrderStatus.PENDING.value, count=pending),
    ]
    return [bucket for bucket in buckets if bucket.count > 0]


def build_report_payload(
    dashboard: AnalyticsDashboard,
    merchant_name: str,
    to_email: str,
    top_items_limit: int = 10,
) -> ReportPayload:
    """Map dashboard aggregates onto the relay's report shape.

    Top products keep the aggregator's ordering (descending revenue).
    """
    sales = dashboard.sales
    top_items = [
        TopItem(name=product.name, count=product.order_count, revenue=product.revenue)
        for product in dashboard.top_products[:top_items_limit]
    ]
    return ReportPayload(
        merchant_name=merchant_name,
        date_range_label=dashboard.date_range_label,
        total_orders=sales.total_orders,
        total_revenue=sales.total_revenue,
        served_orders=sales.completed_orders,
        cancelled_orders=sales.cancelled_orders,
        average_order=sales.average_order_value,
        top_items=top_items,
        orders_by_status=status_breakdown(sales),
        to_email=to_email,
    )


class ReportRequester:
    """Resolves destination and branding, then sends one report."""

    def __init__(
        self,
        config_store: BranchConfigStore,
        mail_relay: MailRelayClient,
        default_merchant_name: Optional[str] = None,
        top_items_limit: Optional[int] = None,
    ):
        settings = get_settings()
        self.config_store = config_store
        self.mail_relay = mail_relay
        self.default_merchant_name = default_merchant_name or settings.DEFAULT_MERCHANT_NAME
        self.top_items_limit = top_items_limit or settings.REPORT_TOP_ITEMS_LIMIT

    async def send_report(self, scope: BranchScope, dashboard: AnalyticsDashboard) -> ReportOutcome:
        # Destination first; nothing is sent without one.
        try:
            config = await self.config_store.get_notification_config(scope)
        except ConfigUnavailableError as e:
            logger.error("Cannot load notification settings for report", scope=str(scope), error=str(e))
            return ReportOutcome(status=ReportStatus.FAILED, error="Could not load notification settings")

        email = config.email.strip() if config else ""
        if not email:
            logger.info("Report requested without a configured email", scope=str(scope))
            return ReportOutcome(status=ReportStatus.NOT_CONFIGURED)

        try:
            branding = await self.config_store.get_branding(scope)
        except ConfigUnavailableError:
            branding = Branding()

        payload = build_report_payload(
            dashboard,
            merchant_name=branding.display_name(self.default_merchant_name),
            to_email=email,
            top_items_limit=self.top_items_limit,
        )
        result = await self.mail_relay.send_report(payload)

        if result.success:
            logger.info("Sales report sent", scope=str(scope), date_range=payload.date_range_label)
            return ReportOutcome(status=ReportStatus.SENT, email=email)

        return ReportOutcome(
            status=ReportStatus.FAILED,
            email=email,
            error=result.error or "Failed to send email",
        )
