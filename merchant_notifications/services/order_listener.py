"""
Order Change Listener
=====================
Watches the orders of a branch and emails the merchant about each new order.

Features:
- One subscription per branch; ``start`` is idempotent
- Freshness window drops orders replayed after a reconnect
- Each order is dispatched in its own fire-and-forget task
- Feed failures are logged and the subscription re-opens with backoff

Dispatch tasks share no mutable state: each one reads the remote config,
builds its own payload and makes one relay call. Orders arriving in a burst
may therefore finish in any order, and no lock or queue is involved. The only
local bookkeeping is the set of task references, which keeps the event loop
from garbage-collecting tasks that are still running.

Usage:
    listener = OrderChangeListener(feed_factory, config_store, mail_relay)
    await listener.start(BranchScope("m1", "b1"))
    ...
    await listener.stop(BranchScope("m1", "b1"))
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Set

from merchant_notifications.config.logging import get_logger
from merchant_notifications.config.settings import get_settings
from merchant_notifications.core.exceptions import ConfigUnavailableError
from merchant_notifications.models import (
    BranchScope,
    Branding,
    DispatchResult,
    OrderNotificationPayload,
    OrderRecord,
)
from merchant_notifications.services.config_store import BranchConfigStore
from merchant_notifications.services.mail_relay import MailRelayClient
from merchant_notifications.services.order_feed import OrderFeedFactory

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderChangeListener:
    """Turns order insertions into at most one notification each."""

    def __init__(
        self,
        feed_factory: OrderFeedFactory,
        config_store: BranchConfigStore,
        mail_relay: MailRelayClient,
        freshness_window: Optional[timedelta] = None,
        retry_delay: Optional[float] = None,
        max_retry_delay: Optional[float] = None,
        default_merchant_name: Optional[str] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        settings = get_settings()
        self.feed_factory = feed_factory
        self.config_store = config_store
        self.mail_relay = mail_relay
        self.freshness_window = freshness_window or timedelta(
            seconds=settings.ORDER_FRESHNESS_WINDOW_SECONDS
        )
        self.retry_delay = retry_delay or settings.ORDER_FEED_RETRY_DELAY
        self.max_retry_delay = max_retry_delay or settings.ORDER_FEED_MAX_RETRY_DELAY
        self.default_merchant_name = default_merchant_name or settings.DEFAULT_MERCHANT_NAME
        self.clock = clock

        self._subscriptions: Dict[BranchScope, asyncio.Task] = {}
        self._dispatch_tasks: Set[asyncio.Task] = set()

    @property
    def active_scopes(self) -> List[BranchScope]:
        return [scope for scope, task in self._subscriptions.items() if not task.done()]

    def is_running(self, scope: BranchScope) -> bool:
        task = self._subscriptions.get(scope)
        return task is not None and not task.done()

    async def start(self, scope: BranchScope) -> bool:
        """
        Begin listening for new orders of ``scope``.

        Returns:
            True if a subscription was started, False if one was already live
        """
        if self.is_running(scope):
            logger.info("Order listener already running", scope=str(scope))
            return False

        self._subscriptions[scope] = asyncio.create_task(
            self._subscribe(scope),
            name=f"order-listener:{scope}",
        )
        logger.info("Order listener started", scope=str(scope))
        return True

    async def stop(self, scope: BranchScope) -> bool:
        """
        Cancel the subscription for ``scope``.

        In-flight dispatches are left to finish.

        Returns:
            True if a subscription was cancelled, False if none existed
        """
        task = self._subscriptions.pop(scope, None)
        if task is None:
            return False

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        logger.info("Order listener stopped", scope=str(scope))
        return True

    async def stop_all(self) -> None:
        for scope in list(self._subscriptions):
            await self.stop(scope)

    async def drain(self) -> None:
        """Wait for every in-flight dispatch task to finish."""
        while self._dispatch_tasks:
            await asyncio.gather(*list(self._dispatch_tasks), return_exceptions=True)

    async def _subscribe(self, scope: BranchScope) -> None:
        delay = self.retry_delay
        while True:
            feed = self.feed_factory(scope)
            try:
                async for order in feed.orders():
                    delay = self.retry_delay
                    self.handle_order(scope, order)
                logger.warning("Order feed ended unexpectedly", scope=str(scope))
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(
                    "Order feed failed",
                    scope=str(scope),
                    error=str(e),
                    retry_in=delay,
                )

            await asyncio.sleep(delay)
            delay = min(delay * 2, self.max_retry_delay)

    def is_fresh(self, order: OrderRecord, now: Optional[datetime] = None) -> bool:
        return order.age(now or self.clock()) <= self.freshness_window

    def handle_order(self, scope: BranchScope, order: OrderRecord) -> Optional[asyncio.Task]:
        """Schedule a dispatch for a fresh order; stale orders are dropped."""
        if not self.is_fresh(order):
            logger.debug(
                "Skipping stale order",
                scope=str(scope),
                order_number=order.order_number,
                created_at=order.created_at.isoformat(),
            )
            return None

        task = asyncio.create_task(
            self.dispatch(scope, order),
            name=f"order-dispatch:{scope}:{order.order_number}",
        )
        self._dispatch_tasks.add(task)
        task.add_done_callback(self._dispatch_tasks.discard)
        return task

    async def dispatch(self, scope: BranchScope, order: OrderRecord) -> Optional[DispatchResult]:
        """
        Make one notification attempt for ``order``.

        Returns:
            The relay result, or None when nothing was sent
        """
        try:
            try:
                config = await self.config_store.get_notification_config(scope)
            except ConfigUnavailableError as e:
                logger.warning(
                    "Notification settings unavailable, treating as disabled",
                    scope=str(scope),
                    order_number=order.order_number,
                    error=str(e),
                )
                return None

            if config is None or not config.is_deliverable:
                logger.debug(
                    "Order notifications disabled",
                    scope=str(scope),
                    order_number=order.order_number,
                )
                return None

            try:
                branding = await self.config_store.get_branding(scope)
            except ConfigUnavailableError:
                branding = Branding()

            payload = OrderNotificationPayload.from_order(
                order,
                to_email=config.email.strip(),
                merchant_name=branding.display_name(self.default_merchant_name),
            )
            result = await self.mail_relay.send_order_notification(payload)

            if result.success:
                logger.info("Order notification sent", scope=str(scope), order_number=order.order_number)
            else:
                logger.warning(
                    "Order notification failed",
                    scope=str(scope),
                    order_number=order.order_number,
                    error=result.error,
                )
            return result

        except Exception:
            logger.exception(
                "Order notification crashed",
                scope=str(scope),
                order_number=order.order_number,
            )
            return None
