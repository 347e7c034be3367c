from merchant_notifications.services.config_store import BranchConfigStore
from merchant_notifications.services.mail_relay import MailRelayClient
from merchant_notifications.services.order_feed import (
    ChangeStreamOrderFeed,
    OrderFeed,
    PollingOrderFeed,
    make_feed_factory,
)
from merchant_notifications.services.order_listener import OrderChangeListener
from merchant_notifications.services.report_requester import ReportRequester

__all__ = [
    "BranchConfigStore",
    "ChangeStreamOrderFeed",
    "MailRelayClient",
    "OrderChangeListener",
    "OrderFeed",
    "PollingOrderFeed",
    "ReportRequester",
    "make_feed_factory",
]
