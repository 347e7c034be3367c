"""Shared fixtures for unit and API tests."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from merchant_notifications.models import (
    BranchScope,
    Branding,
    DispatchResult,
    NotificationConfig,
    OrderItem,
    OrderRecord,
)
from merchant_notifications.services import MailRelayClient
from tests.fixtures.fake_config_store import FakeConfigStore

NOW = datetime(2024, 5, 17, 12, 0, tzinfo=timezone.utc)


def make_order(order_number: str = "A-001", minutes_ago: float = 2, **overrides) -> OrderRecord:
    data = {
        "order_number": order_number,
        "table": 5,
        "items": [OrderItem(name="Latte", quantity=2, price=3.5)],
        "subtotal": 7.0,
        "created_at": NOW - timedelta(minutes=minutes_ago),
        "status": "pending",
    }
    data.update(overrides)
    return OrderRecord(**data)


@pytest.fixture
def scope():
    return BranchScope("merchant-1", "branch-1")


@pytest.fixture
def enabled_store(scope):
    return FakeConfigStore(
        configs={scope: NotificationConfig(enabled=True, email="m@x.com")},
        brandings={scope: Branding(title="Corner Cafe")},
    )


@pytest.fixture
def mail_relay():
    relay = AsyncMock(spec=MailRelayClient)
    relay.send_order_notification.return_value = DispatchResult.ok(status_code=200)
    relay.send_report.return_value = DispatchResult.ok(status_code=200)
    return relay
