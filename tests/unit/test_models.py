"""Tests for scope, order and report models, and settings."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from merchant_notifications.config.settings import Environment, Settings
from merchant_notifications.main import run
from merchant_notifications.models import (
    AnalyticsDashboard,
    BranchScope,
    DateRange,
    NotificationConfig,
    OrderRecord,
)


class TestBranchScope:

    def test_parse(self):
        scope = BranchScope.parse("merchant-1/branch-1")

        assert scope == BranchScope("merchant-1", "branch-1")
        assert str(scope) == "merchants/merchant-1/branches/branch-1"

    @pytest.mark.parametrize("value", ["merchant-1", "/branch-1", "merchant-1/"])
    def test_parse_rejects_incomplete(self, value):
        with pytest.raises(ValueError):
            BranchScope.parse(value)

    def test_hashable_for_subscription_keys(self):
        assert len({BranchScope("m", "b"), BranchScope("m", "b")}) == 1


class TestNotificationConfig:

    @pytest.mark.parametrize(
        "enabled,email,expected",
        [
            (True, "m@x.com", True),
            (True, "", False),
            (True, "   ", False),
            (False, "m@x.com", False),
        ],
    )
    def test_is_deliverable(self, enabled, email, expected):
        assert NotificationConfig(enabled=enabled, email=email).is_deliverable is expected

    def test_reads_camel_case_document(self):
        config = NotificationConfig.model_validate({"enabled": True, "email": "m@x.com", "updatedAt": None})

        assert config.updated_at is None


class TestOrderRecord:

    def test_naive_created_at_is_utc(self):
        order = OrderRecord.from_document({
            "_id": "abc",
            "orderNumber": "A-001",
            "table": "T5",
            "items": [],
            "subtotal": 0,
            "createdAt": datetime(2024, 5, 17, 12, 0),
        })

        assert order.created_at.tzinfo == timezone.utc
        assert order.table == "T5"
        assert order.status == "pending"

    def test_age(self):
        created = datetime(2024, 5, 17, 12, 0, tzinfo=timezone.utc)
        order = OrderRecord(order_number="A-001", table=1, subtotal=1.0, created_at=created)

        assert order.age(created + timedelta(minutes=3)) == timedelta(minutes=3)


class TestDateRange:

    NOW = datetime(2024, 5, 17, 15, 30)

    def test_last_seven_days_includes_today(self):
        start, end = DateRange.LAST_7_DAYS.bounds(self.NOW)

        assert start == datetime(2024, 5, 11)
        assert end == datetime(2024, 5, 18)

    def test_yesterday(self):
        assert DateRange.YESTERDAY.bounds(self.NOW) == (datetime(2024, 5, 16), datetime(2024, 5, 17))

    def test_this_month(self):
        start, _ = DateRange.THIS_MONTH.bounds(self.NOW)

        assert start == datetime(2024, 5, 1)

    def test_dashboard_label(self):
        dashboard = AnalyticsDashboard(start_date=datetime(2024, 5, 1), end_date=datetime(2024, 5, 17))

        assert dashboard.date_range_label == "5/1/2024 - 5/17/2024"


class TestSettings:

    @pytest.mark.parametrize("limit", [0, 11])
    def test_top_items_limit_out_of_range_rejected(self, limit):
        with pytest.raises(ValidationError):
            Settings(REPORT_TOP_ITEMS_LIMIT=limit)

    def test_top_items_limit_within_range(self):
        assert Settings(REPORT_TOP_ITEMS_LIMIT=5).REPORT_TOP_ITEMS_LIMIT == 5

    @pytest.mark.parametrize(
        "environment,reload",
        [(Environment.PRODUCTION, False), (Environment.DEVELOPMENT, True)],
    )
    def test_run_reloads_only_in_development(self, environment, reload):
        with patch("merchant_notifications.main.settings", Settings(ENVIRONMENT=environment)), \
                patch("uvicorn.run") as uvicorn_run:
            run()

        assert uvicorn_run.call_args.kwargs["reload"] is reload
