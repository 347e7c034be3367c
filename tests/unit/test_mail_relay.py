"""
Test Mail Relay Client
======================
Wire format and response normalisation, driven by httpx.MockTransport.
"""

import json
from datetime import datetime, timezone

import httpx
import pytest

from merchant_notifications.models import OrderNotificationPayload, ReportPayload, StatusCount, TopItem
from merchant_notifications.services import MailRelayClient
from tests.conftest import make_order

RELAY_URL = "https://relay.test/send"


def relay_with(handler) -> MailRelayClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return MailRelayClient(endpoint=RELAY_URL, timeout=10.0, http_client=http_client)


def order_payload() -> OrderNotificationPayload:
    return OrderNotificationPayload.from_order(make_order(), to_email="m@x.com", merchant_name="Corner Cafe")


def report_payload() -> ReportPayload:
    return ReportPayload(
        merchant_name="Corner Cafe",
        date_range_label="5/10/2024 - 5/17/2024",
        total_orders=12,
        total_revenue=240.5,
        served_orders=10,
        cancelled_orders=1,
        average_order=20.04,
        top_items=[TopItem(name="Latte", count=8, revenue=28.0)],
        orders_by_status=[StatusCount(status="completed", count=10)],
        to_email="m@x.com",
    )


class TestOrderNotification:

    @pytest.mark.asyncio
    async def test_posts_order_body(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["method"] = request.method
            captured["url"] = str(request.url)
            captured["headers"] = request.headers
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True})

        result = await relay_with(handler).send_order_notification(order_payload())

        assert result.success is True
        assert result.error is None
        assert captured["method"] == "POST"
        assert captured["url"] == RELAY_URL
        assert "authorization" not in captured["headers"]
        body = captured["body"]
        assert body["type"] == "order"
        assert body["orderNumber"] == "A-001"
        assert body["table"] == "5"
        assert body["items"] == [{"name": "Latte", "quantity": 2, "price": 3.5}]
        assert body["subtotal"] == 7.0
        assert body["toEmail"] == "m@x.com"
        assert body["merchantName"] == "Corner Cafe"
        assert datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00")).tzinfo is not None

    @pytest.mark.asyncio
    async def test_server_error_is_failure(self):
        def handler(request):
            return httpx.Response(500, text="Internal Server Error")

        result = await relay_with(handler).send_order_notification(order_payload())

        assert result.success is False
        assert result.error
        assert result.status_code == 500

    @pytest.mark.asyncio
    async def test_relay_error_message_is_surfaced(self):
        def handler(request):
            return httpx.Response(400, json={"success": False, "error": "Invalid recipient"})

        result = await relay_with(handler).send_order_notification(order_payload())

        assert result.success is False
        assert result.error == "Invalid recipient"

    @pytest.mark.asyncio
    async def test_network_error_is_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = await relay_with(handler).send_order_notification(order_payload())

        assert result.success is False
        assert "Network error" in result.error

    @pytest.mark.asyncio
    async def test_timeout_is_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        result = await relay_with(handler).send_order_notification(order_payload())

        assert result.success is False
        assert "timed out" in result.error

    @pytest.mark.asyncio
    async def test_invalid_endpoint_is_failure(self):
        def handler(request):
            return httpx.Response(200, json={"success": True})

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        relay = MailRelayClient(endpoint="http://exa mple.com:abc/send", timeout=1.0, http_client=http_client)

        result = await relay.send_order_notification(order_payload())

        assert result.success is False
        assert "Invalid mail relay URL" in result.error


class TestReport:

    @pytest.mark.asyncio
    async def test_posts_report_body(self):
        captured = {}

        def handler(request):
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "id": "msg-1"})

        result = await relay_with(handler).send_report(report_payload())

        assert result.success is True
        body = captured["body"]
        assert body["type"] == "report"
        assert body["merchantName"] == "Corner Cafe"
        assert body["dateRangeLabel"] == "5/10/2024 - 5/17/2024"
        assert body["totalOrders"] == 12
        assert body["servedOrders"] == 10
        assert body["cancelledOrders"] == 1
        assert body["averageOrder"] == 20.04
        assert body["topItems"] == [{"name": "Latte", "count": 8, "revenue": 28.0}]
        assert body["ordersByStatus"] == [{"status": "completed", "count": 10}]
        assert body["toEmail"] == "m@x.com"

    @pytest.mark.asyncio
    async def test_non_json_success_body_is_failure(self):
        def handler(request):
            return httpx.Response(200, text="<html>ok</html>")

        result = await relay_with(handler).send_report(report_payload())

        assert result.success is False
        assert result.error == "Malformed response from mail relay"

    @pytest.mark.asyncio
    async def test_unconfirmed_delivery_is_failure(self):
        def handler(request):
            return httpx.Response(200, json={"success": False})

        result = await relay_with(handler).send_report(report_payload())

        assert result.success is False
        assert result.error

    @pytest.mark.asyncio
    async def test_not_found_without_body(self):
        def handler(request):
            return httpx.Response(404)

        result = await relay_with(handler).send_report(report_payload())

        assert result.success is False
        assert result.error == "Mail relay returned HTTP 404"


class TestClientLifecycle:

    @pytest.mark.asyncio
    async def test_aclose_releases_owned_client(self):
        relay = MailRelayClient(endpoint=RELAY_URL, timeout=1.0)
        client = relay._get_client()

        await relay.aclose()

        assert client.is_closed is True
        assert relay._client is None

    @pytest.mark.asyncio
    async def test_aclose_leaves_shared_client_open(self):
        shared = httpx.AsyncClient()
        relay = MailRelayClient(endpoint=RELAY_URL, timeout=1.0, http_client=shared)

        await relay.aclose()

        assert shared.is_closed is False
        await shared.aclose()

    def test_defaults_come_from_settings(self):
        relay = MailRelayClient()

        assert relay.endpoint == "https://relay.test/send"
        assert relay.timeout == 10.0
