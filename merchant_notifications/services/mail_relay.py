"""
Mail Relay Client
=================
Posts order notifications and sales reports to the mail relay over HTTPS.

The relay owns templating, delivery and its own API secret; callers send a
JSON body discriminated by ``type`` (``"order"`` or ``"report"``) and get a
``DispatchResult`` back. Nothing here raises and nothing is retried.
"""

from typing import Any, Dict, Optional

import httpx

from merchant_notifications.config.logging import get_logger
from merchant_notifications.config.settings import get_settings
from merchant_notifications.models import DispatchResult, OrderNotificationPayload, ReportPayload

logger = get_logger(__name__)


class MailRelayClient:
    """Stateless request/response client for the mail relay."""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            endpoint: Relay URL, fixed for the lifetime of the client
            timeout: Seconds before a call is abandoned
            http_client: Shared client; one is created lazily when omitted
        """
        settings = get_settings()
        self.endpoint = endpoint or settings.MAIL_RELAY_URL
        self.timeout = timeout if timeout is not None else settings.MAIL_RELAY_TIMEOUT
        self._client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def send_order_notification(self, payload: OrderNotificationPayload) -> DispatchResult:
        """Send a new-order email."""
        return await self._post(payload.to_wire(), kind="order", reference=payload.order_number)

    async def send_report(self, payload: ReportPayload) -> DispatchResult:
        """Send a sales report email."""
        return await self._post(payload.to_wire(), kind="report", reference=payload.date_range_label)

    async def _post(self, body: Dict[str, Any], kind: str, reference: str) -> DispatchResult:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        try:
            response = await self._get_client().post(
                self.endpoint,
                json=body,
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.TimeoutException:
            logger.error("Mail relay timed out", kind=kind, reference=reference, timeout=self.timeout)
            return DispatchResult.failure(f"Mail relay timed out after {self.timeout:g}s")
        except httpx.HTTPError as e:
            logger.error("Mail relay unreachable", kind=kind, reference=reference, error=str(e))
            return DispatchResult.failure(f"Network error: {str(e) or type(e).__name__}")
        except httpx.InvalidURL as e:
            logger.error("Mail relay URL invalid", kind=kind, reference=reference, error=str(e))
            return DispatchResult.failure(f"Invalid mail relay URL: {e}")

        result = self._parse_response(response)
        if result.success:
            logger.info("Mail relay accepted message", kind=kind, reference=reference)
        else:
            logger.error(
                "Mail relay rejected message",
                kind=kind,
                reference=reference,
                status_code=response.status_code,
                error=result.error,
            )
        return result

    @staticmethod
    def _parse_response(response: httpx.Response) -> DispatchResult:
        """Map a relay response to a DispatchResult."""
        try:
            data = response.json()
        except ValueError:
            data = None

        reason = None
        if isinstance(data, dict):
            reason = data.get("error") or data.get("message")

        if not response.is_success:
            error = reason or f"Mail relay returned HTTP {response.status_code}"
            return DispatchResult.failure(str(error), status_code=response.status_code)

        if not isinstance(data, dict):
            return DispatchResult.failure("Malformed response from mail relay", status_code=response.status_code)

        if not data.get("success"):
            return DispatchResult.failure(
                str(reason or "Mail relay did not confirm delivery"),
                status_code=response.status_code,
            )

        return DispatchResult.ok(status_code=response.status_code)
