"""
Order Feed
==========
Sources of newly created orders for one branch.

A feed is a lazy, infinite, non-restartable async sequence: ``orders()`` may
be iterated once, and yields an ``OrderRecord`` for every order inserted after
the feed started (change stream) or after its last checkpoint (polling).
The listener never cares which transport is behind it.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Optional

from pydantic import ValidationError

from merchant_notifications.config.logging import get_logger
from merchant_notifications.config.settings import OrderFeedMode, get_settings
from merchant_notifications.models import BranchScope, OrderRecord

logger = get_logger(__name__)


class OrderFeed(ABC):
    """Abstract feed of newly created orders for a single scope."""

    def __init__(self, scope: BranchScope):
        self.scope = scope
        self._consumed = False

    def orders(self) -> AsyncIterator[OrderRecord]:
        """Return the order iterator. A feed can be consumed only once."""
        if self._consumed:
            raise RuntimeError(f"Order feed for {self.scope} has already been consumed")
        self._consumed = True
        return self._iterate()

    @abstractmethod
    def _iterate(self) -> AsyncIterator[OrderRecord]:
        """Yield new orders forever."""

    def _parse(self, document: dict) -> Optional[OrderRecord]:
        try:
            return OrderRecord.from_document(document)
        except ValidationError as e:
            logger.warning(
                "Skipping malformed order document",
                scope=str(self.scope),
                document_id=str(document.get("_id")),
                error=str(e),
            )
            return None


class ChangeStreamOrderFeed(OrderFeed):
    """Push feed backed by a MongoDB change stream on the orders collection.

    Only ``insert`` events are watched; later status updates never surface.
    Requires a replica set or sharded cluster.
    """

    def __init__(self, scope: BranchScope, collection):
        super().__init__(scope)
        self.collection = collection

    def pipeline(self) -> list:
        return [
            {
                "$match": {
                    "operationType": "insert",
                    "fullDocument.merchantId": self.scope.merchant_id,
                    "fullDocument.branchId": self.scope.branch_id,
                }
            }
        ]

    async def _iterate(self) -> AsyncIterator[OrderRecord]:
        async with self.collection.watch(self.pipeline()) as stream:
            logger.info("Order change stream opened", scope=str(self.scope))
            async for change in stream:
                document = change.get("fullDocument")
                if not document:
                    continue
                order = self._parse(document)
                if order is not None:
                    yield order


class PollingOrderFeed(OrderFeed):
    """Pull feed that queries for orders created after the last one seen.

    For deployments without change streams (standalone MongoDB).
    """

    def __init__(
        self,
        scope: BranchScope,
        collection,
        poll_interval: float = 5.0,
        since: Optional[datetime] = None,
        batch_size: int = 100,
    ):
        super().__init__(scope)
        self.collection = collection
        self.poll_interval = poll_interval
        self.batch_size = batch_size
        self._checkpoint = since or datetime.now(timezone.utc)

    async def _iterate(self) -> AsyncIterator[OrderRecord]:
        logger.info("Order polling started", scope=str(self.scope), interval=self.poll_interval)
        while True:
            query = {**self.scope.as_filter(), "createdAt": {"$gt": self._checkpoint}}
            cursor = self.collection.find(query).sort("createdAt", 1).limit(self.batch_size)
            async for document in cursor:
                created_at = document.get("createdAt")
                if isinstance(created_at, datetime):
                    if created_at.tzinfo is None:
                        created_at = created_at.replace(tzinfo=timezone.utc)
                    # advance past malformed documents too
                    self._checkpoint = max(self._checkpoint, created_at)
                order = self._parse(document)
                if order is not None:
                    yield order
            await asyncio.sleep(self.poll_interval)


OrderFeedFactory = Callable[[BranchScope], OrderFeed]


def make_feed_factory(collection, mode: Optional[OrderFeedMode] = None) -> OrderFeedFactory:
    """Build a factory producing a fresh feed per subscription attempt."""
    settings = get_settings()
    mode = mode or settings.ORDER_FEED_MODE

    def factory(scope: BranchScope) -> OrderFeed:
        if mode == OrderFeedMode.POLLING:
            return PollingOrderFeed(scope, collection, poll_interval=settings.ORDER_POLL_INTERVAL)
        return ChangeStreamOrderFeed(scope, collection)

    return factory
