"""Change notifications for orders, order lines and tables.

Every write that a staff view cares about publishes a
:class:`ChangeNotification` on the channel ``restaurant:{id}``. Subscribers
receive them on a bounded :class:`asyncio.Queue`. A subscriber that falls
too far behind is dropped and has to resubscribe (and refetch).

:class:`RedisChangeFeed` relays notifications through Redis pub/sub so that
several worker processes see each other's writes.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Dict, Optional, Set

import redis.asyncio as redis

from restaurantos.core.config import settings

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "restaurant:"

COLLECTIONS = ("orders", "order_items", "tables")
EVENTS = ("insert", "update", "delete")


class SubscriptionDropped(Exception):
    """Raised to a subscriber whose queue overflowed."""


@dataclass(frozen=True)
class ChangeNotification:
    restaurant_id: str
    collection: str
    event: str
    record_id: Optional[str] = None

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, raw: str | bytes) -> "ChangeNotification":
        if isinstance(raw, bytes):
            raw = raw.decode()
        return cls(**json.loads(raw))


def channel_for(restaurant_id: str) -> str:
    return f"{CHANNEL_PREFIX}{restaurant_id}"


_DROPPED = object()


class Subscription:
    """One subscriber's view of a restaurant channel."""

    def __init__(self, feed: "ChangeFeed", restaurant_id: str, maxsize: int) -> None:
        self.feed = feed
        self.restaurant_id = restaurant_id
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    def _offer(self, notification: ChangeNotification) -> bool:
        try:
            self.queue.put_nowait(notification)
            return True
        except asyncio.QueueFull:
            # Make room for the drop marker so the consumer wakes up.
            while not self.queue.empty():
                self.queue.get_nowait()
            self.queue.put_nowait(_DROPPED)
            return False

    async def get(self, timeout: Optional[float] = None) -> Optional[ChangeNotification]:
        """Next notification, or ``None`` when ``timeout`` expires first."""
        try:
            item = await asyncio.wait_for(self.queue.get(), timeout)
        except asyncio.TimeoutError:
            return None
        if item is _DROPPED:
            self.closed = True
            raise SubscriptionDropped(self.restaurant_id)
        return item

    def unsubscribe(self) -> None:
        self.closed = True
        self.feed._remove(self)

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc) -> None:
        self.unsubscribe()


class ChangeFeed:
    """In-process pub/sub keyed by restaurant."""

    def __init__(self, queue_size: int = 100) -> None:
        self.queue_size = queue_size
        self._subs: Dict[str, Set[Subscription]] = defaultdict(set)

    def subscribe(self, restaurant_id: str) -> Subscription:
        sub = Subscription(self, restaurant_id, self.queue_size)
        self._subs[restaurant_id].add(sub)
        return sub

    def _remove(self, sub: Subscription) -> None:
        subs = self._subs.get(sub.restaurant_id)
        if subs is None:
            return
        subs.discard(sub)
        if not subs:
            self._subs.pop(sub.restaurant_id, None)

    def subscriber_count(self, restaurant_id: str) -> int:
        return len(self._subs.get(restaurant_id, ()))

    def _deliver(self, notification: ChangeNotification) -> None:
        for sub in list(self._subs.get(notification.restaurant_id, ())):
            if not sub._offer(notification):
                logger.warning(
                    "Dropping slow subscriber",
                    extra={"restaurant_id": notification.restaurant_id},
                )
                self._remove(sub)

    async def publish(self, notification: ChangeNotification) -> None:
        self._deliver(notification)

    async def notify(
        self,
        restaurant_id: str,
        collection: str,
        event: str,
        record_id: Optional[str] = None,
    ) -> None:
        """Publish a notification; failures are logged and never raised to the writer."""
        notification = ChangeNotification(restaurant_id, collection, event, record_id)
        try:
            await self.publish(notification)
        except Exception:
            logger.exception(
                "Failed to publish change notification",
                extra={"restaurant_id": restaurant_id, "collection": collection},
            )

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass


class RedisChangeFeed(ChangeFeed):
    """Change feed relayed through Redis pub/sub."""

    def __init__(self, url: str, queue_size: int = 100) -> None:
        super().__init__(queue_size)
        self.url = url
        self._client: Optional[redis.Redis] = None
        self._pubsub = None
        self._listener: Optional[asyncio.Task] = None

    async def start(self) -> None:
        if self._client:
            return
        self._client = redis.from_url(self.url, decode_responses=True)
        await self._client.ping()
        self._pubsub = self._client.pubsub()
        await self._pubsub.psubscribe(f"{CHANNEL_PREFIX}*")
        self._listener = asyncio.create_task(self._listen())
        logger.info("Change feed connected to Redis")

    async def stop(self) -> None:
        if self._listener:
            self._listener.cancel()
            try:
                await self._listener
            except asyncio.CancelledError:
                pass
            self._listener = None
        if self._pubsub:
            await self._pubsub.punsubscribe()
            await self._pubsub.aclose()
            self._pubsub = None
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _listen(self) -> None:
        async for message in self._pubsub.listen():
            if message.get("type") != "pmessage":
                continue
            try:
                notification = ChangeNotification.from_json(message["data"])
            except (TypeError, ValueError):
                logger.warning("Ignoring malformed change notification: %r", message["data"])
                continue
            self._deliver(notification)

    async def publish(self, notification: ChangeNotification) -> None:
        if not self._client:
            # Not started; behave like the in-process feed.
            self._deliver(notification)
            return
        await self._client.publish(channel_for(notification.restaurant_id), notification.to_json())


def build_change_feed(redis_url: Optional[str] = None, queue_size: int = 100) -> ChangeFeed:
    if redis_url:
        return RedisChangeFeed(redis_url, queue_size)
    return ChangeFeed(queue_size)


change_feed = build_change_feed(settings.redis_url, settings.subscriber_queue_size)


def get_change_feed() -> ChangeFeed:
    return change_feed
