"""
Role-specific order views and their realtime synchronizer.

A view is always rebuilt from a full read. Change notifications only say
*that* something changed; the synchronizer answers each one by refetching,
and whichever fetch completes last is the snapshot clients see.
"""
import logging
from datetime import datetime
from typing import AsyncIterator, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurantos.core.config import settings
from restaurantos.crud import order as order_crud
from restaurantos.crud import table as table_crud
from restaurantos.domain.order_status import KITCHEN_STATUSES, OrderStatus, timing_state
from restaurantos.schemas.table import TableRead
from restaurantos.schemas.views import ViewKind, ViewLine, ViewOrder, ViewSnapshot
from restaurantos.services.change_feed import ChangeFeed, SubscriptionDropped
from restaurantos.utils.time import start_of_day, utcnow

logger = logging.getLogger(__name__)


class ViewRefreshError(Exception):
    """A refetch failed; the previous snapshot is still current."""


def to_view_order(order, now: datetime) -> ViewOrder:
    lines = [
        ViewLine(
            id=line.id,
            menu_item_id=line.menu_item_id,
            item_name=line.item_name,
            quantity=line.quantity,
            unit_price=line.unit_price,
            prep_time=line.menu_item.prep_time if line.menu_item else None,
            special_instructions=line.special_instructions,
        )
        for line in order.lines
    ]
    return ViewOrder(
        id=order.id,
        table_number=order.table_number,
        customer_name=order.customer_name,
        status=OrderStatus(order.status),
        total_amount=order.total_amount,
        estimated_time=order.estimated_time,
        special_instructions=order.special_instructions,
        created_at=order.created_at,
        item_count=sum(line.quantity for line in order.lines),
        timing=timing_state(
            order.created_at,
            order.estimated_time,
            now,
            default_estimate=settings.default_estimate_minutes,
            critical_after=settings.critical_overdue_minutes,
        ),
        lines=lines,
    )


async def fetch_view(
    db: AsyncSession,
    restaurant_id: str,
    kind: ViewKind,
    now: Optional[datetime] = None,
) -> ViewSnapshot:
    now = now or utcnow()
    tables = None

    if kind == ViewKind.kitchen:
        orders = await order_crud.get_orders(
            db, restaurant_id, statuses=[s.value for s in KITCHEN_STATUSES]
        )
    elif kind == ViewKind.waiter:
        ready = await order_crud.get_orders(db, restaurant_id, statuses=[OrderStatus.READY.value])
        delivered_today = await order_crud.get_orders(
            db,
            restaurant_id,
            statuses=[OrderStatus.DELIVERED.value],
            updated_since=start_of_day(now),
        )
        orders = sorted([*ready, *delivered_today], key=lambda o: o.created_at, reverse=True)
        tables = await table_crud.get_tables(db, restaurant_id)
    else:
        orders = await order_crud.get_orders(db, restaurant_id)
        tables = await table_crud.get_tables(db, restaurant_id)

    return ViewSnapshot(
        kind=kind,
        restaurant_id=restaurant_id,
        fetched_at=now,
        orders=[to_view_order(order, now) for order in orders],
        tables=[TableRead.model_validate(t) for t in tables] if tables is not None else None,
    )


def _belongs_in_view(kind: ViewKind, status: OrderStatus) -> bool:
    if kind == ViewKind.kitchen:
        return status in KITCHEN_STATUSES
    if kind == ViewKind.waiter:
        return status in (OrderStatus.READY, OrderStatus.DELIVERED)
    return True


class OrderViewSynchronizer:
    """Keeps one view's snapshot current by refetching on every change.

    Usage::

        async with OrderViewSynchronizer(restaurant_id, ViewKind.kitchen, feed, async_session) as sync:
            async for event, payload in sync.updates():
                ...
    """

    def __init__(self, restaurant_id: str, kind: ViewKind, feed: ChangeFeed, session_factory):
        self.restaurant_id = restaurant_id
        self.kind = kind
        self.feed = feed
        self.session_factory = session_factory
        self.snapshot: Optional[ViewSnapshot] = None
        self.last_error: Optional[Exception] = None
        self._subscription = None

    async def start(self) -> ViewSnapshot:
        # Subscribe before the first read so no change slips in between.
        self._subscription = self.feed.subscribe(self.restaurant_id)
        return await self.refresh()

    async def stop(self) -> None:
        if self._subscription:
            self._subscription.unsubscribe()
            self._subscription = None

    async def __aenter__(self) -> "OrderViewSynchronizer":
        try:
            await self.start()
        except ViewRefreshError:
            await self.stop()
            raise
        return self

    async def __aexit__(self, *exc) -> None:
        await self.stop()

    async def refresh(self) -> ViewSnapshot:
        """Full refetch. On failure the previous snapshot is kept."""
        try:
            async with self.session_factory() as db:
                snapshot = await fetch_view(db, self.restaurant_id, self.kind)
        except SQLAlchemyError as exc:
            self.last_error = exc
            logger.warning(
                "Failed to refresh %s view", self.kind.value,
                exc_info=True, extra={"restaurant_id": self.restaurant_id},
            )
            raise ViewRefreshError(str(exc)) from exc

        self.snapshot = snapshot
        self.last_error = None
        return snapshot

    async def process_next(self, timeout: Optional[float] = None) -> Optional[ViewSnapshot]:
        """Refetch for the next notification, or return None if none arrives in time."""
        notification = await self._subscription.get(timeout=timeout)
        if notification is None:
            return None
        return await self.refresh()

    def apply_optimistic(self, order_id: str, status: OrderStatus) -> None:
        """Patch the local snapshot ahead of the server; the next refresh wins."""
        if not self.snapshot:
            return
        orders = []
        for order in self.snapshot.orders:
            if order.id == order_id:
                order = order.model_copy(update={"status": status})
                if not _belongs_in_view(self.kind, status):
                    continue
            orders.append(order)
        self.snapshot = self.snapshot.model_copy(update={"orders": orders})

    async def updates(self, keepalive: Optional[float] = None) -> AsyncIterator[Tuple[str, object]]:
        """Yield ``("snapshot", ViewSnapshot)``, ``("error", str)`` or ``("keepalive", None)``.

        Ends after the subscription is dropped for falling behind.
        """
        if self._subscription is None:
            raise RuntimeError("Synchronizer not started")
        if self.snapshot is not None:
            yield "snapshot", self.snapshot

        while True:
            try:
                notification = await self._subscription.get(timeout=keepalive)
            except SubscriptionDropped:
                yield "error", "Too far behind; reconnect to resync"
                return
            if notification is None:
                yield "keepalive", None
                continue
            try:
                yield "snapshot", await self.refresh()
            except ViewRefreshError as exc:
                yield "error", str(exc)
