"""
Order status transitions

Orders move one step at a time, pending -> cooking -> ready -> delivered.
Each write is a compare-and-set on the status the caller saw, so two staff
members racing on the same order can't move it backwards or twice.
"""
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from restaurantos.core.config import settings
from restaurantos.crud import order as order_crud
from restaurantos.domain.order_status import (
    OrderStatus,
    StaffRole,
    can_transition,
    estimate_minutes,
    role_can_trigger,
)
from restaurantos.models.order import Order
from restaurantos.services.change_feed import ChangeFeed

logger = logging.getLogger(__name__)


class OrderNotFoundError(LookupError):
    pass


class InvalidTransitionError(ValueError):
    """Raised for skipped, backward or stale status moves"""
    pass


class TransitionNotPermittedError(PermissionError):
    pass


def estimated_time_for(order: Order) -> int:
    prep_times = [line.menu_item.prep_time if line.menu_item else None for line in order.lines]
    return estimate_minutes(
        prep_times,
        buffer_minutes=settings.estimate_buffer_minutes,
        default_prep=settings.default_prep_minutes,
        empty_default=settings.default_estimate_minutes,
    )


async def advance_order(
    db: AsyncSession,
    restaurant_id: str,
    order_id: str,
    target: OrderStatus,
    role: StaffRole,
    feed: Optional[ChangeFeed] = None,
) -> Order:
    order = await order_crud.get_order(db, order_id, restaurant_id)
    if not order:
        raise OrderNotFoundError(order_id)

    if not role_can_trigger(role, target):
        raise TransitionNotPermittedError(
            f"A {role.value} can't mark orders as {target.value}"
        )

    current = OrderStatus(order.status)
    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Order is {current.value} and can't move to {target.value}"
        )

    estimated_time = estimated_time_for(order) if target == OrderStatus.COOKING else None

    updated = await order_crud.update_status_if(
        db, order_id, restaurant_id, current.value, target.value, estimated_time
    )
    if not updated:
        raise InvalidTransitionError("Order was updated by someone else. Refresh and try again")

    logger.info(
        "Order moved %s -> %s",
        current.value,
        target.value,
        extra={"restaurant_id": restaurant_id, "order_id": order_id},
    )
    if feed:
        await feed.notify(restaurant_id, "orders", "update", order_id)

    return await order_crud.get_order(db, order_id, restaurant_id)


async def start_cooking(db, restaurant_id, order_id, role, feed=None):
    return await advance_order(db, restaurant_id, order_id, OrderStatus.COOKING, role, feed)


async def mark_ready(db, restaurant_id, order_id, role, feed=None):
    return await advance_order(db, restaurant_id, order_id, OrderStatus.READY, role, feed)


async def mark_delivered(db, restaurant_id, order_id, role, feed=None):
    return await advance_order(db, restaurant_id, order_id, OrderStatus.DELIVERED, role, feed)
