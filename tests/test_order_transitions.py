import pytest

from conftest import run
from restaurantos.crud import order as order_crud
from restaurantos.db import async_session
from restaurantos.domain.order_status import OrderStatus, StaffRole
from restaurantos.services.change_feed import ChangeFeed
from restaurantos.services.order_submission import submit_order
from restaurantos.services.order_transitions import (
    InvalidTransitionError,
    OrderNotFoundError,
    TransitionNotPermittedError,
    advance_order,
    mark_delivered,
    mark_ready,
    start_cooking,
)


def _place(world, **quantities):
    lines = [{"menu_item_id": world.items[k], "quantity": q} for k, q in quantities.items()]

    async def scenario():
        async with async_session() as db:
            return await submit_order(db, table_number=1, lines=lines)

    return run(scenario())


def _advance(world, order_id, target, role):
    async def scenario():
        async with async_session() as db:
            return await advance_order(db, world.restaurant_id, order_id, target, role)

    return run(scenario())


def test_full_lifecycle_sets_estimate_when_cooking_starts(world):
    order = _place(world, pasta=2, soup=1)
    feed = ChangeFeed()

    async def scenario():
        sub = feed.subscribe(world.restaurant_id)
        async with async_session() as db:
            cooking = await start_cooking(db, world.restaurant_id, order.id, StaffRole.CHEF, feed)
            ready = await mark_ready(db, world.restaurant_id, order.id, StaffRole.CHEF, feed)
            delivered = await mark_delivered(db, world.restaurant_id, order.id, StaffRole.WAITER, feed)
        notes = [await sub.get(timeout=0.1) for _ in range(3)]
        return cooking, ready, delivered, notes

    cooking, ready, delivered, notes = run(scenario())

    assert cooking.status == "cooking"
    # slowest line is the soup (22 minutes) plus the buffer
    assert cooking.estimated_time == 27
    assert ready.status == "ready"
    assert delivered.status == "delivered"
    assert delivered.estimated_time == 27
    assert all(n.collection == "orders" and n.event == "update" for n in notes)
    assert {n.record_id for n in notes} == {order.id}


def test_missing_prep_time_uses_default(world):
    order = _place(world, steak=1)
    cooking = _advance(world, order.id, OrderStatus.COOKING, StaffRole.OWNER)
    assert cooking.estimated_time == 20


@pytest.mark.parametrize("target", [OrderStatus.READY, OrderStatus.DELIVERED])
def test_pending_order_cannot_skip_ahead(world, target):
    order = _place(world, pasta=1)
    with pytest.raises(InvalidTransitionError):
        _advance(world, order.id, target, StaffRole.OWNER)


def test_orders_never_move_backwards(world):
    order = _place(world, pasta=1)
    _advance(world, order.id, OrderStatus.COOKING, StaffRole.CHEF)
    _advance(world, order.id, OrderStatus.READY, StaffRole.CHEF)

    with pytest.raises(InvalidTransitionError):
        _advance(world, order.id, OrderStatus.COOKING, StaffRole.CHEF)

    _advance(world, order.id, OrderStatus.DELIVERED, StaffRole.WAITER)
    for target in OrderStatus:
        with pytest.raises((InvalidTransitionError, TransitionNotPermittedError)):
            _advance(world, order.id, target, StaffRole.ADMIN)


@pytest.mark.parametrize(
    "role,target",
    [
        (StaffRole.WAITER, OrderStatus.COOKING),
        (StaffRole.WAITER, OrderStatus.READY),
        (StaffRole.CHEF, OrderStatus.DELIVERED),
    ],
)
def test_roles_are_limited_to_their_steps(world, role, target):
    order = _place(world, pasta=1)
    with pytest.raises(TransitionNotPermittedError):
        _advance(world, order.id, target, role)


def test_unknown_order(world):
    with pytest.raises(OrderNotFoundError):
        _advance(world, "missing-order", OrderStatus.COOKING, StaffRole.CHEF)


def test_order_from_another_restaurant_is_not_found(world):
    order = _place(world, pasta=1)

    async def scenario():
        async with async_session() as db:
            await advance_order(db, "other-restaurant", order.id, OrderStatus.COOKING, StaffRole.OWNER)

    with pytest.raises(OrderNotFoundError):
        run(scenario())


def test_status_write_is_compare_and_set(world):
    order = _place(world, pasta=1)

    async def scenario():
        async with async_session() as db:
            first = await order_crud.update_status_if(
                db, order.id, world.restaurant_id, "pending", "cooking", 17
            )
            # a second writer that still believes the order is pending loses
            second = await order_crud.update_status_if(
                db, order.id, world.restaurant_id, "pending", "cooking", 99
            )
            stored = await order_crud.get_order(db, order.id, world.restaurant_id)
        return first, second, stored

    first, second, stored = run(scenario())
    assert first is True
    assert second is False
    assert stored.status == "cooking"
    assert stored.estimated_time == 17
