"""
Order submission service

Turns a cart into an Order with OrderLines. Every precondition is checked
before anything is written. The order and its lines are committed together;
table occupancy is updated afterwards as a best-effort side effect.
"""
import logging
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurantos.crud import menu_item as menu_crud
from restaurantos.crud import order as order_crud
from restaurantos.crud import restaurant as restaurant_crud
from restaurantos.domain.order_status import OrderStatus
from restaurantos.models.order import Order, OrderLine
from restaurantos.services.change_feed import ChangeFeed
from restaurantos.services.occupancy import OccupancyTracker

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


class OrderValidationError(ValueError):
    """Raised when an order can't be placed; nothing has been written"""
    pass


def parse_table_number(raw: Union[int, str, None]) -> int:
    message = "Please enter a valid table number (a whole number of 1 or more)"
    if raw is None or isinstance(raw, bool):
        raise OrderValidationError(message)
    if isinstance(raw, int):
        value = raw
    else:
        text = str(raw).strip()
        if not (text.isascii() and text.isdigit()):
            raise OrderValidationError(message)
        value = int(text)
    if value < 1:
        raise OrderValidationError(message)
    return value


def _normalize_lines(lines: Sequence[Any]) -> list[dict]:
    normalized = []
    for line in lines or []:
        data = line if isinstance(line, Mapping) else line.model_dump()
        item_id = str(data.get("menu_item_id") or "").strip()
        quantity = data.get("quantity", 1)
        if not item_id:
            raise OrderValidationError("Every cart line needs a menu item")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise OrderValidationError("Item quantities must be whole numbers of 1 or more")
        normalized.append(
            {
                "menu_item_id": item_id,
                "quantity": quantity,
                "special_instructions": (data.get("special_instructions") or "").strip() or None,
            }
        )
    return normalized


async def submit_order(
    db: AsyncSession,
    *,
    table_number: Union[int, str, None],
    lines: Sequence[Any],
    restaurant_id: Optional[str] = None,
    customer_name: Optional[str] = None,
    special_instructions: Optional[str] = None,
    feed: Optional[ChangeFeed] = None,
) -> Order:
    """Validate and place an order. Returns the stored order with its lines."""
    table = parse_table_number(table_number)

    normalized = _normalize_lines(lines)
    if not normalized:
        raise OrderValidationError("Your cart is empty. Add at least one item before ordering")

    items = await menu_crud.get_menu_items_by_ids(db, {row["menu_item_id"] for row in normalized})
    items_by_id = {item.id: item for item in items}

    missing = [row["menu_item_id"] for row in normalized if row["menu_item_id"] not in items_by_id]
    if missing:
        raise OrderValidationError("Some items in your cart are no longer on the menu")

    # Restaurant comes from the caller, or from the first ordered item
    if not restaurant_id:
        restaurant_id = items_by_id[normalized[0]["menu_item_id"]].restaurant_id
    restaurant = await restaurant_crud.get_restaurant(db, restaurant_id) if restaurant_id else None
    if not restaurant or not restaurant.is_active:
        raise OrderValidationError("Could not find the restaurant for this order")
    restaurant_id = restaurant.id

    for row in normalized:
        item = items_by_id[row["menu_item_id"]]
        if item.restaurant_id != restaurant_id:
            raise OrderValidationError("All items must come from the same restaurant")
        if not item.is_available:
            raise OrderValidationError(f"{item.name} is currently unavailable")

    # Prices are captured now and never recomputed
    total = sum(
        (Decimal(items_by_id[row["menu_item_id"]].price) * row["quantity"] for row in normalized),
        Decimal("0"),
    ).quantize(CENTS)

    order = Order(
        restaurant_id=restaurant_id,
        table_number=table,
        customer_name=(customer_name or "").strip() or None,
        special_instructions=(special_instructions or "").strip() or None,
        status=OrderStatus.PENDING.value,
        total_amount=total,
    )
    try:
        db.add(order)
        await db.flush()  # populate order.id

        for position, row in enumerate(normalized):
            item = items_by_id[row["menu_item_id"]]
            db.add(
                OrderLine(
                    order_id=order.id,
                    menu_item_id=item.id,
                    position=position,
                    quantity=row["quantity"],
                    unit_price=Decimal(item.price).quantize(CENTS),
                    item_name=item.name,
                    special_instructions=row["special_instructions"],
                )
            )
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Order write failed", extra={"restaurant_id": restaurant_id})
        raise

    order_id = order.id
    logger.info(
        "Order placed for table %s",
        table,
        extra={"restaurant_id": restaurant_id, "order_id": order_id},
    )

    if feed:
        await feed.notify(restaurant_id, "orders", "insert", order_id)

    await OccupancyTracker(db, feed).mark_occupied(restaurant_id, table, order_id)

    return await order_crud.get_order(db, order_id, restaurant_id)
