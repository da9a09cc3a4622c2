from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from restaurantos.models.order import Order, OrderLine
from restaurantos.utils.time import utcnow


def _with_lines(query):
    # populate_existing: status is written with bulk UPDATEs that bypass the identity map
    return query.options(
        selectinload(Order.lines).selectinload(OrderLine.menu_item)
    ).execution_options(populate_existing=True)


async def get_order(db: AsyncSession, order_id: str, restaurant_id: str):
    """Get a specific order with its lines"""
    result = await db.execute(
        _with_lines(select(Order)).where(Order.id == order_id, Order.restaurant_id == restaurant_id)
    )
    return result.scalar_one_or_none()


async def get_orders(
    db: AsyncSession,
    restaurant_id: str,
    statuses: Optional[Iterable[str]] = None,
    created_since: Optional[datetime] = None,
    updated_since: Optional[datetime] = None,
    limit: Optional[int] = None,
):
    """Get orders newest first, optionally filtered by status and creation time"""
    query = _with_lines(select(Order)).where(Order.restaurant_id == restaurant_id)
    if statuses is not None:
        query = query.where(Order.status.in_(list(statuses)))
    if created_since is not None:
        query = query.where(Order.created_at >= created_since)
    if updated_since is not None:
        query = query.where(Order.updated_at >= updated_since)
    query = query.order_by(Order.created_at.desc())
    if limit:
        query = query.limit(limit)

    result = await db.execute(query)
    return result.scalars().all()


async def update_status_if(
    db: AsyncSession,
    order_id: str,
    restaurant_id: str,
    expected: str,
    new: str,
    estimated_time: Optional[int] = None,
) -> bool:
    """Compare-and-set the status. Returns False when another writer got there first."""
    values = {"status": new, "updated_at": utcnow()}
    if estimated_time is not None:
        values["estimated_time"] = estimated_time

    result = await db.execute(
        update(Order)
        .where(
            Order.id == order_id,
            Order.restaurant_id == restaurant_id,
            Order.status == expected,
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount == 1
