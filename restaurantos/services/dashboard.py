"""Owner/admin dashboard figures."""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from restaurantos.crud import order as order_crud
from restaurantos.domain.order_status import OrderStatus
from restaurantos.models.order import Order
from restaurantos.models.table import RestaurantTable
from restaurantos.schemas.dashboard import DashboardStats, RecentOrder
from restaurantos.utils.time import start_of_day, utcnow

RECENT_ORDER_COUNT = 5


async def get_dashboard_stats(
    db: AsyncSession, restaurant_id: str, now: Optional[datetime] = None
) -> DashboardStats:
    now = now or utcnow()

    revenue = await db.scalar(
        select(func.coalesce(func.sum(Order.total_amount), 0)).where(
            Order.restaurant_id == restaurant_id,
            Order.created_at >= start_of_day(now),
        )
    )
    active_orders = await db.scalar(
        select(func.count(Order.id)).where(
            Order.restaurant_id == restaurant_id,
            Order.status != OrderStatus.DELIVERED.value,
        )
    )
    total_tables = await db.scalar(
        select(func.count(RestaurantTable.id)).where(RestaurantTable.restaurant_id == restaurant_id)
    )
    occupied_tables = await db.scalar(
        select(func.count(RestaurantTable.id)).where(
            RestaurantTable.restaurant_id == restaurant_id,
            RestaurantTable.is_occupied == True,
        )
    )

    recent = await order_crud.get_orders(db, restaurant_id, limit=RECENT_ORDER_COUNT)

    return DashboardStats(
        daily_revenue=Decimal(str(revenue or 0)).quantize(Decimal("0.01")),
        active_orders=active_orders or 0,
        occupied_tables=occupied_tables or 0,
        total_tables=total_tables or 0,
        recent_orders=[
            RecentOrder(
                id=order.id,
                table_number=order.table_number,
                status=OrderStatus(order.status),
                total_amount=order.total_amount,
                created_at=order.created_at,
                item_count=sum(line.quantity for line in order.lines),
            )
            for order in recent
        ],
    )
