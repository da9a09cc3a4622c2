from pydantic import BaseModel
from typing import List
from datetime import datetime
from decimal import Decimal

from restaurantos.domain.order_status import OrderStatus


class RecentOrder(BaseModel):
    id: str
    table_number: int
    status: OrderStatus
    total_amount: Decimal
    created_at: datetime
    item_count: int


class DashboardStats(BaseModel):
    daily_revenue: Decimal
    active_orders: int
    occupied_tables: int
    total_tables: int
    recent_orders: List[RecentOrder]
