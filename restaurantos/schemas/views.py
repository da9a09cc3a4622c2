from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

from restaurantos.domain.order_status import OrderStatus, TimingState
from restaurantos.schemas.table import TableRead


class ViewKind(str, Enum):
    kitchen = "kitchen"
    waiter = "waiter"
    admin = "admin"


class ViewLine(BaseModel):
    id: str
    menu_item_id: str
    item_name: str
    quantity: int
    unit_price: Decimal
    prep_time: Optional[int] = None
    special_instructions: Optional[str] = None


class ViewOrder(BaseModel):
    id: str
    table_number: int
    customer_name: Optional[str] = None
    status: OrderStatus
    total_amount: Decimal
    estimated_time: Optional[int] = None
    special_instructions: Optional[str] = None
    created_at: datetime
    item_count: int
    timing: TimingState
    lines: List[ViewLine]


class ViewSnapshot(BaseModel):
    kind: ViewKind
    restaurant_id: str
    fetched_at: datetime
    orders: List[ViewOrder]
    tables: Optional[List[TableRead]] = None
