from pydantic import BaseModel, Field
from typing import Optional, List, Union
from datetime import datetime
from decimal import Decimal

from restaurantos.domain.order_status import OrderStatus


# ---------- Order Lines ----------
class OrderLineCreate(BaseModel):
    menu_item_id: str
    quantity: int = 1
    special_instructions: Optional[str] = None


class OrderLineRead(BaseModel):
    id: str
    menu_item_id: str
    quantity: int
    unit_price: Decimal
    item_name: str
    special_instructions: Optional[str] = None

    class Config:
        from_attributes = True


# ---------- Orders ----------
class OrderCreate(BaseModel):
    # Raw table input is validated by the submission service.
    table_number: Union[int, str]
    lines: List[OrderLineCreate] = []
    customer_name: Optional[str] = None
    special_instructions: Optional[str] = None


class PublicOrderCreate(OrderCreate):
    restaurant_id: Optional[str] = None


class OrderRead(BaseModel):
    id: str
    restaurant_id: str
    table_number: int
    customer_name: Optional[str] = None
    status: OrderStatus
    total_amount: Decimal
    estimated_time: Optional[int] = None
    special_instructions: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    lines: List[OrderLineRead] = []

    class Config:
        from_attributes = True


class OrderAdvance(BaseModel):
    status: OrderStatus = Field(description="The status the order should move to")
