from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from restaurantos.models.base import Base
from restaurantos.utils.time import utcnow
import uuid


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        Index("ix_orders_restaurant_status", "restaurant_id", "status"),
        Index("ix_orders_restaurant_created", "restaurant_id", "created_at"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    restaurant_id = Column(String, ForeignKey("restaurants.id"), nullable=False)
    table_number = Column(Integer, nullable=False)
    customer_name = Column(String, nullable=True)

    status = Column(String, nullable=False, default="pending")  # see domain.order_status
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    estimated_time = Column(Integer, nullable=True)  # minutes, set when cooking starts
    special_instructions = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    restaurant = relationship("Restaurant", back_populates="orders")
    lines = relationship(
        "OrderLine",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.position",
    )


class OrderLine(Base):
    __tablename__ = "order_items"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id = Column(String, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_item_id = Column(String, ForeignKey("menu_items.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    quantity = Column(Integer, nullable=False)

    # Snapshot pricing and name at time of order
    unit_price = Column(Numeric(10, 2), nullable=False)
    item_name = Column(String, nullable=False)
    special_instructions = Column(Text, nullable=True)

    order = relationship("Order", back_populates="lines")
    menu_item = relationship("MenuItem", back_populates="order_lines")
