from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from restaurantos.models.base import Base
from restaurantos.utils.time import utcnow
import uuid


class MenuItem(Base):
    __tablename__ = "menu_items"
    __table_args__ = (
        Index("ix_menu_items_restaurant_category", "restaurant_id", "category"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    restaurant_id = Column(String, ForeignKey("restaurants.id"), nullable=False)

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String, nullable=False)  # see MenuCategory
    is_available = Column(Boolean, default=True, nullable=False)
    prep_time = Column(Integer, default=15, nullable=True)  # minutes
    image_url = Column(String, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    restaurant = relationship("Restaurant", back_populates="menu_items")
    order_lines = relationship("OrderLine", back_populates="menu_item")
