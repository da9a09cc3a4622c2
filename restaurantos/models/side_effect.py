from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from restaurantos.models.base import Base
from restaurantos.utils.time import utcnow
import uuid

MARK_TABLE_OCCUPIED = "mark_table_occupied"


class FailedSideEffect(Base):
    """Non-critical write that failed after its order was committed."""

    __tablename__ = "failed_side_effects"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    restaurant_id = Column(String, ForeignKey("restaurants.id"), nullable=False, index=True)
    kind = Column(String, nullable=False, default=MARK_TABLE_OCCUPIED)
    order_id = Column(String, ForeignKey("orders.id"), nullable=True)
    table_number = Column(Integer, nullable=True)
    error = Column(Text, nullable=True)
    attempts = Column(Integer, nullable=False, default=1)
    resolved_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
