from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship
from fastapi_users_db_sqlalchemy.generics import GUID

from restaurantos.models.base import Base
from restaurantos.utils.time import utcnow
import uuid


class StaffAssignment(Base):
    __tablename__ = "restaurant_staff"
    __table_args__ = (
        UniqueConstraint("restaurant_id", "user_id", name="uq_restaurant_staff_user"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    restaurant_id = Column(String, ForeignKey("restaurants.id"), nullable=False, index=True)
    user_id = Column(GUID, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(String, nullable=False)  # "owner", "admin", "chef", "waiter"
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    restaurant = relationship("Restaurant", back_populates="staff")
    user = relationship("User", back_populates="staff_assignments")
