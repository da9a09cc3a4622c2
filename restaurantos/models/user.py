from fastapi_users_db_sqlalchemy import SQLAlchemyBaseUserTableUUID
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from restaurantos.models.base import Base


class User(SQLAlchemyBaseUserTableUUID, Base):
    __tablename__ = "users"

    name = Column(String, nullable=True)

    restaurants = relationship("Restaurant", back_populates="owner")
    staff_assignments = relationship("StaffAssignment", back_populates="user")
