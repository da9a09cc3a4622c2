from pydantic import BaseModel, EmailStr
from typing import Literal, Optional
from datetime import datetime
import uuid

from restaurantos.domain.order_status import StaffRole

# Ownership is only granted through restaurant registration.
AssignableRole = Literal["admin", "chef", "waiter"]


class StaffCreate(BaseModel):
    email: EmailStr
    role: AssignableRole


class StaffUpdate(BaseModel):
    role: Optional[AssignableRole] = None
    is_active: Optional[bool] = None


class StaffRead(BaseModel):
    id: str
    restaurant_id: str
    user_id: uuid.UUID
    role: StaffRole
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
