from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
import uuid

from restaurantos.domain.order_status import StaffRole


class RestaurantBase(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    website: Optional[str] = None
    cuisine_type: Optional[str] = None


class RestaurantCreate(RestaurantBase):
    pass


class RestaurantUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    website: Optional[str] = None
    cuisine_type: Optional[str] = None
    is_active: Optional[bool] = None


class RestaurantRead(RestaurantBase):
    id: str
    owner_id: uuid.UUID
    logo_url: Optional[str] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class MyRestaurantRead(BaseModel):
    restaurant: RestaurantRead
    role: StaffRole
