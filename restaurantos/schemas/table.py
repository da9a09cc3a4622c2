from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class TableCreate(BaseModel):
    table_number: int = Field(gt=0)
    capacity: int = Field(default=4, gt=0)


class TableUpdate(BaseModel):
    table_number: Optional[int] = Field(default=None, gt=0)
    capacity: Optional[int] = Field(default=None, gt=0)
    is_occupied: Optional[bool] = None


class TableRead(BaseModel):
    id: str
    restaurant_id: str
    table_number: int
    capacity: int
    is_occupied: bool
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OccupancyRetryResult(BaseModel):
    attempted: int
    resolved: int
