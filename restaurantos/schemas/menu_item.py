from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from enum import Enum


class MenuCategory(str, Enum):
    appetizers = "Appetizers"
    main_courses = "Main Courses"
    desserts = "Desserts"
    beverages = "Beverages"
    specials = "Specials"


# ---------- Menu Item ----------
class MenuItemBase(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: Decimal = Field(ge=0)
    category: MenuCategory
    is_available: bool = True
    prep_time: Optional[int] = Field(default=15, ge=0)


class MenuItemCreate(MenuItemBase):
    pass


class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    category: Optional[MenuCategory] = None
    is_available: Optional[bool] = None
    prep_time: Optional[int] = Field(default=None, ge=0)


class MenuItemRead(MenuItemBase):
    id: str
    restaurant_id: str
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MenuPage(BaseModel):
    items: List[MenuItemRead]
    page: int
    total_pages: int
    total_items: int
    is_fallback: bool = False


class MenuCategoryGroup(BaseModel):
    category: MenuCategory
    items: List[MenuItemRead]
