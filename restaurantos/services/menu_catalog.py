"""
Menu catalog service

Customer browsing (with a placeholder menu when the real catalog is
unreadable or empty), filtering, pagination and image validation for the
management screens.
"""
import logging
import math
import os
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurantos.crud import menu_item as menu_crud
from restaurantos.data.fallback_menu import FALLBACK_MENU_ITEMS
from restaurantos.schemas.menu_item import MenuCategory, MenuItemRead

logger = logging.getLogger(__name__)

PAGE_SIZE = 12

PRICE_RANGES: Dict[str, Tuple[Decimal, Optional[Decimal]]] = {
    "5-10": (Decimal("5"), Decimal("10")),
    "10-20": (Decimal("10"), Decimal("20")),
    "20-30": (Decimal("20"), Decimal("30")),
    "30+": (Decimal("30"), None),
}

ALLOWED_IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".webp"}


class MenuValidationError(ValueError):
    """Raised when a menu request or upload is malformed"""
    pass


@dataclass
class MenuFilter:
    search: Optional[str] = None
    categories: Sequence[str] = field(default_factory=tuple)
    price_range: Optional[str] = None


@dataclass
class CatalogResult:
    items: List[MenuItemRead]
    is_fallback: bool = False


def fallback_items(restaurant_id: str) -> List[MenuItemRead]:
    return [
        MenuItemRead(restaurant_id=restaurant_id, **item)
        for item in FALLBACK_MENU_ITEMS
        if item["is_available"]
    ]


async def list_available_items(db: AsyncSession, restaurant_id: str) -> CatalogResult:
    """Available items for customers. Never surfaces a backend read error."""
    try:
        rows = await menu_crud.get_available_menu_items(db, restaurant_id)
    except SQLAlchemyError:
        logger.warning(
            "Menu read failed, serving fallback menu",
            exc_info=True,
            extra={"restaurant_id": restaurant_id},
        )
        await db.rollback()
        return CatalogResult(fallback_items(restaurant_id), is_fallback=True)

    if not rows:
        logger.warning(
            "Restaurant has no available menu items, serving fallback menu",
            extra={"restaurant_id": restaurant_id},
        )
        return CatalogResult(fallback_items(restaurant_id), is_fallback=True)

    return CatalogResult([MenuItemRead.model_validate(row) for row in rows])


async def list_items_for_management(db: AsyncSession, restaurant_id: str):
    """Every item, available or not, ordered by category then name."""
    return await menu_crud.get_menu_items(db, restaurant_id)


def filter_items(items: Sequence[MenuItemRead], menu_filter: MenuFilter) -> List[MenuItemRead]:
    result = list(items)

    if menu_filter.search:
        needle = menu_filter.search.strip().lower()
        result = [
            item for item in result
            if needle in item.name.lower() or needle in (item.description or "").lower()
        ]

    if menu_filter.categories:
        wanted = set(menu_filter.categories)
        result = [item for item in result if item.category.value in wanted]

    if menu_filter.price_range:
        bounds = PRICE_RANGES.get(menu_filter.price_range)
        if bounds is None:
            raise MenuValidationError(
                f"Unknown price range '{menu_filter.price_range}'. "
                f"Use one of: {', '.join(PRICE_RANGES)}"
            )
        low, high = bounds
        result = [
            item for item in result
            if item.price >= low and (high is None or item.price <= high)
        ]

    return result


def paginate(items: Sequence, page: int = 1, page_size: int = PAGE_SIZE):
    """Return ``(page_items, page, total_pages)`` with ``page`` clamped to range."""
    total_pages = max(1, math.ceil(len(items) / page_size))
    page = min(max(1, page), total_pages)
    start = (page - 1) * page_size
    return list(items[start:start + page_size]), page, total_pages


def group_by_category(items: Sequence[MenuItemRead]):
    grouped = {category: [] for category in MenuCategory}
    for item in items:
        grouped[item.category].append(item)
    return [(category, rows) for category, rows in grouped.items() if rows]


def validate_image_upload(filename: Optional[str], size: int, max_bytes: int) -> str:
    """Check an uploaded image and return its normalized extension."""
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in ALLOWED_IMAGE_EXTS:
        raise MenuValidationError("Invalid image type. Allowed: jpg, jpeg, png, webp")
    if size <= 0:
        raise MenuValidationError("Uploaded image is empty")
    if size > max_bytes:
        raise MenuValidationError(
            f"Image is too large. Maximum size is {max_bytes // (1024 * 1024)}MB"
        )
    return ext
