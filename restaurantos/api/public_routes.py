"""Customer-facing routes. No login required."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from restaurantos.db import get_db
from restaurantos.schemas.menu_item import MenuCategory, MenuPage
from restaurantos.schemas.order import OrderRead, PublicOrderCreate
from restaurantos.services.change_feed import ChangeFeed, get_change_feed
from restaurantos.services.menu_catalog import (
    MenuFilter,
    MenuValidationError,
    filter_items,
    list_available_items,
    paginate,
)
from restaurantos.services.order_submission import OrderValidationError, submit_order

router = APIRouter()


@router.get("/restaurants/{restaurant_id}/menu", response_model=MenuPage)
async def customer_menu(
    restaurant_id: str,
    q: Optional[str] = None,
    category: List[MenuCategory] = Query(default=[]),
    price_range: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    db: AsyncSession = Depends(get_db),
):
    """Available items for customers, filtered and paged 12 at a time"""
    catalog = await list_available_items(db, restaurant_id)
    try:
        items = filter_items(
            catalog.items,
            MenuFilter(search=q, categories=[c.value for c in category], price_range=price_range),
        )
    except MenuValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    page_items, page, total_pages = paginate(items, page)
    return MenuPage(
        items=page_items,
        page=page,
        total_pages=total_pages,
        total_items=len(items),
        is_fallback=catalog.is_fallback,
    )


@router.post("/orders", response_model=OrderRead, status_code=201)
async def customer_place_order(
    data: PublicOrderCreate,
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Place an order from a customer's cart"""
    try:
        return await submit_order(
            db,
            table_number=data.table_number,
            lines=data.lines,
            restaurant_id=data.restaurant_id,
            customer_name=data.customer_name,
            special_instructions=data.special_instructions,
            feed=feed,
        )
    except OrderValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
