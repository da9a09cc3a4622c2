from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurantos.auth.context import RestaurantContext, get_restaurant_context, require_manager
from restaurantos.core.config import settings
from restaurantos.crud import menu_item as menu_crud
from restaurantos.db import get_db
from restaurantos.schemas.menu_item import (
    MenuCategoryGroup,
    MenuItemCreate,
    MenuItemRead,
    MenuItemUpdate,
)
from restaurantos.services.menu_catalog import (
    MenuValidationError,
    group_by_category,
    list_items_for_management,
    validate_image_upload,
)
from restaurantos.utils.spaces import StorageNotConfigured, object_key, put_public_object

router = APIRouter()


@router.get("", response_model=List[MenuItemRead])
async def list_menu_items(
    ctx: RestaurantContext = Depends(get_restaurant_context),
    db: AsyncSession = Depends(get_db),
):
    """All menu items, ordered by category then name"""
    return await list_items_for_management(db, ctx.restaurant_id)


@router.get("/grouped", response_model=List[MenuCategoryGroup])
async def list_menu_items_grouped(
    ctx: RestaurantContext = Depends(get_restaurant_context),
    db: AsyncSession = Depends(get_db),
):
    """All menu items grouped by category"""
    items = await list_items_for_management(db, ctx.restaurant_id)
    rows = [MenuItemRead.model_validate(item) for item in items]
    return [
        MenuCategoryGroup(category=category, items=group)
        for category, group in group_by_category(rows)
    ]


@router.post("", response_model=MenuItemRead, status_code=201)
async def create_menu_item(
    item: MenuItemCreate,
    ctx: RestaurantContext = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Create a new menu item"""
    return await menu_crud.create_menu_item(db, ctx.restaurant_id, item)


@router.get("/{item_id}", response_model=MenuItemRead)
async def get_menu_item(
    item_id: str,
    ctx: RestaurantContext = Depends(get_restaurant_context),
    db: AsyncSession = Depends(get_db),
):
    """Get a specific menu item"""
    item = await menu_crud.get_menu_item(db, item_id, ctx.restaurant_id)
    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return item


@router.patch("/{item_id}", response_model=MenuItemRead)
async def update_menu_item(
    item_id: str,
    updates: MenuItemUpdate,
    ctx: RestaurantContext = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Update a menu item"""
    item = await menu_crud.update_menu_item(db, item_id, ctx.restaurant_id, updates)
    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return item


@router.post("/{item_id}/toggle-availability", response_model=MenuItemRead)
async def toggle_availability(
    item_id: str,
    ctx: RestaurantContext = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Flip a menu item between available and unavailable"""
    item = await menu_crud.toggle_availability(db, item_id, ctx.restaurant_id)
    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return item


@router.post("/{item_id}/photo", response_model=MenuItemRead)
async def upload_photo(
    item_id: str,
    photo: UploadFile = File(...),
    ctx: RestaurantContext = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Upload a menu item photo (jpg, jpeg, png or webp, 5MB max)"""
    item = await menu_crud.get_menu_item(db, item_id, ctx.restaurant_id)
    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")

    contents = await photo.read()
    try:
        ext = validate_image_upload(photo.filename, len(contents), settings.max_image_bytes)
    except MenuValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        url = await put_public_object(
            key=object_key("restaurants", ctx.restaurant_id, "menu-items", ext=ext),
            body=contents,
            content_type=photo.content_type,
        )
    except StorageNotConfigured as e:
        raise HTTPException(status_code=503, detail=str(e))

    return await menu_crud.set_image_url(db, item_id, ctx.restaurant_id, url)


@router.delete("/{item_id}")
async def delete_menu_item(
    item_id: str,
    ctx: RestaurantContext = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Delete a menu item"""
    try:
        item = await menu_crud.delete_menu_item(db, item_id, ctx.restaurant_id)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=409,
            detail="This item appears on existing orders. Mark it unavailable instead",
        )
    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return {"message": "Menu item deleted"}
