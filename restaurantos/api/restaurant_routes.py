from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from restaurantos.auth.context import (
    RestaurantContext,
    find_user_restaurant,
    get_restaurant_context,
    require_manager,
)
from restaurantos.auth.routes import current_active_user
from restaurantos.core.config import settings
from restaurantos.crud import restaurant as restaurant_crud
from restaurantos.db import get_db
from restaurantos.models.user import User
from restaurantos.schemas.dashboard import DashboardStats
from restaurantos.schemas.restaurant import (
    MyRestaurantRead,
    RestaurantCreate,
    RestaurantRead,
    RestaurantUpdate,
)
from restaurantos.services.dashboard import get_dashboard_stats
from restaurantos.services.menu_catalog import MenuValidationError, validate_image_upload
from restaurantos.utils.spaces import StorageNotConfigured, object_key, put_public_object

router = APIRouter()


@router.post("", response_model=RestaurantRead, status_code=201)
async def register_restaurant(
    data: RestaurantCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(current_active_user),
):
    """Register a restaurant; the caller becomes its owner"""
    return await restaurant_crud.create_restaurant(db, user.id, data)


@router.get("/mine", response_model=MyRestaurantRead)
async def get_my_restaurant(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(current_active_user),
):
    """The restaurant the caller owns or works at"""
    found = await find_user_restaurant(db, user)
    if not found:
        raise HTTPException(status_code=404, detail="No restaurant found for this account")
    restaurant, role = found
    return MyRestaurantRead(restaurant=RestaurantRead.model_validate(restaurant), role=role)


@router.get("/{restaurant_id}", response_model=RestaurantRead)
async def get_restaurant(ctx: RestaurantContext = Depends(get_restaurant_context)):
    return ctx.restaurant


@router.patch("/{restaurant_id}", response_model=RestaurantRead)
async def update_restaurant(
    updates: RestaurantUpdate,
    ctx: RestaurantContext = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Update restaurant details"""
    return await restaurant_crud.update_restaurant(db, ctx.restaurant_id, updates)


@router.post("/{restaurant_id}/logo", response_model=RestaurantRead)
async def upload_logo(
    logo: UploadFile = File(...),
    ctx: RestaurantContext = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Upload a logo image (jpg, png or webp, 5MB max)"""
    contents = await logo.read()
    try:
        ext = validate_image_upload(logo.filename, len(contents), settings.max_image_bytes)
    except MenuValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        url = await put_public_object(
            key=object_key("restaurants", ctx.restaurant_id, "logo", ext=ext),
            body=contents,
            content_type=logo.content_type,
        )
    except StorageNotConfigured as e:
        raise HTTPException(status_code=503, detail=str(e))

    return await restaurant_crud.set_logo_url(db, ctx.restaurant_id, url)


@router.get("/{restaurant_id}/dashboard", response_model=DashboardStats)
async def get_dashboard(
    ctx: RestaurantContext = Depends(get_restaurant_context),
    db: AsyncSession = Depends(get_db),
):
    """Today's revenue, active orders, table occupancy and latest orders"""
    return await get_dashboard_stats(db, ctx.restaurant_id)
