from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurantos.auth.context import RestaurantContext, require_manager
from restaurantos.crud import staff as staff_crud
from restaurantos.db import get_db
from restaurantos.schemas.staff import StaffCreate, StaffRead, StaffUpdate

router = APIRouter()


@router.get("", response_model=List[StaffRead])
async def list_staff(
    ctx: RestaurantContext = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    return await staff_crud.get_staff(db, ctx.restaurant_id)


@router.post("", response_model=StaffRead, status_code=201)
async def add_staff(
    data: StaffCreate,
    ctx: RestaurantContext = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Give an existing account a role at this restaurant"""
    user = await staff_crud.get_user_by_email(db, data.email)
    if not user:
        raise HTTPException(status_code=404, detail="No account with that email. Ask them to sign up first")
    if user.id == ctx.restaurant.owner_id:
        raise HTTPException(status_code=409, detail="The owner already has full access")
    try:
        return await staff_crud.create_assignment(db, ctx.restaurant_id, user.id, data.role)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="This person is already on staff")


@router.patch("/{assignment_id}", response_model=StaffRead)
async def update_staff(
    assignment_id: str,
    updates: StaffUpdate,
    ctx: RestaurantContext = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    existing = await staff_crud.get_assignment(db, assignment_id, ctx.restaurant_id)
    if not existing:
        raise HTTPException(status_code=404, detail="Staff member not found")
    if existing.role == "owner":
        raise HTTPException(status_code=403, detail="The owner's role can't be changed")
    return await staff_crud.update_assignment(db, assignment_id, ctx.restaurant_id, updates)


@router.delete("/{assignment_id}")
async def remove_staff(
    assignment_id: str,
    ctx: RestaurantContext = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    existing = await staff_crud.get_assignment(db, assignment_id, ctx.restaurant_id)
    if not existing:
        raise HTTPException(status_code=404, detail="Staff member not found")
    if existing.role == "owner":
        raise HTTPException(status_code=403, detail="The owner can't be removed")
    await staff_crud.delete_assignment(db, assignment_id, ctx.restaurant_id)
    return {"message": "Staff member removed"}
