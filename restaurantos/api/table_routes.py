from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurantos.auth.context import RestaurantContext, get_restaurant_context, require_manager
from restaurantos.crud import table as table_crud
from restaurantos.db import get_db
from restaurantos.schemas.table import OccupancyRetryResult, TableCreate, TableRead, TableUpdate
from restaurantos.services.change_feed import ChangeFeed, get_change_feed
from restaurantos.services.occupancy import OccupancyTracker

router = APIRouter()

DUPLICATE_TABLE = "A table with that number already exists"


@router.get("", response_model=List[TableRead])
async def list_tables(
    ctx: RestaurantContext = Depends(get_restaurant_context),
    db: AsyncSession = Depends(get_db),
):
    return await table_crud.get_tables(db, ctx.restaurant_id)


@router.post("", response_model=TableRead, status_code=201)
async def create_table(
    table: TableCreate,
    ctx: RestaurantContext = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    try:
        created = await table_crud.create_table(db, ctx.restaurant_id, table)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail=DUPLICATE_TABLE)
    await feed.notify(ctx.restaurant_id, "tables", "insert", created.id)
    return created


@router.post("/occupancy/retry", response_model=OccupancyRetryResult)
async def retry_occupancy(
    ctx: RestaurantContext = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Re-apply table occupancy updates that failed after an order was placed"""
    attempted, resolved = await OccupancyTracker(db, feed).retry_failed(ctx.restaurant_id)
    return OccupancyRetryResult(attempted=attempted, resolved=resolved)


@router.patch("/{table_id}", response_model=TableRead)
async def update_table(
    table_id: str,
    updates: TableUpdate,
    ctx: RestaurantContext = Depends(get_restaurant_context),
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Update a table. Any staff member may toggle occupancy; other fields need a manager"""
    changes = updates.model_dump(exclude_unset=True)
    if set(changes) - {"is_occupied"} and not ctx.can_manage:
        raise HTTPException(status_code=403, detail="Only owners and admins can edit table layout")
    try:
        table = await table_crud.update_table(db, table_id, ctx.restaurant_id, updates)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail=DUPLICATE_TABLE)
    if not table:
        raise HTTPException(status_code=404, detail="Table not found")
    await feed.notify(ctx.restaurant_id, "tables", "update", table.id)
    return table


@router.delete("/{table_id}")
async def delete_table(
    table_id: str,
    ctx: RestaurantContext = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    table = await table_crud.delete_table(db, table_id, ctx.restaurant_id)
    if not table:
        raise HTTPException(status_code=404, detail="Table not found")
    await feed.notify(ctx.restaurant_id, "tables", "delete", table_id)
    return {"message": "Table deleted"}
