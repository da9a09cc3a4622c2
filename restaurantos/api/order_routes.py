from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from restaurantos.auth.context import RestaurantContext, get_restaurant_context, require_role
from restaurantos.crud import order as order_crud
from restaurantos.db import get_db
from restaurantos.domain.order_status import ORDER_TAKING_ROLES, OrderStatus
from restaurantos.schemas.order import OrderAdvance, OrderCreate, OrderRead
from restaurantos.services.change_feed import ChangeFeed, get_change_feed
from restaurantos.services.order_submission import OrderValidationError, submit_order
from restaurantos.services.order_transitions import (
    InvalidTransitionError,
    OrderNotFoundError,
    TransitionNotPermittedError,
    advance_order,
)

router = APIRouter()


@router.post("", response_model=OrderRead, status_code=201)
async def place_order(
    data: OrderCreate,
    ctx: RestaurantContext = Depends(require_role(*ORDER_TAKING_ROLES)),
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Place an order on behalf of a table"""
    try:
        return await submit_order(
            db,
            table_number=data.table_number,
            lines=data.lines,
            restaurant_id=ctx.restaurant_id,
            customer_name=data.customer_name,
            special_instructions=data.special_instructions,
            feed=feed,
        )
    except OrderValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("", response_model=List[OrderRead])
async def list_orders(
    status: Optional[List[OrderStatus]] = Query(default=None),
    ctx: RestaurantContext = Depends(get_restaurant_context),
    db: AsyncSession = Depends(get_db),
):
    """Orders newest first, optionally filtered by status"""
    statuses = [s.value for s in status] if status else None
    return await order_crud.get_orders(db, ctx.restaurant_id, statuses=statuses)


@router.get("/{order_id}", response_model=OrderRead)
async def get_order(
    order_id: str,
    ctx: RestaurantContext = Depends(get_restaurant_context),
    db: AsyncSession = Depends(get_db),
):
    order = await order_crud.get_order(db, order_id, ctx.restaurant_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


async def _advance(db, ctx: RestaurantContext, order_id: str, target: OrderStatus, feed: ChangeFeed):
    try:
        return await advance_order(db, ctx.restaurant_id, order_id, target, ctx.role, feed)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")
    except TransitionNotPermittedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/{order_id}/advance", response_model=OrderRead)
async def advance(
    order_id: str,
    data: OrderAdvance,
    ctx: RestaurantContext = Depends(get_restaurant_context),
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Move an order one step forward"""
    return await _advance(db, ctx, order_id, data.status, feed)


@router.post("/{order_id}/start-cooking", response_model=OrderRead)
async def start_cooking(
    order_id: str,
    ctx: RestaurantContext = Depends(get_restaurant_context),
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    return await _advance(db, ctx, order_id, OrderStatus.COOKING, feed)


@router.post("/{order_id}/mark-ready", response_model=OrderRead)
async def mark_ready(
    order_id: str,
    ctx: RestaurantContext = Depends(get_restaurant_context),
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    return await _advance(db, ctx, order_id, OrderStatus.READY, feed)


@router.post("/{order_id}/mark-delivered", response_model=OrderRead)
async def mark_delivered(
    order_id: str,
    ctx: RestaurantContext = Depends(get_restaurant_context),
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    return await _advance(db, ctx, order_id, OrderStatus.DELIVERED, feed)
