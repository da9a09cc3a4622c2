"""Kitchen, waiter and admin views: one-off snapshots and an SSE stream.

The stream sends ``event: snapshot`` with the full view first, then again
after every change to the restaurant's orders or tables. A failed refetch
sends ``event: error`` and keeps the stream open; the client keeps showing
its previous snapshot.
"""
import json

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from restaurantos.auth.context import RestaurantContext, get_restaurant_context
from restaurantos.core.config import settings
from restaurantos.db import async_session, get_db
from restaurantos.domain.order_status import VIEW_ROLES
from restaurantos.schemas.views import ViewKind, ViewSnapshot
from restaurantos.services.change_feed import ChangeFeed, get_change_feed
from restaurantos.services.order_views import OrderViewSynchronizer, ViewRefreshError, fetch_view

router = APIRouter()


def _check_view_access(ctx: RestaurantContext, kind: ViewKind) -> None:
    if ctx.role not in VIEW_ROLES[kind.value]:
        raise HTTPException(status_code=403, detail=f"The {kind.value} view isn't available to your role")


def format_sse(event: str, payload) -> str:
    if event == "keepalive":
        return ":keepalive\n\n"
    if event == "snapshot":
        data = payload.model_dump_json()
    else:
        data = json.dumps({"detail": payload})
    return f"event: {event}\ndata: {data}\n\n"


@router.get("/{kind}", response_model=ViewSnapshot)
async def get_view(
    kind: ViewKind,
    ctx: RestaurantContext = Depends(get_restaurant_context),
    db: AsyncSession = Depends(get_db),
):
    """Full snapshot of one staff view"""
    _check_view_access(ctx, kind)
    return await fetch_view(db, ctx.restaurant_id, kind)


@router.get(
    "/{kind}/stream",
    response_class=StreamingResponse,
    responses={200: {"content": {"text/event-stream": {}}}},
)
async def stream_view(
    kind: ViewKind,
    request: Request,
    ctx: RestaurantContext = Depends(get_restaurant_context),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Stream a staff view via SSE"""
    _check_view_access(ctx, kind)

    sync = OrderViewSynchronizer(ctx.restaurant_id, kind, feed, async_session)
    try:
        await sync.start()
    except ViewRefreshError:
        await sync.stop()
        raise HTTPException(status_code=503, detail="Could not load orders. Please retry")

    async def event_gen():
        try:
            async for event, payload in sync.updates(keepalive=settings.sse_keepalive_seconds):
                if await request.is_disconnected():
                    break
                yield format_sse(event, payload)
        finally:
            await sync.stop()

    return StreamingResponse(
        event_gen(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
