"""
Table occupancy tracker

Occupancy is set as a side effect of order submission. It is not cleared by
the order lifecycle; staff free tables by hand. A failed update never fails
the order: it is logged and written to ``failed_side_effects`` for retry.
"""
import asyncio
import logging
from typing import Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from restaurantos.core.config import settings
from restaurantos.crud import table as table_crud
from restaurantos.models.side_effect import FailedSideEffect, MARK_TABLE_OCCUPIED
from restaurantos.services.change_feed import ChangeFeed
from restaurantos.utils.time import utcnow

logger = logging.getLogger(__name__)


class OccupancyTracker:
    """Marks tables occupied and keeps the compensating-action log"""

    def __init__(self, db: AsyncSession, feed: Optional[ChangeFeed] = None):
        self.db = db
        self.feed = feed

    async def mark_occupied(
        self,
        restaurant_id: str,
        table_number: int,
        order_id: Optional[str] = None,
    ) -> bool:
        """Best-effort occupancy update. Returns True when a table row changed."""
        log_extra = {"restaurant_id": restaurant_id, "table_number": table_number, "order_id": order_id}
        try:
            changed = await table_crud.set_occupied(self.db, restaurant_id, table_number, True)
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.warning("Could not mark table occupied", exc_info=True, extra=log_extra)
            await self._record_failure(restaurant_id, table_number, order_id, exc)
            return False

        if not changed:
            logger.info("No table %s configured; occupancy not tracked", table_number, extra=log_extra)
            return False

        if self.feed:
            await self.feed.notify(restaurant_id, "tables", "update")
        return True

    async def _record_failure(self, restaurant_id, table_number, order_id, exc) -> None:
        try:
            self.db.add(
                FailedSideEffect(
                    restaurant_id=restaurant_id,
                    kind=MARK_TABLE_OCCUPIED,
                    order_id=order_id,
                    table_number=table_number,
                    error=str(exc)[:500],
                )
            )
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception(
                "Could not record failed occupancy update",
                extra={"restaurant_id": restaurant_id, "order_id": order_id},
            )

    async def pending_failures(self, restaurant_id: Optional[str] = None):
        query = select(FailedSideEffect).where(
            FailedSideEffect.resolved_at.is_(None),
            FailedSideEffect.attempts < settings.occupancy_retry_max_attempts,
        )
        if restaurant_id:
            query = query.where(FailedSideEffect.restaurant_id == restaurant_id)
        result = await self.db.execute(query.order_by(FailedSideEffect.created_at))
        return result.scalars().all()

    async def retry_failed(self, restaurant_id: Optional[str] = None) -> Tuple[int, int]:
        """Re-apply unresolved occupancy updates. Returns ``(attempted, resolved)``."""
        # A rollback expires every loaded row, so work from plain values
        pending = [
            (f.id, f.restaurant_id, f.table_number)
            for f in await self.pending_failures(restaurant_id)
        ]
        resolved = 0
        for failure_id, failure_restaurant_id, table_number in pending:
            try:
                await table_crud.set_occupied(self.db, failure_restaurant_id, table_number, True)
            except SQLAlchemyError as exc:
                await self.db.rollback()
                failure = await self.db.get(FailedSideEffect, failure_id, populate_existing=True)
                failure.attempts += 1
                failure.error = str(exc)[:500]
                await self.db.commit()
                logger.warning(
                    "Occupancy retry failed",
                    extra={"restaurant_id": failure_restaurant_id, "table_number": table_number},
                )
                continue

            failure = await self.db.get(FailedSideEffect, failure_id, populate_existing=True)
            failure.resolved_at = utcnow()
            await self.db.commit()
            resolved += 1
            if self.feed:
                await self.feed.notify(failure_restaurant_id, "tables", "update")

        if pending:
            logger.info("Retried %d failed occupancy updates, %d resolved", len(pending), resolved)
        return len(pending), resolved


async def occupancy_retry_loop(interval_seconds: int, session_factory, feed: Optional[ChangeFeed] = None):
    """Periodically retry failed occupancy updates until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            async with session_factory() as db:
                await OccupancyTracker(db, feed).retry_failed()
        except SQLAlchemyError:
            logger.exception("Occupancy retry pass failed")
