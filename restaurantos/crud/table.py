from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from restaurantos.models.table import RestaurantTable
from restaurantos.schemas.table import TableCreate, TableUpdate
import uuid


async def create_table(db: AsyncSession, restaurant_id: str, table: TableCreate):
    new_table = RestaurantTable(
        id=str(uuid.uuid4()),
        restaurant_id=restaurant_id,
        table_number=table.table_number,
        capacity=table.capacity,
        is_occupied=False,
    )
    db.add(new_table)
    await db.commit()
    await db.refresh(new_table)
    return new_table


async def get_tables(db: AsyncSession, restaurant_id: str):
    result = await db.execute(
        select(RestaurantTable)
        .where(RestaurantTable.restaurant_id == restaurant_id)
        .order_by(RestaurantTable.table_number)
    )
    return result.scalars().all()


async def get_table(db: AsyncSession, table_id: str, restaurant_id: str):
    result = await db.execute(
        select(RestaurantTable).where(
            RestaurantTable.id == table_id,
            RestaurantTable.restaurant_id == restaurant_id,
        )
    )
    return result.scalar_one_or_none()


async def update_table(db: AsyncSession, table_id: str, restaurant_id: str, updates: TableUpdate):
    table = await get_table(db, table_id, restaurant_id)
    if not table:
        return None
    for key, value in updates.model_dump(exclude_unset=True).items():
        setattr(table, key, value)
    await db.commit()
    await db.refresh(table)
    return table


async def delete_table(db: AsyncSession, table_id: str, restaurant_id: str):
    table = await get_table(db, table_id, restaurant_id)
    if table:
        await db.delete(table)
        await db.commit()
    return table


async def set_occupied(db: AsyncSession, restaurant_id: str, table_number: int, occupied: bool = True) -> bool:
    """Flag a table by number. Returns False when no such table exists."""
    result = await db.execute(
        update(RestaurantTable)
        .where(
            RestaurantTable.restaurant_id == restaurant_id,
            RestaurantTable.table_number == table_number,
        )
        .values(is_occupied=occupied)
    )
    await db.commit()
    return result.rowcount > 0
