from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from restaurantos.domain.order_status import StaffRole
from restaurantos.models.restaurant import Restaurant
from restaurantos.models.staff import StaffAssignment
from restaurantos.schemas.restaurant import RestaurantCreate, RestaurantUpdate
import uuid


async def create_restaurant(db: AsyncSession, owner_id, data: RestaurantCreate):
    """Register a restaurant and its owner staff record in one transaction"""
    restaurant = Restaurant(
        id=str(uuid.uuid4()),
        owner_id=owner_id,
        **data.model_dump(),
    )
    db.add(restaurant)
    await db.flush()  # populate restaurant.id

    db.add(
        StaffAssignment(
            id=str(uuid.uuid4()),
            restaurant_id=restaurant.id,
            user_id=owner_id,
            role=StaffRole.OWNER.value,
            is_active=True,
        )
    )
    await db.commit()
    await db.refresh(restaurant)
    return restaurant


async def get_restaurant(db: AsyncSession, restaurant_id: str):
    result = await db.execute(select(Restaurant).where(Restaurant.id == restaurant_id))
    return result.scalar_one_or_none()


async def get_owned_restaurant(db: AsyncSession, owner_id):
    result = await db.execute(
        select(Restaurant)
        .where(Restaurant.owner_id == owner_id)
        .order_by(Restaurant.created_at)
    )
    return result.scalars().first()


async def update_restaurant(db: AsyncSession, restaurant_id: str, updates: RestaurantUpdate):
    restaurant = await get_restaurant(db, restaurant_id)
    if not restaurant:
        return None
    for key, value in updates.model_dump(exclude_unset=True).items():
        setattr(restaurant, key, value)
    await db.commit()
    await db.refresh(restaurant)
    return restaurant


async def set_logo_url(db: AsyncSession, restaurant_id: str, logo_url: str):
    restaurant = await get_restaurant(db, restaurant_id)
    if not restaurant:
        return None
    restaurant.logo_url = logo_url
    await db.commit()
    await db.refresh(restaurant)
    return restaurant
