from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from restaurantos.models.menu.menu_item import MenuItem
from restaurantos.schemas.menu_item import MenuItemCreate, MenuItemUpdate
import uuid


async def create_menu_item(db: AsyncSession, restaurant_id: str, item: MenuItemCreate):
    """Create a new menu item"""
    new_item = MenuItem(
        id=str(uuid.uuid4()),
        restaurant_id=restaurant_id,
        name=item.name.strip(),
        description=(item.description or "").strip() or None,
        price=item.price,
        category=item.category.value,
        is_available=item.is_available,
        prep_time=item.prep_time,
    )
    db.add(new_item)
    await db.commit()
    await db.refresh(new_item)
    return new_item


async def get_menu_items(db: AsyncSession, restaurant_id: str):
    """Get every menu item of a restaurant, ordered by category then name"""
    result = await db.execute(
        select(MenuItem)
        .where(MenuItem.restaurant_id == restaurant_id)
        .order_by(MenuItem.category, MenuItem.name)
    )
    return result.scalars().all()


async def get_available_menu_items(db: AsyncSession, restaurant_id: str):
    result = await db.execute(
        select(MenuItem).where(
            MenuItem.restaurant_id == restaurant_id,
            MenuItem.is_available == True,
        )
    )
    return result.scalars().all()


async def get_menu_item(db: AsyncSession, item_id: str, restaurant_id: str):
    """Get a specific menu item"""
    result = await db.execute(
        select(MenuItem).where(MenuItem.id == item_id, MenuItem.restaurant_id == restaurant_id)
    )
    return result.scalar_one_or_none()


async def get_menu_items_by_ids(db: AsyncSession, item_ids):
    if not item_ids:
        return []
    result = await db.execute(select(MenuItem).where(MenuItem.id.in_(list(item_ids))))
    return result.scalars().all()


async def update_menu_item(db: AsyncSession, item_id: str, restaurant_id: str, updates: MenuItemUpdate):
    """Update a menu item"""
    item = await get_menu_item(db, item_id, restaurant_id)
    if not item:
        return None

    update_data = updates.model_dump(exclude_unset=True)
    if update_data.get("category") is not None:
        update_data["category"] = update_data["category"].value
    for key, value in update_data.items():
        setattr(item, key, value)

    await db.commit()
    await db.refresh(item)
    return item


async def toggle_availability(db: AsyncSession, item_id: str, restaurant_id: str):
    item = await get_menu_item(db, item_id, restaurant_id)
    if not item:
        return None
    item.is_available = not item.is_available
    await db.commit()
    await db.refresh(item)
    return item


async def set_image_url(db: AsyncSession, item_id: str, restaurant_id: str, image_url: str):
    item = await get_menu_item(db, item_id, restaurant_id)
    if not item:
        return None
    item.image_url = image_url
    await db.commit()
    await db.refresh(item)
    return item


async def delete_menu_item(db: AsyncSession, item_id: str, restaurant_id: str):
    """Delete a menu item"""
    item = await get_menu_item(db, item_id, restaurant_id)
    if item:
        await db.delete(item)
        await db.commit()
    return item
