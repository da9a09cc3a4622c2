# scripts/seed_demo_restaurant.py
"""Seed a demo restaurant with the placeholder menu, 12 tables and a few staff logins.

    python -m scripts.seed_demo_restaurant --owner-email owner@example.com --password secret
"""
import argparse
import asyncio

from fastapi_users.password import PasswordHelper
from sqlalchemy.future import select

from restaurantos.crud import restaurant as restaurant_crud
from restaurantos.data.fallback_menu import DEMO_TABLES, FALLBACK_MENU_ITEMS
from restaurantos.db import async_session, create_db_and_tables
from restaurantos.models.menu.menu_item import MenuItem
from restaurantos.models.staff import StaffAssignment
from restaurantos.models.table import RestaurantTable
from restaurantos.models.user import User
from restaurantos.schemas.restaurant import RestaurantCreate

DEMO_STAFF = [
    {"email": "chef@example.com", "name": "Demo Chef", "role": "chef"},
    {"email": "waiter@example.com", "name": "Demo Waiter", "role": "waiter"},
]

password_helper = PasswordHelper()


async def get_or_create_user(session, email: str, name: str, password: str) -> User:
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user:
        print(f"⚠️  User '{email}' already exists. Skipping.")
        return user
    user = User(
        email=email,
        name=name,
        hashed_password=password_helper.hash(password),
        is_active=True,
        is_verified=True,
    )
    session.add(user)
    await session.commit()
    print(f"✅ Created user: {email}")
    return user


async def seed(owner_email: str, password: str, name: str):
    await create_db_and_tables()

    async with async_session() as session:
        owner = await get_or_create_user(session, owner_email, "Owner", password)

        restaurant = await restaurant_crud.get_owned_restaurant(session, owner.id)
        if restaurant:
            print(f"🏢 Restaurant '{restaurant.name}' already exists. Nothing to seed.")
            return

        restaurant = await restaurant_crud.create_restaurant(
            session,
            owner.id,
            RestaurantCreate(name=name, cuisine_type="Modern American", city="Springfield"),
        )
        print(f"🏢 Created restaurant: {restaurant.name} ({restaurant.id})")

        for item in FALLBACK_MENU_ITEMS:
            data = {k: v for k, v in item.items() if k != "id"}
            session.add(MenuItem(restaurant_id=restaurant.id, **data))

        for table_number, capacity in DEMO_TABLES:
            session.add(
                RestaurantTable(
                    restaurant_id=restaurant.id,
                    table_number=table_number,
                    capacity=capacity,
                )
            )
        await session.commit()
        print(f"🍽️  Added {len(FALLBACK_MENU_ITEMS)} menu items and {len(DEMO_TABLES)} tables")

        for staff in DEMO_STAFF:
            user = await get_or_create_user(session, staff["email"], staff["name"], password)
            session.add(
                StaffAssignment(restaurant_id=restaurant.id, user_id=user.id, role=staff["role"])
            )
            print(f"👤 {staff['email']} -> {staff['role']}")
        await session.commit()

    print("✅ Done seeding demo restaurant.\n")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed a demo restaurant")
    parser.add_argument("--owner-email", default="owner@example.com")
    parser.add_argument("--password", required=True)
    parser.add_argument("--name", default="The Demo Bistro")
    args = parser.parse_args()

    asyncio.run(seed(args.owner_email, args.password, args.name))
