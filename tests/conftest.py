import asyncio
import os
import tempfile
from dataclasses import dataclass, field
from decimal import Decimal

# Point the app at a throwaway database before anything imports settings.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="restaurantos-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB_DIR}/test.db"
os.environ["REDIS_URL"] = ""
os.environ["LOG_JSON"] = "false"
os.environ["OCCUPANCY_RETRY_INTERVAL_SECONDS"] = "0"

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from sqlalchemy import text

from restaurantos.auth.routes import current_active_user
from restaurantos.crud import restaurant as restaurant_crud
from restaurantos.db import async_session, create_db_and_tables, drop_db_and_tables
from restaurantos.main import app
from restaurantos.models.menu.menu_item import MenuItem
from restaurantos.models.staff import StaffAssignment
from restaurantos.models.table import RestaurantTable
from restaurantos.models.user import User
from restaurantos.schemas.restaurant import RestaurantCreate


def run(coro):
    return asyncio.run(coro)


@pytest.fixture(autouse=True)
def fresh_db():
    async def _reset():
        await drop_db_and_tables()
        await create_db_and_tables()

    run(_reset())
    yield


async def block_table_updates():
    """Make every UPDATE of restaurant_tables fail inside the database."""
    async with async_session() as db:
        await db.execute(text(
            "CREATE TRIGGER block_table_updates BEFORE UPDATE ON restaurant_tables "
            "BEGIN SELECT RAISE(ABORT, 'table updates are blocked'); END"
        ))
        await db.commit()


async def allow_table_updates():
    async with async_session() as db:
        await db.execute(text("DROP TRIGGER IF EXISTS block_table_updates"))
        await db.commit()


async def create_user(email: str, name: str = None) -> User:
    async with async_session() as db:
        user = User(
            email=email,
            name=name,
            hashed_password="not-a-real-hash",
            is_active=True,
            is_verified=True,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user


@dataclass
class World:
    owner: User
    chef: User
    waiter: User
    outsider: User
    restaurant_id: str
    items: dict = field(default_factory=dict)


async def _build_world() -> World:
    owner = await create_user("owner@example.com", "Olive Owner")
    chef = await create_user("chef@example.com", "Casey Chef")
    waiter = await create_user("waiter@example.com", "Wren Waiter")
    outsider = await create_user("outsider@example.com", "Otto Outsider")

    async with async_session() as db:
        restaurant = await restaurant_crud.create_restaurant(
            db, owner.id, RestaurantCreate(name="Test Bistro", cuisine_type="Italian")
        )
        db.add(StaffAssignment(restaurant_id=restaurant.id, user_id=chef.id, role="chef"))
        db.add(StaffAssignment(restaurant_id=restaurant.id, user_id=waiter.id, role="waiter"))

        items = {
            "pasta": MenuItem(
                restaurant_id=restaurant.id, name="Pasta", description="Fresh tagliatelle",
                price=Decimal("10.00"), category="Main Courses", prep_time=12,
            ),
            "soup": MenuItem(
                restaurant_id=restaurant.id, name="Soup", description="Tomato basil",
                price=Decimal("5.00"), category="Appetizers", prep_time=22,
            ),
            "steak": MenuItem(
                restaurant_id=restaurant.id, name="Ribeye Steak", description="Premium 12oz ribeye",
                price=Decimal("42.99"), category="Main Courses", prep_time=None,
            ),
            "special": MenuItem(
                restaurant_id=restaurant.id, name="Seasonal Special", description="Chef's choice",
                price=Decimal("19.00"), category="Specials", prep_time=10, is_available=False,
            ),
        }
        db.add_all(items.values())
        for number in range(1, 9):
            db.add(RestaurantTable(restaurant_id=restaurant.id, table_number=number, capacity=4))
        await db.commit()

        return World(
            owner=owner,
            chef=chef,
            waiter=waiter,
            outsider=outsider,
            restaurant_id=restaurant.id,
            items={key: item.id for key, item in items.items()},
        )


@pytest.fixture
def world() -> World:
    return run(_build_world())


@pytest.fixture
def acting():
    """Holder for the user the API should treat as logged in (``None`` = anonymous)."""
    holder = {"user": None}

    def _current_user():
        if holder["user"] is None:
            raise HTTPException(status_code=401, detail="Unauthorized")
        return holder["user"]

    app.dependency_overrides[current_active_user] = _current_user
    yield holder
    app.dependency_overrides.pop(current_active_user, None)


@pytest.fixture
def client(acting):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def raw_client():
    """Client that goes through real JWT authentication."""
    with TestClient(app) as c:
        yield c
