# scripts/init_db.py
import argparse
import asyncio

from restaurantos.core.config import settings
from restaurantos.db import create_db_and_tables, drop_db_and_tables


async def init_db(reset: bool = False):
    if reset:
        await drop_db_and_tables()
        print("🗑️  Dropped all RestaurantOS tables.")
    await create_db_and_tables()
    print(f"✅ Tables ready on {settings.database_url.split('@')[-1]}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create RestaurantOS tables (development only; use alembic in production)")
    parser.add_argument("--reset", action="store_true", help="drop every table first")
    args = parser.parse_args()
    asyncio.run(init_db(reset=args.reset))
