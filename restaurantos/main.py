import asyncio
import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from restaurantos.api import router as api_router
from restaurantos.auth.routes import auth_backend, current_active_user, fastapi_users
from restaurantos.core.config import settings
from restaurantos.core.logging import configure_logging
from restaurantos.db import async_session, create_db_and_tables
from restaurantos.models.user import User
from restaurantos.schemas.user import UserCreate, UserRead, UserUpdate
from restaurantos.services.change_feed import change_feed
from restaurantos.services.occupancy import occupancy_retry_loop
import restaurantos.models  # registers all models via models/__init__.py
from sqlalchemy.orm import configure_mappers

configure_mappers()
configure_logging()

logger = logging.getLogger(__name__)

# Create the FastAPI app
app = FastAPI(
    title="RestaurantOS API",
    version="1.0.0",
    description="Menus, table orders, kitchen and waiter views for restaurants.",
)

# Allow frontend dev (CORS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Auth routes
app.include_router(
    fastapi_users.get_auth_router(auth_backend),
    prefix="/auth/jwt",
    tags=["auth"],
)
app.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix="/auth",
    tags=["auth"],
)
app.include_router(
    fastapi_users.get_users_router(UserRead, UserUpdate),
    prefix="/users",
    tags=["users"],
)

# Core app routers
app.include_router(api_router)

_background_tasks: list[asyncio.Task] = []


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/whoami", response_model=UserRead)
async def whoami(user: User = Depends(current_active_user)):
    return user


@app.on_event("startup")
async def on_startup():
    if settings.create_tables_on_startup:
        logger.info("Ensuring database schema")
        await create_db_and_tables()

    await change_feed.start()

    if settings.occupancy_retry_interval_seconds > 0:
        _background_tasks.append(
            asyncio.create_task(
                occupancy_retry_loop(
                    settings.occupancy_retry_interval_seconds, async_session, change_feed
                )
            )
        )


@app.on_event("shutdown")
async def on_shutdown():
    for task in _background_tasks:
        task.cancel()
    _background_tasks.clear()
    await change_feed.stop()
