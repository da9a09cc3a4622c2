from dataclasses import dataclass
from typing import Optional, Tuple

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from restaurantos.auth.routes import current_active_user
from restaurantos.crud import restaurant as restaurant_crud
from restaurantos.crud import staff as staff_crud
from restaurantos.db import get_db
from restaurantos.domain.order_status import MANAGEMENT_ROLES, StaffRole
from restaurantos.models.restaurant import Restaurant
from restaurantos.models.user import User


@dataclass
class RestaurantContext:
    """Who is acting, at which restaurant, in what role."""

    user: User
    restaurant: Restaurant
    role: StaffRole

    @property
    def restaurant_id(self) -> str:
        return self.restaurant.id

    @property
    def can_manage(self) -> bool:
        return self.role in MANAGEMENT_ROLES


async def resolve_role(db: AsyncSession, restaurant: Restaurant, user: User) -> Optional[StaffRole]:
    if restaurant.owner_id == user.id:
        return StaffRole.OWNER
    assignment = await staff_crud.get_active_assignment(db, restaurant.id, user.id)
    return StaffRole(assignment.role) if assignment else None


async def find_user_restaurant(db: AsyncSession, user: User) -> Optional[Tuple[Restaurant, StaffRole]]:
    """The restaurant a user works at: the one they own, else their first active assignment."""
    owned = await restaurant_crud.get_owned_restaurant(db, user.id)
    if owned:
        return owned, StaffRole.OWNER
    assignment = await staff_crud.get_first_active_assignment(db, user.id)
    if not assignment:
        return None
    restaurant = await restaurant_crud.get_restaurant(db, assignment.restaurant_id)
    if not restaurant:
        return None
    return restaurant, StaffRole(assignment.role)


async def get_restaurant_context(
    restaurant_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(current_active_user),
) -> RestaurantContext:
    restaurant = await restaurant_crud.get_restaurant(db, restaurant_id)
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")

    role = await resolve_role(db, restaurant, user)
    if role is None:
        raise HTTPException(status_code=403, detail="You are not on the staff of this restaurant")
    return RestaurantContext(user=user, restaurant=restaurant, role=role)


def require_role(*roles: StaffRole):
    allowed = frozenset(roles)

    async def _dep(ctx: RestaurantContext = Depends(get_restaurant_context)) -> RestaurantContext:
        if ctx.role not in allowed:
            raise HTTPException(
                status_code=403,
                detail=f"Requires role: {', '.join(sorted(r.value for r in allowed))}",
            )
        return ctx

    return _dep


require_manager = require_role(*MANAGEMENT_ROLES)
