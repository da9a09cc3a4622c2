from fastapi import APIRouter
from . import restaurant_routes
from . import staff_routes
from . import menu_routes
from . import table_routes
from . import order_routes
from . import view_routes
from . import public_routes

# Create main API router
router = APIRouter()

# Public customer endpoints
router.include_router(public_routes.router, prefix="/public", tags=["Customer"])

# Staff endpoints, scoped to one restaurant
router.include_router(restaurant_routes.router, prefix="/restaurants", tags=["Restaurants"])
router.include_router(staff_routes.router, prefix="/restaurants/{restaurant_id}/staff", tags=["Staff"])
router.include_router(menu_routes.router, prefix="/restaurants/{restaurant_id}/menu-items", tags=["Menu Items"])
router.include_router(table_routes.router, prefix="/restaurants/{restaurant_id}/tables", tags=["Tables"])
router.include_router(order_routes.router, prefix="/restaurants/{restaurant_id}/orders", tags=["Orders"])
router.include_router(view_routes.router, prefix="/restaurants/{restaurant_id}/views", tags=["Views"])

__all__ = ["router"]
