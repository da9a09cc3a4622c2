from .base import Base
from .user import User
from .restaurant import Restaurant
from .staff import StaffAssignment
from .menu.menu_item import MenuItem
from .order import Order, OrderLine
from .table import RestaurantTable
from .side_effect import FailedSideEffect
