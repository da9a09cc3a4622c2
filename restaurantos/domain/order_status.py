"""Order status enumeration, allowed transitions and kitchen timing rules."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Iterable, Optional


class OrderStatus(str, Enum):
    """Lifecycle states for an order. Orders only ever move forward."""

    PENDING = "pending"
    COOKING = "cooking"
    READY = "ready"
    DELIVERED = "delivered"


class StaffRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    CHEF = "chef"
    WAITER = "waiter"


class TimingState(str, Enum):
    ON_TIME = "on_time"
    OVERDUE = "overdue"
    CRITICAL = "critical"


TRANSITIONS: dict[OrderStatus, list[OrderStatus]] = {
    OrderStatus.PENDING: [OrderStatus.COOKING],
    OrderStatus.COOKING: [OrderStatus.READY],
    OrderStatus.READY: [OrderStatus.DELIVERED],
    OrderStatus.DELIVERED: [],
}

# Roles allowed to trigger each transition, keyed by target status.
TRANSITION_ROLES: dict[OrderStatus, frozenset[StaffRole]] = {
    OrderStatus.COOKING: frozenset({StaffRole.CHEF, StaffRole.OWNER, StaffRole.ADMIN}),
    OrderStatus.READY: frozenset({StaffRole.CHEF, StaffRole.OWNER, StaffRole.ADMIN}),
    OrderStatus.DELIVERED: frozenset({StaffRole.WAITER, StaffRole.OWNER, StaffRole.ADMIN}),
}

# Roles allowed to place an order on behalf of a table.
ORDER_TAKING_ROLES = frozenset({StaffRole.WAITER, StaffRole.OWNER, StaffRole.ADMIN})
# Roles allowed to manage menu, tables and staff.
MANAGEMENT_ROLES = frozenset({StaffRole.OWNER, StaffRole.ADMIN})

# Roles allowed to open each staff view, keyed by view name.
VIEW_ROLES: dict[str, frozenset[StaffRole]] = {
    "kitchen": frozenset({StaffRole.CHEF, StaffRole.OWNER, StaffRole.ADMIN}),
    "waiter": frozenset({StaffRole.WAITER, StaffRole.OWNER, StaffRole.ADMIN}),
    "admin": MANAGEMENT_ROLES,
}

KITCHEN_STATUSES = (OrderStatus.PENDING, OrderStatus.COOKING, OrderStatus.READY)


def can_transition(src: OrderStatus, dst: OrderStatus) -> bool:
    """Return ``True`` if an order can move from ``src`` to ``dst``."""

    return dst in TRANSITIONS.get(src, [])


def next_status(current: OrderStatus) -> Optional[OrderStatus]:
    """Return the single forward step from ``current``, or ``None`` when terminal."""

    targets = TRANSITIONS.get(current, [])
    return targets[0] if targets else None


def role_can_trigger(role: StaffRole, dst: OrderStatus) -> bool:
    return role in TRANSITION_ROLES.get(dst, frozenset())


def estimate_minutes(
    prep_times: Iterable[Optional[int]],
    *,
    buffer_minutes: int = 5,
    default_prep: int = 15,
    empty_default: int = 20,
) -> int:
    """Estimated cooking time: the slowest line plus a fixed buffer.

    Lines without a prep time count as ``default_prep``. An order with no
    lines at all gets ``empty_default``.
    """

    times = [default_prep if t is None else int(t) for t in prep_times]
    if not times:
        return empty_default
    return max(times) + buffer_minutes


def timing_state(
    created_at: datetime,
    estimated_time: Optional[int],
    now: datetime,
    *,
    default_estimate: int = 20,
    critical_after: int = 10,
) -> TimingState:
    """Classify how an order is tracking against its estimate.

    ``created_at`` and ``now`` must share a timezone convention.
    """

    elapsed = (now - created_at).total_seconds() / 60
    estimate = default_estimate if estimated_time is None else estimated_time
    if elapsed > estimate + critical_after:
        return TimingState.CRITICAL
    if elapsed > estimate:
        return TimingState.OVERDUE
    return TimingState.ON_TIME

