from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from restaurantos.models.staff import StaffAssignment
from restaurantos.models.user import User
from restaurantos.schemas.staff import StaffUpdate
import uuid


async def get_active_assignment(db: AsyncSession, restaurant_id: str, user_id):
    result = await db.execute(
        select(StaffAssignment).where(
            StaffAssignment.restaurant_id == restaurant_id,
            StaffAssignment.user_id == user_id,
            StaffAssignment.is_active == True,
        )
    )
    return result.scalar_one_or_none()


async def get_first_active_assignment(db: AsyncSession, user_id):
    result = await db.execute(
        select(StaffAssignment)
        .where(StaffAssignment.user_id == user_id, StaffAssignment.is_active == True)
        .order_by(StaffAssignment.created_at)
    )
    return result.scalars().first()


async def get_staff(db: AsyncSession, restaurant_id: str):
    result = await db.execute(
        select(StaffAssignment)
        .where(StaffAssignment.restaurant_id == restaurant_id)
        .order_by(StaffAssignment.created_at)
    )
    return result.scalars().all()


async def get_assignment(db: AsyncSession, assignment_id: str, restaurant_id: str):
    result = await db.execute(
        select(StaffAssignment).where(
            StaffAssignment.id == assignment_id,
            StaffAssignment.restaurant_id == restaurant_id,
        )
    )
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str):
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def create_assignment(db: AsyncSession, restaurant_id: str, user_id, role: str):
    assignment = StaffAssignment(
        id=str(uuid.uuid4()),
        restaurant_id=restaurant_id,
        user_id=user_id,
        role=role,
        is_active=True,
    )
    db.add(assignment)
    await db.commit()
    await db.refresh(assignment)
    return assignment


async def update_assignment(db: AsyncSession, assignment_id: str, restaurant_id: str, updates: StaffUpdate):
    assignment = await get_assignment(db, assignment_id, restaurant_id)
    if not assignment:
        return None
    for key, value in updates.model_dump(exclude_unset=True).items():
        setattr(assignment, key, value)
    await db.commit()
    await db.refresh(assignment)
    return assignment


async def delete_assignment(db: AsyncSession, assignment_id: str, restaurant_id: str):
    assignment = await get_assignment(db, assignment_id, restaurant_id)
    if assignment:
        await db.delete(assignment)
        await db.commit()
    return assignment
