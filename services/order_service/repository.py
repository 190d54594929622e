from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Order

class OrderRepository:
    @staticmethod
    async def add_order(db: AsyncSession, order: Order):
        """Stage a new order and assign its id without committing."""
        db.add(order)
        await db.flush()
        return order

    @staticmethod
    async def save(db: AsyncSession, order: Order):
        db.add(order)
        await db.commit()
        return order

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int) -> Optional[Order]:
        result = await db.execute(select(Order).where(Order.id == order_id))
        return result.scalars().first()

    @staticmethod
    async def list_orders(
        db: AsyncSession,
        user_id: Optional[int] = None,
        rider_id: Optional[int] = None,
    ) -> List[Order]:
        stmt = select(Order)
        if user_id is not None:
            stmt = stmt.where(Order.user_id == user_id)
        if rider_id is not None:
            stmt = stmt.where(Order.rider_id == rider_id)
        result = await db.execute(stmt.order_by(Order.created_at.desc(), Order.id.desc()))
        return list(result.scalars().all())
