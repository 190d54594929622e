from typing import Dict, List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.order_service.models import Order


class RiderRepository:

    @staticmethod
    async def count_orders_by_status(db: AsyncSession, rider_id: int) -> Dict[str, int]:
        result = await db.execute(
            select(Order.status, func.count(Order.id))
            .where(Order.rider_id == rider_id)
            .group_by(Order.status)
        )
        return {status: count for status, count in result.all()}

    @staticmethod
    async def count_active_deliveries(db: AsyncSession, rider_ids: List[int]) -> Dict[int, int]:
        """Number of ``shipped`` orders per rider; riders with none are absent."""
        if not rider_ids:
            return {}
        result = await db.execute(
            select(Order.rider_id, func.count(Order.id))
            .where(Order.rider_id.in_(rider_ids), Order.status == "shipped")
            .group_by(Order.rider_id)
        )
        return {rider_id: count for rider_id, count in result.all()}
