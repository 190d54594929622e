from typing import List

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.exceptions import Conflict, RiderNotFound, ValidationFailed
from shared.observability import storefront_registrations_total
from shared.validation import validate_phone_number
from services.auth_service.models import User
from services.auth_service.repository import UserRepository

from .repository import RiderRepository
from .schemas import AvailableRider, RiderCreate, RiderResponse, RiderStats, RiderUpdate

logger = structlog.get_logger(__name__)


def to_response(rider: User) -> RiderResponse:
    # Approval doubles as the rider's active flag
    return RiderResponse(
        id=rider.id,
        email=rider.email,
        name=rider.name,
        phone=rider.phone,
        is_active=rider.is_approved,
    )


def rank_by_load(riders: List[User], active: dict) -> List[AvailableRider]:
    """Riders ordered by ascending active deliveries; ties keep input order."""
    ranked = [
        AvailableRider(**to_response(r).model_dump(), active_deliveries=active.get(r.id, 0))
        for r in riders
    ]
    return sorted(ranked, key=lambda r: r.active_deliveries)


def _check_phone(phone: str) -> None:
    if not validate_phone_number(phone):
        raise ValidationFailed([{"field": "phone", "message": "Please enter a valid phone number"}])


class RiderService:

    @staticmethod
    async def list_riders(db: AsyncSession) -> List[RiderResponse]:
        riders = await UserRepository.list_by_role(db, "rider")
        return [to_response(r) for r in riders]

    @staticmethod
    async def get_rider(db: AsyncSession, rider_id: int) -> User:
        rider = await UserRepository.get_by_id(db, rider_id)
        if not rider or rider.role != "rider":
            raise RiderNotFound()
        return rider

    @staticmethod
    async def create_rider(db: AsyncSession, data: RiderCreate) -> RiderResponse:
        _check_phone(data.phone)
        if await UserRepository.get_by_email(db, data.email):
            raise Conflict("User already exists")

        rider = User(
            email=data.email.lower(),
            name=data.name.strip(),
            phone=data.phone.strip(),
            role="rider",
            is_approved=True,  # Auto-approved
        )
        rider = await UserRepository.create(db, rider)
        storefront_registrations_total.labels(source="rider").inc()
        logger.info("rider_created", rider_id=rider.id)
        return to_response(rider)

    @staticmethod
    async def update_rider(db: AsyncSession, rider_id: int, data: RiderUpdate) -> RiderResponse:
        rider = await RiderService.get_rider(db, rider_id)
        if data.name is not None:
            rider.name = data.name.strip()
        if data.phone is not None:
            _check_phone(data.phone)
            rider.phone = data.phone.strip()
        if data.is_active is not None:
            rider.is_approved = data.is_active

        rider = await UserRepository.save(db, rider)
        logger.info("rider_updated", rider_id=rider.id, fields=sorted(data.model_fields_set))
        return to_response(rider)

    @staticmethod
    async def rider_stats(db: AsyncSession, rider_id: int) -> RiderStats:
        rider = await RiderService.get_rider(db, rider_id)
        counts = await RiderRepository.count_orders_by_status(db, rider.id)
        return RiderStats(
            total_deliveries=sum(counts.values()),
            successful_deliveries=counts.get("delivered", 0),
            failed_deliveries=counts.get("undelivered", 0),
            current_active_deliveries=counts.get("shipped", 0),
        )

    @staticmethod
    async def available_riders(db: AsyncSession) -> List[AvailableRider]:
        """Approved riders, least loaded first. Suggests only; never assigns."""
        riders = await UserRepository.list_by_role(db, "rider", approved_only=True)
        riders.sort(key=lambda r: r.id)
        active = await RiderRepository.count_active_deliveries(db, [r.id for r in riders])
        return rank_by_load(riders, active)
