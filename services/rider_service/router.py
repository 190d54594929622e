from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import require_admin

from .schemas import AvailableRider, RiderCreate, RiderResponse, RiderStats, RiderUpdate
from .service import RiderService

# Every rider roster endpoint is admin-only
router = APIRouter(prefix="/riders", tags=["Riders"], dependencies=[Depends(require_admin)])


@router.get("", response_model=list[RiderResponse])
async def list_riders(db: AsyncSession = Depends(get_db)):
    return await RiderService.list_riders(db)


@router.get("/available", response_model=list[AvailableRider])
async def available_riders(db: AsyncSession = Depends(get_db)):
    return await RiderService.available_riders(db)


@router.post("", response_model=RiderResponse, status_code=status.HTTP_201_CREATED)
async def create_rider(payload: RiderCreate, db: AsyncSession = Depends(get_db)):
    return await RiderService.create_rider(db, payload)


@router.put("/{rider_id}", response_model=RiderResponse)
async def update_rider(rider_id: int, payload: RiderUpdate, db: AsyncSession = Depends(get_db)):
    return await RiderService.update_rider(db, rider_id, payload)


@router.get("/{rider_id}/stats", response_model=RiderStats)
async def rider_stats(rider_id: int, db: AsyncSession = Depends(get_db)):
    return await RiderService.rider_stats(db, rider_id)
