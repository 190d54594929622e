from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import get_current_user, require_admin, require_customer, require_rider
from services.auth_service.models import User

from .schemas import DeliveryUpdate, OrderCreate, OrderResponse, StatusUpdate
from .service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get("", response_model=list[OrderResponse])
async def list_orders(admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    return await OrderService.list_orders(db)


# Static paths are declared before /{order_id}
@router.get("/rider", response_model=list[OrderResponse])
async def list_rider_orders(rider: User = Depends(require_rider), db: AsyncSession = Depends(get_db)):
    return await OrderService.list_rider_orders(db, rider)


@router.get("/my-orders", response_model=list[OrderResponse])
async def list_my_orders(customer: User = Depends(require_customer), db: AsyncSession = Depends(get_db)):
    return await OrderService.list_user_orders(db, customer)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: int, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    return await OrderService.get_order_for(db, order_id, user)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    order: OrderCreate,
    customer: User = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.create_order(db, customer, order)


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_status(
    order_id: int,
    payload: StatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.update_status(db, order_id, payload)


@router.patch("/{order_id}/delivery", response_model=OrderResponse)
async def update_delivery(
    order_id: int,
    payload: DeliveryUpdate,
    rider: User = Depends(require_rider),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.update_delivery(db, order_id, rider, payload)
