from typing import List

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.exceptions import (
    Forbidden,
    InsufficientStock,
    InvalidVariant,
    OrderNotFound,
    ProductNotFound,
    RiderNotFound,
    ValidationFailed,
)
from shared.observability import storefront_orders_created_total, storefront_stock_conflicts_total
from shared.validation import validate_payment_details, validate_shipping_address
from services.auth_service.models import User
from services.auth_service.repository import UserRepository
from services.product_service.repository import ProductRepository
from services.product_service.service import find_variant

from . import lifecycle
from .models import Order, OrderItem
from .repository import OrderRepository
from .schemas import DeliveryUpdate, OrderCreate, StatusUpdate

logger = structlog.get_logger(__name__)


class OrderService:
    @staticmethod
    async def create_order(db: AsyncSession, user: User, data: OrderCreate) -> Order:
        """
        Validate the requested lines against current stock, persist the order
        and take the stock, all in one transaction.

        Stock is taken with a conditional decrement, so a concurrent checkout
        that drained a variant after validation rolls this order back instead
        of overselling.
        """
        user_id = user.id

        errors = validate_shipping_address(data.shipping_address.model_dump())
        if data.card is not None:
            errors += validate_payment_details(data.payment_method, data.card.model_dump())
        if errors:
            raise ValidationFailed(errors)

        total = 0.0
        lines = []
        for item in data.items:
            product = await ProductRepository.get_product_by_id(db, item.product_id)
            if not product:
                storefront_orders_created_total.labels(outcome="not_found").inc()
                raise ProductNotFound(item.product_id)

            variant = find_variant(product, item.variant.color, item.variant.size)
            if not variant:
                storefront_orders_created_total.labels(outcome="invalid_variant").inc()
                raise InvalidVariant()

            if variant.stock < item.quantity:
                storefront_orders_created_total.labels(outcome="insufficient_stock").inc()
                raise InsufficientStock(f"Insufficient stock for {product.name} ({variant.color}/{variant.size})")

            total += variant.price * item.quantity
            lines.append((variant.id, OrderItem(
                product_id=product.id,
                color=variant.color,
                size=variant.size,
                quantity=item.quantity,
                price=variant.price,
            )))

        order = Order(
            user_id=user_id,
            items=[line for _, line in lines],
            status_history=[],
            total_amount=total,
            status="pending",
            payment_status="pending",
            payment_method=data.payment_method,
            **data.shipping_address.model_dump(),
        )
        await OrderRepository.add_order(db, order)

        for variant_id, line in lines:
            if not await ProductRepository.decrement_stock(db, variant_id, line.quantity):
                storefront_stock_conflicts_total.inc()
                storefront_orders_created_total.labels(outcome="insufficient_stock").inc()
                logger.warning("order_stock_conflict", user_id=user_id, variant_id=variant_id)
                # Rollback expires every instance in the session, the caller included
                await db.rollback()
                raise InsufficientStock()

        await db.commit()
        storefront_orders_created_total.labels(outcome="success").inc()
        logger.info("order_created", order_id=order.id, user_id=user_id, total=order.total_amount, lines=len(lines))
        return order

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int) -> Order:
        order = await OrderRepository.get_order(db, order_id)
        if not order:
            raise OrderNotFound()
        return order

    @staticmethod
    async def get_order_for(db: AsyncSession, order_id: int, user: User) -> Order:
        """Order detail, visible to its owner, admins and riders."""
        order = await OrderService.get_order(db, order_id)
        if user.role not in ("admin", "rider") and order.user_id != user.id:
            raise Forbidden()
        return order

    @staticmethod
    async def list_orders(db: AsyncSession) -> List[Order]:
        return await OrderRepository.list_orders(db)

    @staticmethod
    async def list_user_orders(db: AsyncSession, user: User) -> List[Order]:
        return await OrderRepository.list_orders(db, user_id=user.id)

    @staticmethod
    async def list_rider_orders(db: AsyncSession, rider: User) -> List[Order]:
        return await OrderRepository.list_orders(db, rider_id=rider.id)

    @staticmethod
    async def update_status(db: AsyncSession, order_id: int, data: StatusUpdate) -> Order:
        order = await OrderService.get_order(db, order_id)
        previous = order.status

        if lifecycle.is_terminal(order):
            # Permitted; logged for audit
            logger.warning("order_status_changed_after_terminal", order_id=order.id, previous=previous, status=data.status)

        if data.status == "shipped" and data.rider_id is not None:
            rider = await UserRepository.get_by_id(db, data.rider_id)
            if not rider or rider.role != "rider":
                raise RiderNotFound()
            lifecycle.assign_rider(order, rider.id)
        else:
            lifecycle.update_status(order, data.status, data.note)

        order = await OrderRepository.save(db, order)
        logger.info("order_status_changed", order_id=order.id, previous=previous, status=order.status, rider_id=order.rider_id)
        return order

    @staticmethod
    async def update_delivery(db: AsyncSession, order_id: int, rider: User, data: DeliveryUpdate) -> Order:
        order = await OrderService.get_order(db, order_id)

        if data.status == "delivered":
            lifecycle.mark_as_delivered(order, rider.id)
        else:
            lifecycle.mark_as_undelivered(order, rider.id, data.note)

        order = await OrderRepository.save(db, order)
        logger.info("order_delivery_updated", order_id=order.id, rider_id=rider.id, status=order.status)
        return order
