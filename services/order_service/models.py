from sqlalchemy import CheckConstraint, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from shared.config.database import Base
from services.auth_service.models import utcnow

ORDER_STATUSES = ("pending", "paid", "shipped", "delivered", "undelivered", "cancelled")
PAYMENT_METHODS = ("credit_card", "debit_card", "paypal")
PAYMENT_STATUSES = ("pending", "completed", "failed")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    total_amount = Column(Float, nullable=False) # calculated at creation, never recomputed
    status = Column(String(20), nullable=False, default="pending", index=True)
    street = Column(String(255), nullable=False)
    city = Column(String(120), nullable=False)
    state = Column(String(120), nullable=False)
    zip_code = Column(String(20), nullable=False)
    country = Column(String(120), nullable=False)
    payment_method = Column(String(20), nullable=False) # credit_card, debit_card, paypal
    payment_status = Column(String(20), nullable=False, default="pending")
    rider_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    tracking_number = Column(String(120), nullable=True)
    estimated_delivery = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.id",
    )
    status_history = relationship(
        "StatusHistoryEntry",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="StatusHistoryEntry.id",
    )


class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_item_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    color = Column(String(60), nullable=False)
    size = Column(String(60), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False) # unit price captured at purchase time

    order = relationship("Order", back_populates="items")


class StatusHistoryEntry(Base):
    """Append-only: rows are only ever added, through lifecycle.update_status."""

    __tablename__ = "order_status_history"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    note = Column(Text, nullable=False, default="")

    order = relationship("Order", back_populates="status_history")
