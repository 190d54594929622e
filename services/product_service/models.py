from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from shared.config.database import Base
from services.auth_service.models import utcnow

CATEGORIES = ("console", "accessory", "game")


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(20), nullable=False, index=True) # console, accessory, game
    brand = Column(String(120), nullable=False, index=True)
    images = Column(JSON, nullable=False, default=list)
    features = Column(JSON, nullable=False, default=list)
    specifications = Column(JSON, nullable=False, default=dict)
    # Mean of review ratings, recomputed whenever a review is added
    rating = Column(Float, nullable=False, default=0.0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    variants = relationship(
        "Variant",
        back_populates="product",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Variant.id",
    )
    reviews = relationship(
        "Review",
        back_populates="product",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Review.id",
    )

    @property
    def in_stock(self) -> bool:
        """True while at least one variant can still be ordered."""
        return any(v.stock > 0 for v in self.variants)


class Variant(Base):
    __tablename__ = "product_variants"
    __table_args__ = (
        UniqueConstraint("product_id", "color", "size", name="uq_variant_color_size"),
        CheckConstraint("stock >= 0", name="ck_variant_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_variant_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    color = Column(String(60), nullable=False)
    size = Column(String(60), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    price = Column(Float, nullable=False)
    sku = Column(String(120), nullable=False, unique=True)

    product = relationship("Product", back_populates="variants")


class Review(Base):
    __tablename__ = "product_reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating_range"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    product = relationship("Product", back_populates="reviews")
