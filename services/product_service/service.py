from typing import List, Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.exceptions import Conflict, ProductNotFound
from services.auth_service.models import User, utcnow

from .models import Product, Review, Variant
from .repository import ProductRepository
from .schemas import ProductCreate, ProductFilters, ProductUpdate, ReviewCreate

logger = structlog.get_logger(__name__)


def find_variant(product: Product, color: str, size: str) -> Optional[Variant]:
    """The variant identified by (color, size) within ``product``."""
    for variant in product.variants:
        if variant.color == color and variant.size == size:
            return variant
    return None


def average_rating(reviews) -> float:
    if not reviews:
        return 0.0
    return sum(r.rating for r in reviews) / len(reviews)


class ProductService:

    @staticmethod
    async def create_product(db: AsyncSession, data: ProductCreate) -> Product:
        product = Product(
            name=data.name.strip(),
            description=data.description.strip(),
            category=data.category,
            brand=data.brand.strip(),
            images=list(data.images),
            features=list(data.features),
            specifications=dict(data.specifications),
            variants=[Variant(**v.model_dump()) for v in data.variants],
            reviews=[],
            rating=0.0,
            is_active=True,
        )
        try:
            product = await ProductRepository.create_product(db, product)
        except IntegrityError:
            await db.rollback()
            raise Conflict("Variant SKU or color/size combination already exists")

        logger.info("product_created", product_id=product.id, variants=len(product.variants))
        return product

    @staticmethod
    async def list_products(db: AsyncSession, filters: Optional[ProductFilters] = None) -> List[Product]:
        return await ProductRepository.get_all_products(db, filters)

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int) -> Product:
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise ProductNotFound(product_id)
        return product

    @staticmethod
    async def update_product(db: AsyncSession, product_id: int, data: ProductUpdate) -> Product:
        product = await ProductService.get_product_by_id(db, product_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        variants = changes.pop("variants", None)
        for field, value in changes.items():
            setattr(product, field, value.strip() if isinstance(value, str) else value)

        try:
            if variants is not None:
                # Flush the removals first so replacement SKUs can be reused
                product.variants.clear()
                await db.flush()
                product.variants.extend(Variant(**v) for v in variants)
            product.updated_at = utcnow()
            product = await ProductRepository.update_product(db, product)
        except IntegrityError:
            await db.rollback()
            raise Conflict("Variant SKU or color/size combination already exists")

        logger.info("product_updated", product_id=product.id, fields=sorted(data.model_fields_set))
        return product

    @staticmethod
    async def delete_product(db: AsyncSession, product_id: int) -> Product:
        """Soft delete: the product disappears from listings but keeps its history."""
        product = await ProductService.get_product_by_id(db, product_id)
        product.is_active = False
        product.updated_at = utcnow()
        product = await ProductRepository.update_product(db, product)
        logger.info("product_deactivated", product_id=product.id)
        return product

    @staticmethod
    async def add_review(db: AsyncSession, product_id: int, user: User, data: ReviewCreate) -> Product:
        product = await ProductService.get_product_by_id(db, product_id)
        product.reviews.append(Review(user_id=user.id, rating=data.rating, comment=data.comment))
        product.rating = average_rating(product.reviews)
        product.updated_at = utcnow()
        product = await ProductRepository.update_product(db, product)
        logger.info("review_added", product_id=product.id, user_id=user.id, rating=product.rating)
        return product
