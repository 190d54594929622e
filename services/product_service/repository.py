from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Product, Variant
from .schemas import ProductFilters


class ProductRepository:

    @staticmethod
    async def create_product(db: AsyncSession, product: Product):
        db.add(product)
        await db.commit()
        return product

    @staticmethod
    async def get_all_products(db: AsyncSession, filters: Optional[ProductFilters] = None) -> List[Product]:
        stmt = select(Product).where(Product.is_active.is_(True))

        if filters:
            if filters.category:
                stmt = stmt.where(Product.category == filters.category)
            if filters.brand:
                stmt = stmt.where(Product.brand == filters.brand)
            # Each variant condition matches independently, on any variant
            if filters.min_price is not None:
                stmt = stmt.where(Product.variants.any(Variant.price >= filters.min_price))
            if filters.max_price is not None:
                stmt = stmt.where(Product.variants.any(Variant.price <= filters.max_price))
            if filters.color:
                stmt = stmt.where(Product.variants.any(Variant.color == filters.color))
            if filters.size:
                stmt = stmt.where(Product.variants.any(Variant.size == filters.size))

        result = await db.execute(stmt.order_by(Product.created_at.desc(), Product.id.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int) -> Optional[Product]:
        result = await db.execute(select(Product).where(Product.id == product_id))
        return result.scalars().first()

    @staticmethod
    async def update_product(db: AsyncSession, product: Product):
        db.add(product)
        await db.commit()
        return product

    @staticmethod
    async def decrement_stock(db: AsyncSession, variant_id: int, quantity: int) -> bool:
        """
        Conditionally take ``quantity`` units from a variant.

        Runs inside the caller's transaction and does not commit. Returns False
        when the variant no longer holds enough stock.
        """
        result = await db.execute(
            update(Variant)
            .where(Variant.id == variant_id, Variant.stock >= quantity)
            .values(stock=Variant.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
