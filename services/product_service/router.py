from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import get_current_user, require_admin
from services.auth_service.models import User

from .schemas import (
    ProductCreate,
    ProductFilters,
    ProductResponse,
    ProductSummary,
    ProductUpdate,
    ReviewCreate,
)
from .service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("", response_model=list[ProductSummary])
async def list_products(
    filters: ProductFilters = Depends(),
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.list_products(db, filters)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    return await ProductService.get_product_by_id(db, product_id)


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product: ProductCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.create_product(db, product)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.update_product(db, product_id, payload)


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await ProductService.delete_product(db, product_id)
    return {"message": "Product deleted successfully"}


@router.post("/{product_id}/reviews", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def add_review(
    product_id: int,
    review: ReviewCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ProductService.add_review(db, product_id, user, review)
