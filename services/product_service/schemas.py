from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

Category = Literal["console", "accessory", "game"]


class VariantBase(BaseModel):
    color: str = Field(min_length=1)
    size: str = Field(min_length=1)
    stock: int = Field(ge=0)
    price: float = Field(ge=0)
    sku: str = Field(min_length=1)


class VariantCreate(VariantBase):
    pass


class VariantResponse(VariantBase):
    id: int

    class Config:
        from_attributes = True


class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    category: Category
    brand: str = Field(min_length=1)
    images: List[str] = Field(min_length=1)
    variants: List[VariantCreate] = Field(min_length=1)
    features: List[str] = []
    specifications: Dict[str, str] = {}


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[Category] = None
    brand: Optional[str] = Field(default=None, min_length=1)
    images: Optional[List[str]] = Field(default=None, min_length=1)
    variants: Optional[List[VariantCreate]] = Field(default=None, min_length=1)
    features: Optional[List[str]] = None
    specifications: Optional[Dict[str, str]] = None


class ProductFilters(BaseModel):
    category: Optional[Category] = None
    brand: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    color: Optional[str] = None
    size: Optional[str] = None


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None


class ReviewResponse(BaseModel):
    id: int
    user_id: int
    rating: int
    comment: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ProductSummary(BaseModel):
    id: int
    name: str
    description: str
    category: str
    brand: str
    images: List[str]
    variants: List[VariantResponse]
    rating: float
    in_stock: bool

    class Config:
        from_attributes = True


class ProductResponse(ProductSummary):
    features: List[str] = []
    specifications: Dict[str, str] = {}
    reviews: List[ReviewResponse] = []
    is_active: bool
    created_at: datetime
    updated_at: datetime
