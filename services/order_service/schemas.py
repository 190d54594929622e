from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

PaymentMethod = Literal["credit_card", "debit_card", "paypal"]
AdminStatus = Literal["paid", "shipped", "delivered", "undelivered", "cancelled"]
DeliveryStatus = Literal["delivered", "undelivered"]


class VariantChoice(BaseModel):
    color: str = Field(min_length=1)
    size: str = Field(min_length=1)


class OrderItemCreate(BaseModel):
    product_id: int
    variant: VariantChoice
    quantity: int = Field(ge=1)


class ShippingAddress(BaseModel):
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip_code: str = Field(min_length=1)
    country: str = Field(min_length=1)


class CardDetails(BaseModel):
    number: str
    expiry: str
    cvv: str


class OrderCreate(BaseModel):
    items: List[OrderItemCreate] = Field(min_length=1)
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    # Optional: when present for a card payment it is checked before ordering
    card: Optional[CardDetails] = None


class StatusUpdate(BaseModel):
    status: AdminStatus
    rider_id: Optional[int] = None
    note: Optional[str] = None


class DeliveryUpdate(BaseModel):
    status: DeliveryStatus
    note: Optional[str] = None


class OrderItemResponse(BaseModel):
    id: int
    product_id: int
    color: str
    size: str
    quantity: int
    price: float

    class Config:
        from_attributes = True


class StatusHistoryResponse(BaseModel):
    status: str
    timestamp: datetime
    note: str

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    user_id: int
    items: List[OrderItemResponse]
    total_amount: float
    status: str
    street: str
    city: str
    state: str
    zip_code: str
    country: str
    payment_method: str
    payment_status: str
    rider_id: Optional[int] = None
    tracking_number: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    status_history: List[StatusHistoryResponse]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
