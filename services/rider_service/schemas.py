from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class RiderCreate(BaseModel):
    email: EmailStr
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)


class RiderUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = Field(default=None, min_length=1)
    is_active: Optional[bool] = None


class RiderResponse(BaseModel):
    id: int
    email: str
    name: str
    phone: Optional[str] = None
    is_active: bool


class AvailableRider(RiderResponse):
    active_deliveries: int


class RiderStats(BaseModel):
    total_deliveries: int
    successful_deliveries: int
    failed_deliveries: int
    current_active_deliveries: int
