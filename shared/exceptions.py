"""
Error taxonomy shared by every service.

Each error is an HTTPException subclass, so FastAPI renders it as
``{"detail": ...}`` with the right status code and services can raise it
directly without a translation layer in the routers.
"""
from typing import List, Optional

from fastapi import HTTPException, status


class NotFound(HTTPException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ProductNotFound(NotFound):
    def __init__(self, product_id: Optional[int] = None):
        detail = f"Product {product_id} not found" if product_id is not None else "Product not found"
        super().__init__(detail)


class OrderNotFound(NotFound):
    def __init__(self):
        super().__init__("Order not found")


class RiderNotFound(NotFound):
    def __init__(self):
        super().__init__("Rider not found")


class UserNotFound(NotFound):
    def __init__(self):
        super().__init__("User not found")


class ValidationFailed(HTTPException):
    """Carries a list of ``{"field", "message"}`` errors as the detail."""

    def __init__(self, errors: List[dict]):
        super().__init__(status_code=422, detail=errors)
        self.errors = errors


class InvalidVariant(HTTPException):
    def __init__(self, detail: str = "Invalid variant selected"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InsufficientStock(HTTPException):
    def __init__(self, detail: str = "Insufficient stock"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class Unauthorized(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Access denied"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotAssigned(Forbidden):
    def __init__(self):
        super().__init__("This order is not assigned to you")


class Conflict(HTTPException):
    def __init__(self, detail: str = "Resource already exists"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)
