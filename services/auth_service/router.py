from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import AUTH_RATE_LIMIT, get_current_user, limiter, require_admin

from .models import User
from .schemas import (
    ApprovalUpdate,
    RegisterResponse,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)
from .service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new customer account (pending approval)",
)
@limiter.limit(AUTH_RATE_LIMIT)
async def register(request: Request, payload: UserCreate, db: AsyncSession = Depends(get_db)):
    user = await AuthService.register(db, payload)
    return RegisterResponse(
        message="Registration successful. Please wait for admin approval.",
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Authenticate and receive a JWT access token",
)
@limiter.limit(AUTH_RATE_LIMIT)
async def login(request: Request, payload: UserLogin, db: AsyncSession = Depends(get_db)):
    return await AuthService.login(db, payload)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get the current authenticated user's profile",
)
async def get_me(user: User = Depends(get_current_user)):
    return user


@router.patch(
    "/users/{user_id}/approval",
    response_model=UserResponse,
    summary="Approve or suspend a user account",
)
async def set_approval(
    user_id: int,
    payload: ApprovalUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await AuthService.set_approval(db, user_id, payload.is_approved)
