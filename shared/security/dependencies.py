from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.exceptions import Forbidden, Unauthorized
from services.auth_service.models import User
from services.auth_service.repository import UserRepository
from .jwt_handler import verify_access_token

# Defines the expected header format (Bearer <token>)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)

async def get_current_user(
    request: Request,
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Dependency to validate the JWT and load the approved user it names."""
    if not token:
        raise Unauthorized("No token, authorization denied")
        
    payload = verify_access_token(token)
    if payload is None:
        raise Unauthorized("Token is not valid")
        
    user_id = payload.get("sub")
    if user_id is None or not str(user_id).isdigit():
        raise Unauthorized("Token is not valid")

    user = await UserRepository.get_by_id(db, int(user_id))
    if user is None:
        raise Unauthorized("Token is not valid")

    if not user.is_approved:
        raise Forbidden("Your account is pending approval")
        
    # Store in request state for downstream use (like rate limiting)
    request.state.user_id = user.id
    return user

def require_roles(*roles: str):
    """Dependency factory: the current user must hold one of ``roles``."""

    async def _check_role(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise Forbidden(f"Access denied. {' or '.join(r.capitalize() for r in roles)} only.")
        return user

    return _check_role

require_admin = require_roles("admin")
require_rider = require_roles("rider")
require_customer = require_roles("customer")
