from .jwt_handler import create_access_token, create_user_token, verify_access_token
from .dependencies import (
    get_current_user,
    require_roles,
    require_admin,
    require_rider,
    require_customer,
)
from .rate_limiter import limiter, user_id_or_ip, AUTH_RATE_LIMIT

__all__ = [
    "create_access_token",
    "create_user_token",
    "verify_access_token",
    "get_current_user",
    "require_roles",
    "require_admin",
    "require_rider",
    "require_customer",
    "limiter",
    "user_id_or_ip",
    "AUTH_RATE_LIMIT",
]
