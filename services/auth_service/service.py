import structlog
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from shared.exceptions import Conflict, Forbidden, Unauthorized, UserNotFound, ValidationFailed
from shared.observability import storefront_logins_total, storefront_registrations_total
from shared.security.jwt_handler import create_user_token
from shared.validation import validate_field

from .models import User
from .repository import UserRepository
from .schemas import ExternalIdentity, TokenResponse, UserCreate, UserLogin, UserSummary

logger = structlog.get_logger(__name__)

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthService:

    @staticmethod
    def _hash_password(password: str) -> str:
        return _pwd_context.hash(password)

    @staticmethod
    def _verify_password(plain: str, hashed: str) -> bool:
        return _pwd_context.verify(plain, hashed)

    @staticmethod
    async def register(db: AsyncSession, data: UserCreate) -> User:
        errors = []
        for field, value, rules in (
            ("name", data.name, {"required": True, "max_length": 255}),
            ("password", data.password, {"required": True, "password": True}),
        ):
            message = validate_field(value, rules)
            if message:
                errors.append({"field": field, "message": message})
        if errors:
            raise ValidationFailed(errors)

        existing = await UserRepository.get_by_email(db, data.email)
        if existing:
            raise Conflict("Email already registered")

        user = User(
            email=data.email.lower(),
            name=data.name.strip(),
            hashed_password=AuthService._hash_password(data.password),
            role="customer",
            is_approved=False,  # Requires admin approval
        )
        user = await UserRepository.create(db, user)
        storefront_registrations_total.labels(source="local").inc()
        logger.info("user_registered", user_id=user.id)
        return user

    @staticmethod
    async def login(db: AsyncSession, data: UserLogin) -> TokenResponse:
        user = await UserRepository.get_by_email(db, data.email)
        # External-identity accounts have no password to check against
        if not user or not user.hashed_password or not AuthService._verify_password(data.password, user.hashed_password):
            storefront_logins_total.labels(outcome="invalid_credentials").inc()
            raise Unauthorized("Incorrect email or password")
        if not user.is_approved:
            storefront_logins_total.labels(outcome="pending_approval").inc()
            raise Forbidden("Your account is pending approval")

        storefront_logins_total.labels(outcome="success").inc()
        logger.info("user_logged_in", user_id=user.id, role=user.role)
        return TokenResponse(
            access_token=create_user_token(user.id, user.role),
            user=UserSummary.model_validate(user),
        )

    @staticmethod
    async def login_with_external_identity(db: AsyncSession, identity: ExternalIdentity) -> User:
        """
        Resolve the local account for an identity-provider login.

        Matches on the provider id first, then links an existing account with
        the same email, and otherwise creates a new customer. Accounts created
        here are approved immediately.
        """
        user = await UserRepository.get_by_google_id(db, identity.google_id)
        if user:
            return user

        user = await UserRepository.get_by_email(db, identity.email)
        if user:
            user.google_id = identity.google_id
            logger.info("external_identity_linked", user_id=user.id)
            return await UserRepository.save(db, user)

        user = User(
            email=identity.email.lower(),
            name=identity.name,
            google_id=identity.google_id,
            role="customer",
            is_approved=True,
        )
        user = await UserRepository.create(db, user)
        storefront_registrations_total.labels(source="external").inc()
        logger.info("user_registered", user_id=user.id, source="external")
        return user

    @staticmethod
    async def set_approval(db: AsyncSession, user_id: int, is_approved: bool) -> User:
        user = await AuthService.get_user_by_id(db, user_id)
        user.is_approved = is_approved
        user = await UserRepository.save(db, user)
        logger.info("user_approval_changed", user_id=user.id, is_approved=is_approved)
        return user

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: int) -> User:
        user = await UserRepository.get_by_id(db, user_id)
        if not user:
            raise UserNotFound()
        return user
