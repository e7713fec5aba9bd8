"""
Account service - learner sign-up, sign-in and bearer tokens.

Tokens are stateless HS256 JWTs. An access token authorises API calls;
a refresh token can only be traded for a new pair.
"""

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.auth.repository import UserRepository
from app.auth.schemas import (
    AccountRead,
    SignedIn,
    SignInRequest,
    SignUpRequest,
    TokenClaims,
    TokenPair,
)
from app.config import get_settings
from app.core.exceptions import (
    AuthenticationError,
    InvalidTokenError,
    UserAlreadyExistsError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)
settings = get_settings()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS = "access"
REFRESH = "refresh"


# ═══════════════════════════════════════════════════════════════════════════
# TOKENS
# ═══════════════════════════════════════════════════════════════════════════


def _encode(user_id: str, token_type: str, expires: datetime) -> str:
    return jwt.encode(
        {"sub": user_id, "exp": expires, "type": token_type},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def issue_tokens(user_id: str) -> TokenPair:
    """Sign a fresh access/refresh pair for a learner."""
    now = datetime.now(timezone.utc)
    access_lifetime = timedelta(minutes=settings.jwt_access_expire_minutes)

    return TokenPair(
        access_token=_encode(user_id, ACCESS, now + access_lifetime),
        refresh_token=_encode(user_id, REFRESH, now + timedelta(days=settings.jwt_refresh_expire_days)),
        expires_in=int(access_lifetime.total_seconds()),
    )


def decode_token(token: str, expected_type: str = ACCESS) -> TokenClaims:
    """
    Check a token's signature, expiry and type.

    Raises:
        InvalidTokenError: If the token is malformed, expired or of the other type
    """
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.warning(f"[AuthService] Rejected token: {e}")
        raise InvalidTokenError("Invalid or expired token")

    if claims.get("type") != expected_type:
        raise InvalidTokenError(f"Expected a {expected_type} token")

    return TokenClaims(
        sub=claims["sub"],
        exp=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        type=claims["type"],
    )


class AuthService:
    """Learner accounts backed by the users table."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = UserRepository(db)

    async def sign_up(self, request: SignUpRequest) -> SignedIn:
        """
        Create an account and sign it in.

        Raises:
            UserAlreadyExistsError: If the email is taken
        """
        logger.info(f"[AuthService] Sign-up: {request.email}")

        if await self.repository.email_exists(request.email):
            raise UserAlreadyExistsError(f"Email already registered: {request.email}")

        user = await self.repository.create(request.email, pwd_context.hash(request.password))
        return await self._signed_in(user)

    async def sign_in(self, request: SignInRequest) -> SignedIn:
        """
        Raises:
            AuthenticationError: If the email or password is wrong, or the account is disabled
        """
        logger.info(f"[AuthService] Sign-in: {request.email}")

        user = await self.repository.get_by_email(request.email)
        if user is None or not pwd_context.verify(request.password, user.hashed_password):
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")

        return await self._signed_in(user)

    async def refresh(self, refresh_token: str) -> TokenPair:
        """
        Raises:
            InvalidTokenError: If the refresh token is unusable
            UserNotFoundError: If the account is gone or disabled
        """
        claims = decode_token(refresh_token, expected_type=REFRESH)
        user = await self.get_active_user(claims.sub)
        return issue_tokens(user.id)

    async def get_active_user(self, user_id: str) -> User:
        """
        Raises:
            UserNotFoundError: If the account is gone or disabled
        """
        user = await self.repository.get_by_id(user_id)
        if user is None or not user.is_active:
            raise UserNotFoundError("User not found or inactive")
        return user

    async def _signed_in(self, user: User) -> SignedIn:
        await self.repository.record_sign_in(user)
        logger.info(f"[AuthService] Signed in: {user.id}")
        return SignedIn(user=AccountRead.model_validate(user), tokens=issue_tokens(user.id))


def get_auth_service(db: AsyncSession) -> AuthService:
    """Factory function for AuthService."""
    return AuthService(db)
