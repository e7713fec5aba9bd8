"""
Request dependencies that resolve the bearer token into the calling learner.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.context import UserContext
from app.auth.models import User
from app.auth.service import decode_token, get_auth_service
from app.core.exceptions import InvalidTokenError, UserNotFoundError, unauthorized
from app.database import get_db

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
        credentials: Annotated[
            Optional[HTTPAuthorizationCredentials],
            Depends(security)
        ],
        db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the bearer access token into an active learner account.

    Raises:
        HTTPException: 401 when the token is missing or unusable, or the
            account is gone or disabled
    """
    if not credentials:
        raise unauthorized()

    try:
        claims = decode_token(credentials.credentials)
        return await get_auth_service(db).get_active_user(claims.sub)

    except (InvalidTokenError, UserNotFoundError) as e:
        raise unauthorized(detail=e.message)


async def get_user_context(
        current_user: Annotated[User, Depends(get_current_user)],
) -> UserContext:
    """Detach the authenticated user into a context passed to domain objects."""
    return UserContext.from_user(current_user)


# Type aliases for cleaner dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentUserContext = Annotated[UserContext, Depends(get_user_context)]
