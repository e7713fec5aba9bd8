"""
Accounts router - learner sign-up, sign-in and token refresh.
Every other API route expects the access token issued here.
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.schemas import (
    AccountRead,
    AuthError,
    MessageResponse,
    RefreshRequest,
    SignedIn,
    SignInRequest,
    SignUpRequest,
    TokenPair,
)
from app.auth.service import get_auth_service
from app.core.exceptions import (
    AuthenticationError,
    InvalidTokenError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from app.database import get_db
from app.dependencies import CurrentUser
from app.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Accounts"])


@router.post(
    "/register",
    response_model=SignedIn,
    status_code=status.HTTP_201_CREATED,
    summary="Create a learner account",
    description="Sign up with email and password. The new account is signed in straight away.",
    responses={
        201: {"model": SignedIn, "description": "Account created"},
        409: {"model": AuthError, "description": "Email already registered"},
        429: {"description": "Too many attempts"},
    },
)
@limiter.limit("10/minute")
async def sign_up(
        request: Request,
        body: SignUpRequest,
        db: AsyncSession = Depends(get_db),
) -> SignedIn:
    logger.info(f"[AccountsRouter] Sign-up: {body.email}")

    try:
        return await get_auth_service(db).sign_up(body)
    except UserAlreadyExistsError as e:
        logger.warning(f"[AccountsRouter] Sign-up refused: {e.message}")
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": e.message, "code": "USER_EXISTS"},
        )


@router.post(
    "/login",
    response_model=SignedIn,
    status_code=status.HTTP_200_OK,
    summary="Sign in",
    responses={
        200: {"model": SignedIn, "description": "Signed in"},
        401: {"model": AuthError, "description": "Wrong email or password"},
        429: {"description": "Too many attempts"},
    },
)
@limiter.limit("10/minute")
async def sign_in(
        request: Request,
        body: SignInRequest,
        db: AsyncSession = Depends(get_db),
) -> SignedIn:
    logger.info(f"[AccountsRouter] Sign-in: {body.email}")

    try:
        return await get_auth_service(db).sign_in(body)
    except AuthenticationError as e:
        logger.warning(f"[AccountsRouter] Sign-in refused: {e.message}")
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"error": e.message, "code": "AUTH_FAILED"},
        )


@router.post(
    "/refresh",
    response_model=TokenPair,
    status_code=status.HTTP_200_OK,
    summary="Trade a refresh token for a new pair",
    responses={
        200: {"model": TokenPair, "description": "New tokens"},
        401: {"model": AuthError, "description": "Refresh token rejected"},
    },
)
async def refresh_tokens(
        body: RefreshRequest,
        db: AsyncSession = Depends(get_db),
) -> TokenPair:
    try:
        return await get_auth_service(db).refresh(body.refresh_token)
    except (InvalidTokenError, UserNotFoundError) as e:
        logger.warning(f"[AccountsRouter] Refresh refused: {e.message}")
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"error": e.message, "code": "INVALID_TOKEN"},
        )


@router.get(
    "/me",
    response_model=AccountRead,
    status_code=status.HTTP_200_OK,
    summary="The signed-in learner",
    responses={
        200: {"model": AccountRead, "description": "Account"},
        401: {"model": AuthError, "description": "Not authenticated"},
    },
)
async def get_account(current_user: CurrentUser) -> AccountRead:
    return AccountRead.model_validate(current_user)


@router.post(
    "/logout",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Sign out",
    description="Tokens are not stored server-side; the client drops them.",
    responses={
        200: {"model": MessageResponse, "description": "Signed out"},
    },
)
async def sign_out(current_user: CurrentUser) -> MessageResponse:
    logger.info(f"[AccountsRouter] Sign-out: {current_user.id}")
    return MessageResponse(message="Signed out")
