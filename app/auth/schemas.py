"""
Pydantic schemas for learner accounts.
Sign-up and sign-in bodies, the account view and the bearer token pair.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field


# ═══════════════════════════════════════════════════════════════════════════
# REQUEST SCHEMAS
# ═══════════════════════════════════════════════════════════════════════════


class SignUpRequest(BaseModel):
    """New learner account. bcrypt only reads the first 72 bytes of a password."""
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)


class SignInRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


# ═══════════════════════════════════════════════════════════════════════════
# RESPONSE SCHEMAS
# ═══════════════════════════════════════════════════════════════════════════


class AccountRead(BaseModel):
    """A learner account as returned to its owner."""
    id: str
    email: EmailStr
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class SignedIn(BaseModel):
    """Returned by sign-up and sign-in."""
    user: AccountRead
    tokens: TokenPair


class TokenClaims(BaseModel):
    sub: str
    exp: datetime
    type: Literal["access", "refresh"]


class MessageResponse(BaseModel):
    message: str


class AuthError(BaseModel):
    error: str
    code: str
