"""
Cat Registry API — Authentication Routes and Caller Resolution
===============================================================

What:  POST /api/auth/login, and the `get_caller` dependency every
       authenticated route uses.
Why:   The caller identity is resolved once per request, from the bearer
       token only, and handed to the services as an explicit parameter.

Caller resolution:
    No Authorization header  → None (the gate answers "No user", 400)
    Malformed/expired token  → AuthenticationError (401)
    Valid token              → CallerIdentity built from the token claims
"""

import logging
import uuid
from typing import Annotated, Optional

import jwt
from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from catapi.authorization import CallerIdentity
from catapi.database import get_db_session
from catapi.exceptions import AuthenticationError
from catapi.schemas.common import ErrorResponse
from catapi.schemas.user import LoginRequest, LoginResponse
from catapi.security import decode_access_token
from catapi.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])
security = HTTPBearer(auto_error=False)


def get_caller(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Optional[CallerIdentity]:
    """Dependency: the request's caller, or None when no bearer token was sent."""
    if credentials is None:
        return None
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError as e:
        logger.info("Rejected bearer token: %s", type(e).__name__)
        raise AuthenticationError(message="Invalid or expired token")

    try:
        caller_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise AuthenticationError(message="Invalid token payload")

    return CallerIdentity(
        id=caller_id,
        user_name=payload.get("user_name", ""),
        email=payload.get("email", ""),
        role=payload.get("role", "user"),
    )


Caller = Annotated[Optional[CallerIdentity], Depends(get_caller)]


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"description": "Invalid username or password", "model": ErrorResponse},
    },
    summary="Exchange email and password for a bearer token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    """
    Authenticate with email (as `username`) and password.
    Include the returned token in the Authorization header as: Bearer <token>
    """
    return await user_service.login(db, body)
