"""
Cat Registry API — User Route Handlers
=======================================

What:  Public user reads and registration, plus self-service update/delete
       and token introspection for the authenticated caller.
Note:  Every response model here is UserPublic-based, so password and role
       cannot be serialized. /token is declared before /{user_id}.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from catapi.database import get_db_session
from catapi.routes.auth import Caller
from catapi.schemas.common import ErrorResponse
from catapi.schemas.user import UserCreate, UserMessageResponse, UserPublic, UserUpdate
from catapi.services.user_service import user_service

router = APIRouter(prefix="/api/users", tags=["Users"])

_ERRORS = {
    400: {"description": "Invalid input or not allowed", "model": ErrorResponse},
    404: {"description": "User not found", "model": ErrorResponse},
}


@router.get("", response_model=List[UserPublic], summary="List users (public fields only)")
async def list_users(db: AsyncSession = Depends(get_db_session)) -> List[UserPublic]:
    return await user_service.list_users(db)


@router.get(
    "/token",
    response_model=UserPublic,
    responses={400: _ERRORS[400]},
    summary="Identity carried by the caller's token",
)
async def check_token(caller: Caller) -> UserPublic:
    """No database access: the answer comes from the verified token."""
    return user_service.check_token(caller)


@router.get(
    "/{user_id}",
    response_model=UserPublic,
    responses=_ERRORS,
    summary="Get a user (public fields only)",
)
async def get_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db_session),
) -> UserPublic:
    return await user_service.get_user(db, user_id)


@router.post(
    "",
    response_model=UserMessageResponse,
    responses={400: _ERRORS[400]},
    summary="Register a new user",
)
async def register(
    body: UserCreate,
    db: AsyncSession = Depends(get_db_session),
) -> UserMessageResponse:
    """A `role` in the body is ignored; new accounts are always 'user'."""
    return await user_service.register(db, body)


@router.put(
    "",
    response_model=UserMessageResponse,
    responses=_ERRORS,
    summary="Update the current user",
)
async def update_current(
    body: UserUpdate,
    caller: Caller,
    db: AsyncSession = Depends(get_db_session),
) -> UserMessageResponse:
    return await user_service.update_current(db, caller, body)


@router.delete(
    "",
    response_model=UserMessageResponse,
    responses=_ERRORS,
    summary="Delete the current user and their cats",
)
async def delete_current(
    caller: Caller,
    db: AsyncSession = Depends(get_db_session),
) -> UserMessageResponse:
    return await user_service.delete_current(db, caller)
