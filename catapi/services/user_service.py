"""
Cat Registry API — User Service (Resource Handlers)
====================================================

What:  Handlers for listing, fetching, registering, updating and deleting
       users, for token introspection and for login.
Why:   Same shape as CatService: authorize → validate → store → envelope,
       with errors propagating to the boundary reporter.

Invariants enforced here:
    - password is hashed before it reaches the store and never returned
    - role is forced to 'user' on registration and never updated
    - self-scoped operations always target caller.id, never an id from the body
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from catapi.authorization import CallerIdentity, Operation, authorize
from catapi.exceptions import AuthenticationError, NotFoundError, ValidationError
from catapi.schemas.user import (
    LoginRequest,
    LoginResponse,
    UserCreate,
    UserMessageResponse,
    UserPublic,
    UserUpdate,
)
from catapi.security import create_access_token, hash_password, verify_password
from catapi.services.file_service import file_service
from catapi.stores import REDACTED, CatStore, UserStore

logger = logging.getLogger(__name__)


class UserService:
    """Stateless handlers for user operations."""

    async def list_users(self, db: AsyncSession) -> List[UserPublic]:
        authorize(None, Operation.USER_LIST)
        users = await UserStore(db).find(exclude=REDACTED)
        return [UserPublic.model_validate(user) for user in users]

    async def get_user(self, db: AsyncSession, user_id: uuid.UUID) -> UserPublic:
        authorize(None, Operation.USER_GET)
        user = await UserStore(db).find_by_id(user_id, exclude=REDACTED)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return UserPublic.model_validate(user)

    async def register(self, db: AsyncSession, body: UserCreate) -> UserMessageResponse:
        """
        Create an account.

        Any role the client sent was already dropped by UserCreate; the
        role is set here, server-side, to 'user'.
        """
        authorize(None, Operation.USER_REGISTER)
        store = UserStore(db)
        if await store.find_by_email(body.email) is not None:
            raise ValidationError(message="Email already in use: email", field="email")

        user = await store.create(
            {
                "user_name": body.user_name,
                "email": body.email,
                "password": hash_password(body.password),
                "role": "user",
            }
        )
        logger.info("User %s registered", user.id)
        return UserMessageResponse(message="User added", data=UserPublic.model_validate(user))

    async def update_current(
        self,
        db: AsyncSession,
        caller: Optional[CallerIdentity],
        body: UserUpdate,
    ) -> UserMessageResponse:
        caller = authorize(
            caller,
            Operation.USER_UPDATE_SELF,
            resource_owner=caller.id if caller else None,
        )
        values = body.model_dump(exclude_unset=True, exclude_none=True)
        if not values:
            raise ValidationError(message="No fields to update: body", field="body")
        if "password" in values:
            values["password"] = hash_password(values["password"])

        store = UserStore(db)
        if "email" in values:
            existing = await store.find_by_email(values["email"])
            if existing is not None and existing.id != caller.id:
                raise ValidationError(message="Email already in use: email", field="email")

        user = await store.update({"id": caller.id}, values)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(caller.id))
        logger.info("User %s updated: %s", user.id, ", ".join(sorted(values)))
        return UserMessageResponse(message="User updated", data=UserPublic.model_validate(user))

    async def delete_current(
        self,
        db: AsyncSession,
        caller: Optional[CallerIdentity],
    ) -> UserMessageResponse:
        """Delete the caller's account; the cats it owns are deleted with it."""
        caller = authorize(
            caller,
            Operation.USER_DELETE_SELF,
            resource_owner=caller.id if caller else None,
        )
        images = [cat.filename for cat in await CatStore(db).find({"owner_id": caller.id})]
        user = await UserStore(db).delete({"id": caller.id})
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(caller.id))
        for image in images:
            await file_service.remove_stored(image)
        logger.info("User %s deleted", user.id)
        return UserMessageResponse(message="User deleted", data=UserPublic.model_validate(user))

    def check_token(self, caller: Optional[CallerIdentity]) -> UserPublic:
        """Identity fields straight from the verified token; no store access."""
        caller = authorize(caller, Operation.USER_CHECK_TOKEN)
        return UserPublic(id=caller.id, user_name=caller.user_name, email=caller.email)

    async def login(self, db: AsyncSession, body: LoginRequest) -> LoginResponse:
        """Exchange email + password for a bearer token."""
        user = await UserStore(db).find_by_email(body.username)
        if user is None or not verify_password(body.password, user.password):
            raise AuthenticationError(message="Invalid username or password")
        token = create_access_token(
            sub=str(user.id),
            user_name=user.user_name,
            email=user.email,
            role=user.role,
        )
        logger.info("User %s logged in", user.id)
        return LoginResponse(
            message="Login successful",
            token=token,
            user=UserPublic.model_validate(user),
        )


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
