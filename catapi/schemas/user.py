"""
Cat Registry API — User Request/Response Schemas
=================================================

What:  Pydantic models for the users and auth endpoints.
Why:   The response models are the redaction boundary: none of them declares
       `password` or `role`, so neither can reach a client even if an entity
       carrying them is serialized.
"""

import uuid
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from catapi.schemas.common import MessageResponse


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class UserCreate(BaseModel):
    """
    What:  Registration payload for POST /api/users.

    Unknown keys are ignored, which drops any client-supplied `role`;
    the service sets role='user' itself.
    """
    user_name: str = Field(min_length=2, max_length=255)
    email: str = Field(min_length=2, max_length=255)
    password: str = Field(min_length=4, max_length=128)

    model_config = ConfigDict(extra="ignore")


class UserUpdate(BaseModel):
    """
    What:  Partial self-update for PUT /api/users.
    Why no role: role is never client-settable after creation.
    """
    user_name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    email: Optional[str] = Field(default=None, min_length=2, max_length=255)
    password: Optional[str] = Field(default=None, min_length=4, max_length=128)

    model_config = ConfigDict(extra="ignore")


class LoginRequest(BaseModel):
    """Credentials for POST /api/auth/login; username is the account email."""
    username: str = Field(min_length=2, max_length=255)
    password: str = Field(min_length=4, max_length=128)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserPublic(BaseModel):
    """
    What:  The safe subset of a user: identifier, user_name, email.
    Who:   Returned by every users endpoint, embedded as a cat's owner,
           and by GET /api/users/token.
    """
    id: uuid.UUID = Field(
        validation_alias=AliasChoices("id", "_id"),
        serialization_alias="_id",
        description="User identifier",
    )
    user_name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class UserMessageResponse(MessageResponse):
    """Envelope for register / update / delete of the current user."""
    data: UserPublic


class LoginResponse(MessageResponse):
    """Bearer token plus the public profile of the authenticated user."""
    token: str = Field(description="JWT access token; send as 'Authorization: Bearer <token>'")
    user: UserPublic
