"""
Cat Registry API — User Store
==============================

What:  EntityStore for users.
Adds:  - REDACTED projection constant used by every public read
       - unique-email violations reported as a validation error
       - deleting a user first deletes the cats it owns (same transaction)
"""

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError

from catapi.exceptions import ValidationError
from catapi.models import Cat, User
from catapi.stores.base import EntityStore

# Columns that never leave the server
REDACTED = ("password", "role")


class UserStore(EntityStore[User]):
    model = User
    resource = "user"

    async def find_by_email(self, email: str):
        return await self.find_one({"email": email})

    async def _before_delete(self, entity: User) -> None:
        # Explicit so SQLite (no FK enforcement by default) behaves like PostgreSQL
        await self._execute(delete(Cat).where(Cat.owner_id == entity.id))

    def _integrity_error(self, exc: IntegrityError) -> ValidationError:
        return ValidationError(
            message="Email already in use: email",
            field="email",
            context={"original_error": type(exc.orig).__name__ if exc.orig else "IntegrityError"},
        )
