"""
Cat Registry API — Cat Store
=============================

What:  EntityStore for cats.
Adds:  - the "location" filter key, taking a BoundingBox (inclusive range on
         longitude and latitude)
       - owner eager-loading restricted to id, user_name and email; the
         owner's password and role columns are raiseload-deferred.
"""

from typing import Any, List

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from catapi.exceptions import ValidationError
from catapi.models import Cat, User
from catapi.schemas.cat import BoundingBox
from catapi.stores.base import EntityStore


class CatStore(EntityStore[Cat]):
    model = Cat
    resource = "cat"

    def _clause(self, key: str, value: Any):
        if key == "location":
            if not isinstance(value, BoundingBox):
                raise ValueError("The 'location' filter takes a BoundingBox")
            return and_(
                Cat.longitude.between(value.min_lng, value.max_lng),
                Cat.latitude.between(value.min_lat, value.max_lat),
            )
        return super()._clause(key, value)

    def _load_options(self) -> List[Any]:
        return [
            selectinload(Cat.owner).load_only(
                User.id, User.user_name, User.email, raiseload=True
            )
        ]

    def _integrity_error(self, exc: IntegrityError) -> ValidationError:
        return ValidationError(
            message="Owner does not exist: owner",
            field="owner",
            context={"original_error": type(exc.orig).__name__ if exc.orig else "IntegrityError"},
        )
