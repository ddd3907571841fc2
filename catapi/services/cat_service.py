"""
Cat Registry API — Cat Service (Resource Handlers)
===================================================

What:  One method per cat operation: list, list by owner, list in box, get,
       create, owner/admin update, owner/admin delete.
Why:   Keeps every decision (validation, authorization, filter shape, response
       envelope) out of the HTTP layer and testable with a plain session.
How:   Every method follows the same steps:
         1. authorize(caller, operation)      → AuthorizationError (400) on DENY
         2. validate input                    → ValidationError (400), before any store call
         3. build a filter that embeds ownership ({"id": x, "owner_id": caller.id})
         4. call the CatStore
         5. None / nothing matched            → NotFoundError (404)
         6. wrap the result in {message, data}
       Errors are never handled here; they propagate to the boundary reporter.

Ownership Design:
    Owner-scoped updates and deletes do not fetch the cat and then compare its
    owner. The owner is part of the store filter, so a cat that belongs to
    someone else and a cat that does not exist are the same outcome: 404.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from catapi.authorization import CallerIdentity, Operation, authorize
from catapi.config import settings
from catapi.exceptions import AuthorizationError, NotFoundError, ValidationError
from catapi.schemas.cat import (
    BoundingBox,
    CatAdminUpdate,
    CatCreate,
    CatMessageResponse,
    CatResponse,
    CatUpdate,
    parse_coordinates,
)
from catapi.services.file_service import file_service
from catapi.stores import REDACTED, CatStore, UserStore

logger = logging.getLogger(__name__)


class CatService:
    """
    Stateless handlers for cat operations.

    Each method receives the request's session and, where relevant, the
    caller identity. Nothing is read from shared request state.
    """

    # ── Public reads ──────────────────────────────────────────────────────

    async def list_cats(self, db: AsyncSession) -> List[CatResponse]:
        """All cats, owners reduced to their public fields."""
        authorize(None, Operation.CAT_LIST)
        cats = await CatStore(db).find()
        return [CatResponse.model_validate(cat) for cat in cats]

    async def get_cat(self, db: AsyncSession, cat_id: uuid.UUID) -> CatResponse:
        authorize(None, Operation.CAT_GET)
        cat = await CatStore(db).find_by_id(cat_id)
        if cat is None:
            raise NotFoundError(resource="cat", resource_id=str(cat_id))
        return CatResponse.model_validate(cat)

    async def list_cats_in_box(
        self,
        db: AsyncSession,
        bottom_left: str,
        top_right: str,
    ) -> List[CatResponse]:
        """
        Cats whose location lies inside the rectangle spanned by the corners.

        Args:
            bottom_left: "lng,lat" of one corner
            top_right:   "lng,lat" of the opposite corner

        Raises:
            ValidationError when either corner is malformed.
        """
        authorize(None, Operation.CAT_LIST_IN_BOX)
        box = BoundingBox.from_corners(bottom_left, top_right)
        cats = await CatStore(db).find({"location": box})
        logger.debug("Bounding box %s matched %d cats", box, len(cats))
        return [CatResponse.model_validate(cat) for cat in cats]

    # ── Caller-scoped reads ───────────────────────────────────────────────

    async def list_own_cats(
        self,
        db: AsyncSession,
        caller: Optional[CallerIdentity],
    ) -> List[CatResponse]:
        caller = authorize(caller, Operation.CAT_LIST_OWN)
        cats = await CatStore(db).find({"owner_id": caller.id})
        return [CatResponse.model_validate(cat) for cat in cats]

    # ── Create ────────────────────────────────────────────────────────────

    async def create_cat(
        self,
        db: AsyncSession,
        caller: Optional[CallerIdentity],
        form: Dict[str, Any],
        upload_name: Optional[str],
        content: Optional[bytes],
        content_length: Optional[int] = None,
    ) -> CatMessageResponse:
        """
        Validate the form, store the image, insert the cat owned by the caller.

        Args:
            form:          Raw text fields: cat_name, weight, birthdate, lng, lat
            upload_name:   Original filename of the uploaded image (None if absent)
            content:       Image bytes (None if absent)

        Error Recovery:
            Validation fails → nothing written
            Insert fails     → stored image is removed, error propagates
        """
        caller = authorize(caller, Operation.CAT_CREATE)

        data = self._validate_create(form, upload_name, content)
        longitude, latitude = self._resolve_location(form.get("lng"), form.get("lat"))

        owner = await UserStore(db).find_by_id(caller.id, exclude=REDACTED)
        if owner is None:
            raise AuthorizationError(message="No user", context={"caller": str(caller.id)})

        absolute_path, relative_path = await file_service.validate_and_store(
            filename=upload_name,
            content=content,
            content_length=content_length,
        )

        try:
            cat = await CatStore(db).create(
                {
                    "cat_name": data.cat_name,
                    "weight": data.weight,
                    "birthdate": data.birthdate,
                    "owner_id": caller.id,
                    "filename": relative_path,
                    "longitude": longitude,
                    "latitude": latitude,
                }
            )
        except Exception:
            await file_service.cleanup_file(absolute_path)
            raise

        logger.info("Cat %s added by %s", cat.id, caller.id)
        return CatMessageResponse(message="Cat added", data=CatResponse.model_validate(cat))

    def _validate_create(
        self,
        form: Dict[str, Any],
        upload_name: Optional[str],
        content: Optional[bytes],
    ) -> CatCreate:
        """Collect every field problem and report them together."""
        errors: List[Dict[str, Any]] = []
        data = None
        fields = {key: form.get(key) for key in ("cat_name", "weight", "birthdate")}
        try:
            data = CatCreate.model_validate(
                {key: value for key, value in fields.items() if value not in (None, "")}
            )
        except PydanticValidationError as e:
            errors.extend(e.errors())
        if not upload_name or content is None:
            errors.append({"loc": ("cat",), "msg": "Image file required"})
        if errors:
            raise ValidationError.from_field_errors(errors)
        file_service.validate_extension(upload_name)
        file_service.validate_size(None, len(content))
        return data

    def _resolve_location(self, lng: Optional[str], lat: Optional[str]) -> Tuple[float, float]:
        """Form coordinates when both are given, the configured default when neither is."""
        if lng in (None, "") and lat in (None, ""):
            return settings.default_longitude, settings.default_latitude
        if lng in (None, "") or lat in (None, ""):
            raise ValidationError(message="Both lng and lat are required: location", field="location")
        return parse_coordinates(f"{lng},{lat}", "location")

    # ── Update ────────────────────────────────────────────────────────────

    async def update_cat(
        self,
        db: AsyncSession,
        caller: Optional[CallerIdentity],
        cat_id: uuid.UUID,
        changes: CatAdminUpdate,
    ) -> CatMessageResponse:
        """PUT /api/cats/{id}: admins get the admin update, everyone else the owner update."""
        if caller is not None and caller.is_admin:
            return await self.update_cat_as_admin(db, caller, cat_id, changes)
        owner_changes = CatUpdate.model_validate(changes.model_dump(exclude_unset=True))
        return await self.update_cat_as_owner(db, caller, cat_id, owner_changes)

    async def update_cat_as_owner(
        self,
        db: AsyncSession,
        caller: Optional[CallerIdentity],
        cat_id: uuid.UUID,
        changes: CatUpdate,
    ) -> CatMessageResponse:
        caller = authorize(caller, Operation.CAT_UPDATE_OWN)
        values = changes.to_store_values()
        values.pop("owner_id", None)
        if not values:
            raise ValidationError(message="No fields to update: body", field="body")
        cat = await CatStore(db).update({"id": cat_id, "owner_id": caller.id}, values)
        if cat is None:
            raise NotFoundError(resource="cat", resource_id=str(cat_id))
        return CatMessageResponse(message="Cat modified by owner", data=CatResponse.model_validate(cat))

    async def update_cat_as_admin(
        self,
        db: AsyncSession,
        caller: Optional[CallerIdentity],
        cat_id: uuid.UUID,
        changes: CatAdminUpdate,
    ) -> CatMessageResponse:
        """Admin-only: may change any field of any cat, including its owner."""
        authorize(caller, Operation.CAT_UPDATE_ANY)
        values = changes.to_store_values()
        if not values:
            raise ValidationError(message="No fields to update: body", field="body")
        if "owner_id" in values:
            new_owner = await UserStore(db).find_by_id(values["owner_id"], exclude=REDACTED)
            if new_owner is None:
                raise ValidationError(message="Owner does not exist: owner", field="owner")
        cat = await CatStore(db).update({"id": cat_id}, values)
        if cat is None:
            raise NotFoundError(resource="cat", resource_id=str(cat_id))
        return CatMessageResponse(message="Cat modified by admin", data=CatResponse.model_validate(cat))

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete_cat(
        self,
        db: AsyncSession,
        caller: Optional[CallerIdentity],
        cat_id: uuid.UUID,
    ) -> CatMessageResponse:
        """DELETE /api/cats/{id}: admins get the admin delete, everyone else the owner delete."""
        if caller is not None and caller.is_admin:
            return await self.delete_cat_as_admin(db, caller, cat_id)
        return await self.delete_cat_as_owner(db, caller, cat_id)

    async def delete_cat_as_owner(
        self,
        db: AsyncSession,
        caller: Optional[CallerIdentity],
        cat_id: uuid.UUID,
    ) -> CatMessageResponse:
        caller = authorize(caller, Operation.CAT_DELETE_OWN)
        cat = await CatStore(db).delete({"id": cat_id, "owner_id": caller.id})
        if cat is None:
            raise NotFoundError(resource="cat", resource_id=str(cat_id))
        await file_service.remove_stored(cat.filename)
        return CatMessageResponse(message="cat deleted by owner", data=CatResponse.model_validate(cat))

    async def delete_cat_as_admin(
        self,
        db: AsyncSession,
        caller: Optional[CallerIdentity],
        cat_id: uuid.UUID,
    ) -> CatMessageResponse:
        authorize(caller, Operation.CAT_DELETE_ANY)
        cat = await CatStore(db).delete({"id": cat_id})
        if cat is None:
            raise NotFoundError(resource="cat", resource_id=str(cat_id))
        await file_service.remove_stored(cat.filename)
        return CatMessageResponse(message="cat deleted by admin", data=CatResponse.model_validate(cat))


# ── Singleton Instance ────────────────────────────────────────────────────
cat_service = CatService()
