"""
Cat Registry API — Cat Request/Response Schemas
================================================

What:  Pydantic models for the cats endpoints, plus coordinate parsing.
Why:   Input models run before any store call, so malformed cats never reach
       the database. Response models embed the owner as UserPublic, which
       keeps password and role out of every cat payload.
"""

import math
import uuid
from datetime import date
from typing import List, Literal, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from catapi.exceptions import ValidationError
from catapi.schemas.common import MessageResponse
from catapi.schemas.user import UserPublic


def parse_coordinates(value: str, field: str) -> Tuple[float, float]:
    """
    Parse a "lng,lat" query/form value into a (longitude, latitude) tuple.

    Raises:
        ValidationError naming `field` when the value is not two finite
        numbers inside the valid longitude/latitude ranges.
    """
    parts = [part.strip() for part in (value or "").split(",")]
    if len(parts) != 2:
        raise ValidationError(message=f"Expected 'lng,lat': {field}", field=field)
    try:
        lng, lat = float(parts[0]), float(parts[1])
    except ValueError:
        raise ValidationError(message=f"Coordinates must be numbers: {field}", field=field)
    _check_point(lng, lat, field)
    return lng, lat


def _check_point(lng: float, lat: float, field: str) -> None:
    if not (math.isfinite(lng) and math.isfinite(lat)):
        raise ValidationError(message=f"Coordinates must be finite: {field}", field=field)
    if not -180 <= lng <= 180:
        raise ValidationError(message=f"Longitude out of range: {field}", field=field)
    if not -90 <= lat <= 90:
        raise ValidationError(message=f"Latitude out of range: {field}", field=field)


class BoundingBox(BaseModel):
    """
    Axis-aligned rectangle in lng/lat space.

    Built from the bottomLeft / topRight corners; the corners are normalized
    with min/max so a swapped pair still describes the same rectangle.
    Containment is inclusive on every edge.
    """
    min_lng: float
    min_lat: float
    max_lng: float
    max_lat: float

    @classmethod
    def from_corners(cls, bottom_left: str, top_right: str) -> "BoundingBox":
        x1, y1 = parse_coordinates(bottom_left, "bottomLeft")
        x2, y2 = parse_coordinates(top_right, "topRight")
        return cls(
            min_lng=min(x1, x2),
            min_lat=min(y1, y2),
            max_lng=max(x1, x2),
            max_lat=max(y1, y2),
        )

    def contains(self, lng: float, lat: float) -> bool:
        return self.min_lng <= lng <= self.max_lng and self.min_lat <= lat <= self.max_lat


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CatCreate(BaseModel):
    """
    What:  Validated text fields of the multipart POST /api/cats form.
    Note:  The image and the coordinates are handled by the service; owner
           always comes from the caller, never from the form.
    """
    cat_name: str = Field(min_length=1, max_length=255)
    weight: float = Field(gt=0, allow_inf_nan=False)
    birthdate: date


class CatUpdate(BaseModel):
    """
    What:  Partial update applied by the owner (PUT /api/cats/{id}).
    Why no owner: ownership is immutable except through the admin update.
    """
    cat_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    weight: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    birthdate: Optional[date] = None
    location: Optional[List[float]] = Field(
        default=None,
        description="[longitude, latitude]",
    )

    model_config = ConfigDict(extra="ignore")

    @field_validator("location")
    @classmethod
    def validate_location(cls, v: Optional[List[float]]) -> Optional[List[float]]:
        if v is None:
            return v
        if len(v) != 2:
            raise ValueError("location must be [longitude, latitude]")
        if not -180 <= v[0] <= 180 or not -90 <= v[1] <= 90:
            raise ValueError("location is out of range")
        return v

    def to_store_values(self) -> dict:
        """Only the fields the client sent, with location split into columns."""
        values = self.model_dump(exclude_unset=True, exclude_none=True)
        location = values.pop("location", None)
        if location is not None:
            values["longitude"], values["latitude"] = location
        owner = values.pop("owner", None)
        if owner is not None:
            values["owner_id"] = owner
        return values


class CatAdminUpdate(CatUpdate):
    """Admin variant of the update: may also reassign the owner."""
    owner: Optional[uuid.UUID] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PointLocation(BaseModel):
    """GeoJSON-style point: coordinates are [longitude, latitude]."""
    type: Literal["Point"] = "Point"
    coordinates: List[float]


class CatResponse(BaseModel):
    """
    What:  Full representation of a cat with its owner's public fields.
    Who:   Returned by every cats endpoint, alone, in arrays or inside envelopes.
    """
    id: uuid.UUID = Field(
        validation_alias=AliasChoices("id", "_id"),
        serialization_alias="_id",
        description="Cat identifier",
    )
    cat_name: str
    weight: float
    owner: UserPublic
    filename: str
    birthdate: Optional[date] = None
    location: PointLocation

    model_config = ConfigDict(from_attributes=True)

    @field_validator("location", mode="before")
    @classmethod
    def wrap_point(cls, v):
        if isinstance(v, (list, tuple)):
            return {"type": "Point", "coordinates": list(v)}
        return v


class CatMessageResponse(MessageResponse):
    """Envelope for create / update / delete of a cat."""
    data: CatResponse
