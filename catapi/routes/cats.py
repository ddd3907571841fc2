"""
Cat Registry API — Cat Route Handlers
======================================

What:  HTTP surface for cats: list (optionally by bounding box), list own,
       get, create (multipart), update, delete.
How:   Each route extracts path/query/form data and the caller, then delegates
       to CatService. No authorization or persistence logic lives here.

Route order matters: /user is declared before /{cat_id} so it is not parsed
as an id.
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from catapi.database import get_db_session
from catapi.exceptions import ValidationError
from catapi.routes.auth import Caller
from catapi.schemas.cat import CatAdminUpdate, CatMessageResponse, CatResponse
from catapi.schemas.common import ErrorResponse
from catapi.services.cat_service import cat_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cats", tags=["Cats"])

_ERRORS = {
    400: {"description": "Invalid input or not allowed", "model": ErrorResponse},
    404: {"description": "Cat not found", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=List[CatResponse],
    responses={400: _ERRORS[400]},
    summary="List all cats, or the cats inside a bounding box",
)
async def list_cats(
    top_right: Optional[str] = Query(
        default=None,
        alias="topRight",
        description="Top-right corner as 'lng,lat'",
    ),
    bottom_left: Optional[str] = Query(
        default=None,
        alias="bottomLeft",
        description="Bottom-left corner as 'lng,lat'",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[CatResponse]:
    """
    Without query parameters: every cat.
    With topRight and bottomLeft: cats whose location lies in the rectangle (edges included).
    """
    if top_right is None and bottom_left is None:
        return await cat_service.list_cats(db)
    if top_right is None or bottom_left is None:
        missing = "topRight" if top_right is None else "bottomLeft"
        raise ValidationError(message=f"Field required: {missing}", field=missing)
    return await cat_service.list_cats_in_box(db, bottom_left=bottom_left, top_right=top_right)


@router.get(
    "/user",
    response_model=List[CatResponse],
    responses={400: _ERRORS[400]},
    summary="List the caller's cats",
)
async def list_own_cats(
    caller: Caller,
    db: AsyncSession = Depends(get_db_session),
) -> List[CatResponse]:
    return await cat_service.list_own_cats(db, caller)


@router.get(
    "/{cat_id}",
    response_model=CatResponse,
    responses=_ERRORS,
    summary="Get a single cat by id",
)
async def get_cat(
    cat_id: uuid.UUID,
    db: AsyncSession = Depends(get_db_session),
) -> CatResponse:
    return await cat_service.get_cat(db, cat_id)


@router.post(
    "",
    response_model=CatMessageResponse,
    responses={400: _ERRORS[400]},
    summary="Add a cat owned by the caller",
)
async def create_cat(
    caller: Caller,
    cat_name: Optional[str] = Form(default=None),
    weight: Optional[str] = Form(default=None),
    birthdate: Optional[str] = Form(default=None, description="ISO date, e.g. 2020-05-17"),
    lng: Optional[str] = Form(default=None, description="Longitude; defaults to the configured location"),
    lat: Optional[str] = Form(default=None, description="Latitude; defaults to the configured location"),
    cat: Optional[UploadFile] = File(default=None, description="Cat image (png/jpg)"),
    db: AsyncSession = Depends(get_db_session),
) -> CatMessageResponse:
    """
    Multipart form. Text fields are validated together; a missing image is
    reported in the same aggregated message.
    """
    content = await cat.read() if cat is not None else None
    return await cat_service.create_cat(
        db,
        caller,
        form={
            "cat_name": cat_name,
            "weight": weight,
            "birthdate": birthdate,
            "lng": lng,
            "lat": lat,
        },
        upload_name=cat.filename if cat is not None else None,
        content=content,
        content_length=cat.size if cat is not None else None,
    )


@router.put(
    "/{cat_id}",
    response_model=CatMessageResponse,
    responses=_ERRORS,
    summary="Update a cat (owner, or any cat for admins)",
)
async def update_cat(
    cat_id: uuid.UUID,
    body: CatAdminUpdate,
    caller: Caller,
    db: AsyncSession = Depends(get_db_session),
) -> CatMessageResponse:
    """
    Owners may change name, weight, birthdate and location of their own cats.
    Admins may change any cat, including its owner.
    """
    return await cat_service.update_cat(db, caller, cat_id, body)


@router.delete(
    "/{cat_id}",
    response_model=CatMessageResponse,
    responses=_ERRORS,
    summary="Delete a cat (owner, or any cat for admins)",
)
async def delete_cat(
    cat_id: uuid.UUID,
    caller: Caller,
    db: AsyncSession = Depends(get_db_session),
) -> CatMessageResponse:
    return await cat_service.delete_cat(db, caller, cat_id)
