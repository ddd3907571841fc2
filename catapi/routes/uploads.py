"""
Cat Registry API — Uploaded Image Route
========================================

What:  Serves cat images stored by FileService.
Who:   Called by <img> tags that reference a cat's `filename`.
"""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from catapi.exceptions import NotFoundError
from catapi.services.file_service import file_service

router = APIRouter(prefix="/api", tags=["Uploads"])


@router.get(
    "/uploads/{file_path:path}",
    summary="Serve an uploaded cat image",
    responses={
        200: {"description": "Image file"},
        400: {"description": "Path escapes the storage root"},
        404: {"description": "File not found"},
    },
)
async def serve_file(file_path: str) -> FileResponse:
    """
    Security:
        FileService.resolve refuses any path resolving outside STORAGE_ROOT
        (e.g. ../../etc/passwd).
    """
    full_path = file_service.resolve(file_path)
    if not full_path.is_file():
        raise NotFoundError(resource="file", resource_id=file_path)

    return FileResponse(
        path=str(full_path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
