"""
DevCamper Backend — Uploaded Photo Serving
============================================

What:  GET /uploads/{filename} streams a stored bootcamp photo.
How:   FileService.path_for() confines the name to FILE_UPLOAD_PATH; anything
       else (traversal, nested paths, missing files) is a 404.
"""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from devcamper.exceptions import NotFoundError
from devcamper.schemas.common import ErrorResponse
from devcamper.services.file_service import file_service

router = APIRouter(tags=["Uploads"])


@router.get(
    "/uploads/{filename:path}",
    responses={
        200: {"description": "Image file"},
        404: {"description": "File not found", "model": ErrorResponse},
    },
    summary="Serve an uploaded bootcamp photo",
)
async def serve_upload(filename: str) -> FileResponse:
    path = file_service.path_for(filename)
    if not path.is_file():
        raise NotFoundError(resource="File", resource_id=filename)

    # Stored names are stable per bootcamp and extension, so caching stays short
    return FileResponse(path=str(path), headers={"Cache-Control": "public, max-age=300"})
