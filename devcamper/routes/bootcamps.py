"""
DevCamper Backend — Bootcamp Route Handlers
=============================================

What:  HTTP surface of the bootcamp resource under /api/v1/bootcamps.
How:   Extracts path/query/body/file input, resolves the caller through the
       auth dependencies, delegates to BootcampService and returns its
       envelope. No handler catches domain exceptions; main.py renders them.

Route Inventory:
    GET    /api/v1/bootcamps                             public, filter/sort/page
    POST   /api/v1/bootcamps                             publisher | admin
    GET    /api/v1/bootcamps/radius/{zipcode}/{distance} public
    GET    /api/v1/bootcamps/{id}                        public
    PUT    /api/v1/bootcamps/{id}                        publisher | admin, owner or admin
    DELETE /api/v1/bootcamps/{id}                        publisher | admin, owner or admin
    PUT    /api/v1/bootcamps/{id}/photo                  publisher | admin, owner or admin
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Path, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.auth.deps import authorize
from devcamper.config import settings
from devcamper.database import get_db_session
from devcamper.models.user import ADMIN_ROLE, PUBLISHER_ROLE, User
from devcamper.schemas.bootcamp import (
    BootcampCreate,
    BootcampEnvelope,
    BootcampListEnvelope,
    BootcampRadiusEnvelope,
    BootcampUpdate,
    EmptyEnvelope,
    PhotoEnvelope,
)
from devcamper.schemas.common import ErrorResponse
from devcamper.services.bootcamp_service import bootcamp_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/bootcamps", tags=["Bootcamps"])

publisher_or_admin = authorize(PUBLISHER_ROLE, ADMIN_ROLE)

_AUTH_ERRORS = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Role not allowed, or not the owner", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=BootcampListEnvelope,
    responses={400: {"description": "Malformed query", "model": ErrorResponse}},
    summary="List bootcamps",
    description=(
        "Filter with `field=value` or `field[gt|gte|lt|lte|in]=value`, trim fields "
        "with `select`, order with `sort` (prefix `-` for descending) and page with "
        "`page`/`limit`."
    ),
)
async def list_bootcamps(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> BootcampListEnvelope:
    # Filter keys are dynamic (`average_cost[lte]`), so the raw query string is passed on
    return await bootcamp_service.list_bootcamps(db, dict(request.query_params))


@router.get(
    "/radius/{zipcode}/{distance}",
    response_model=BootcampRadiusEnvelope,
    responses={
        404: {"description": "Zipcode could not be geocoded", "model": ErrorResponse},
        503: {"description": "Geocoding provider unavailable", "model": ErrorResponse},
    },
    summary="Bootcamps within a distance of a zipcode",
)
async def bootcamps_in_radius(
    zipcode: str,
    distance: float = Path(..., gt=0, description="Radius in kilometres"),
    db: AsyncSession = Depends(get_db_session),
) -> BootcampRadiusEnvelope:
    return await bootcamp_service.bootcamps_in_radius(db, zipcode, distance)


@router.get(
    "/{bootcamp_id}",
    response_model=BootcampEnvelope,
    responses={404: {"description": "Bootcamp not found", "model": ErrorResponse}},
    summary="Get a single bootcamp",
)
async def get_bootcamp(
    bootcamp_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> BootcampEnvelope:
    return await bootcamp_service.get_bootcamp(db, bootcamp_id)


@router.post(
    "",
    status_code=201,
    response_model=BootcampEnvelope,
    responses={
        400: {"description": "Invalid body, duplicate name or second bootcamp", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Create a bootcamp owned by the caller",
)
async def create_bootcamp(
    payload: BootcampCreate,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
) -> BootcampEnvelope:
    return await bootcamp_service.create_bootcamp(db, payload, user)


@router.put(
    "/{bootcamp_id}",
    response_model=BootcampEnvelope,
    responses={
        400: {"description": "Invalid body", "model": ErrorResponse},
        404: {"description": "Bootcamp not found", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Update a bootcamp",
)
async def update_bootcamp(
    bootcamp_id: str,
    payload: BootcampUpdate,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
) -> BootcampEnvelope:
    return await bootcamp_service.update_bootcamp(db, bootcamp_id, payload, user)


@router.delete(
    "/{bootcamp_id}",
    response_model=EmptyEnvelope,
    responses={404: {"description": "Bootcamp not found", "model": ErrorResponse}, **_AUTH_ERRORS},
    summary="Delete a bootcamp",
)
async def delete_bootcamp(
    bootcamp_id: str,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
) -> EmptyEnvelope:
    return await bootcamp_service.delete_bootcamp(db, bootcamp_id, user)


@router.put(
    "/{bootcamp_id}/photo",
    response_model=PhotoEnvelope,
    responses={
        400: {"description": "No file, or not an image", "model": ErrorResponse},
        404: {"description": "Bootcamp not found", "model": ErrorResponse},
        413: {"description": "Image over MAX_FILE_UPLOAD bytes", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Upload a bootcamp photo",
)
async def upload_photo(
    bootcamp_id: str,
    file: Optional[UploadFile] = File(None, description="Image file, multipart field `file`"),
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
) -> PhotoEnvelope:
    """
    The body is read up to one byte past the limit: enough to tell an
    oversize upload apart without buffering all of it.
    """
    if file is None:
        return await bootcamp_service.upload_photo(db, bootcamp_id, user, None, None, None)

    try:
        content = await file.read(settings.max_file_upload + 1)
        logger.info(
            "Received photo for bootcamp %s: filename=%s type=%s",
            bootcamp_id,
            file.filename or "unknown",
            file.content_type,
        )
        return await bootcamp_service.upload_photo(
            db,
            bootcamp_id,
            user,
            filename=file.filename,
            content_type=file.content_type,
            content=content,
        )
    finally:
        await file.close()
