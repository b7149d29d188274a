"""API route definitions."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request, UploadFile, status
from fastapi.responses import Response

from shotthumb.api.dependencies import get_settings, get_thumbnail_pool, verify_api_key
from shotthumb.api.schemas import ErrorResponse, HealthResponse, ThumbnailResponse
from shotthumb.errors import DecodeError, EncodeError, ImageTooLarge, InvalidDimensions
from shotthumb.imaging.geometry import validate_dimensions
from shotthumb.imaging.resampler import BlobThumbnail, OutputFormat

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", dependencies=[Depends(verify_api_key)])


def _check_limits(request: Request, data: bytes, width: int, height: int) -> None:
    settings = get_settings(request)
    if len(data) > settings.max_file_size:
        raise HTTPException(
            status_code=HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
            detail=f"Image file exceeds {settings.max_file_size} bytes",
        )
    if width * height > settings.max_image_pixels:
        raise HTTPException(
            status_code=HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
            detail=f"Image exceeds {settings.max_image_pixels} pixels",
        )


@router.post(
    "/thumbnails",
    response_model=ThumbnailResponse,
    responses={
        status.HTTP_200_OK: {"content": {"image/png": {}}},
        status.HTTP_204_NO_CONTENT: {"description": "No thumbnail needed (blob format)"},
        HTTPStatus.REQUEST_ENTITY_TOO_LARGE: {"model": ErrorResponse},
        HTTPStatus.UNPROCESSABLE_ENTITY: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
    },
    summary="Create a thumbnail for an image",
)
async def create_thumbnail_endpoint(
    request: Request,
    file: UploadFile,
    width: Annotated[int, Form(description="Source image width in pixels")],
    height: Annotated[int, Form(description="Source image height in pixels")],
    output_format: Annotated[str, Query(alias="format")] = OutputFormat.DATA_URL,
) -> Response | ThumbnailResponse:
    """Scale and crop an uploaded image into the 210x280 thumbnail box.

    ``format=blob`` returns the PNG itself (204 when no thumbnail is needed);
    any other value returns a JSON body with a data URL.
    """
    fmt = OutputFormat.parse(output_format)
    try:
        validate_dimensions(width, height)
    except InvalidDimensions as exc:
        raise HTTPException(status_code=HTTPStatus.UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    data = await file.read(get_settings(request).max_file_size + 1)
    _check_limits(request, data, width, height)

    try:
        thumbnail = await get_thumbnail_pool(request).create_thumbnail(data, width, height, fmt)
    except ImageTooLarge as exc:
        logger.warning("Rejected oversized upload %r: %s", file.filename, exc)
        raise HTTPException(status_code=HTTPStatus.REQUEST_ENTITY_TOO_LARGE, detail=str(exc)) from exc
    except DecodeError as exc:
        logger.warning("Rejected undecodable upload %r: %s", file.filename, exc)
        raise HTTPException(status_code=HTTPStatus.UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except EncodeError as exc:
        logger.error("Thumbnail encoding failed for %r: %s", file.filename, exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    except TimeoutError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Server busy, try again later",
        ) from exc

    if thumbnail is None:
        if fmt is OutputFormat.BLOB:
            return Response(status_code=status.HTTP_204_NO_CONTENT)
        return ThumbnailResponse(skipped=True)

    if isinstance(thumbnail, BlobThumbnail):
        return Response(
            content=thumbnail.data,
            media_type=thumbnail.content_type,
            headers={
                "X-Thumbnail-Width": str(thumbnail.width),
                "X-Thumbnail-Height": str(thumbnail.height),
            },
        )

    return ThumbnailResponse(
        skipped=False,
        data_url=thumbnail.data_url,
        width=thumbnail.width,
        height=thumbnail.height,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
async def health(request: Request) -> HealthResponse:
    """Return service health status."""
    pool = get_thumbnail_pool(request)
    return HealthResponse(
        status="ok",
        concurrent_requests=pool.active_count,
        queue_depth=pool.queue_depth,
    )
