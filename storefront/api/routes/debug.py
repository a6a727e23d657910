"""Debug routes for inspecting runtime configuration during development."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status

from storefront.config import settings
from storefront.errors import NotFoundError

router = APIRouter(prefix="/debug", tags=["debug"])
logger = logging.getLogger(__name__)


@router.get(
    "/env",
    status_code=status.HTTP_200_OK,
    summary="Echo non-secret configuration values",
)
async def read_environment() -> dict:
    """Return the public configuration view; hidden in production."""

    if settings.is_production:
        raise NotFoundError("Not available in production")

    logger.debug("Configuration requested via debug endpoint")
    return settings.public_view()
