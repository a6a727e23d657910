"""System-level routes such as health checks."""

from __future__ import annotations

import logging
from typing import Annotated

import redis.asyncio as redis
from fastapi import APIRouter, Depends

from storefront.config import settings
from storefront.services.storage.document_store import get_redis_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


@router.get("/")
async def read_root() -> dict[str, str]:
    """Hello World endpoint used by smoke tests."""

    return {"message": "Hello World"}


@router.get("/health")
async def health_check(
    client: Annotated[redis.Redis, Depends(get_redis_client)],
) -> dict[str, str]:
    """Health check endpoint with document store connectivity check."""

    try:
        store_status = "connected" if await client.ping() else "disconnected"
    except Exception as exc:
        logger.warning("Document store ping failed: %s", exc)
        store_status = "disconnected"

    return {
        "status": "healthy",
        "store": store_status,
        "environment": settings.ENVIRONMENT,
    }
