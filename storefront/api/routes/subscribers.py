"""Routes for collecting and removing email subscribers."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status

from storefront.errors import InternalError, StorefrontError
from storefront.models.subscriber import CollectEmailRequest, SubmissionContext
from storefront.services.subscribers import SubscriberDependency

logger = logging.getLogger(__name__)

router = APIRouter(tags=["subscribers"])


def _submission_context(request: Request) -> SubmissionContext:
    headers = request.headers
    params = request.query_params
    return SubmissionContext(
        user_agent=headers.get("user-agent"),
        ip_address=headers.get("x-forwarded-for") or headers.get("x-real-ip") or "unknown",
        utm_source=params.get("utm_source"),
        utm_medium=params.get("utm_medium"),
        utm_campaign=params.get("utm_campaign"),
    )


@router.post(
    "/collect-email",
    status_code=status.HTTP_200_OK,
    summary="Record a marketing email address once",
)
async def collect_email(
    payload: CollectEmailRequest,
    request: Request,
    service: SubscriberDependency,
) -> dict:
    """Store a new subscriber, or return the existing record for a known email."""

    logger.info(
        "Email collection request",
        extra={"source": payload.source, "has_phone": bool(payload.phone)},
    )
    try:
        result = await service.collect(payload, _submission_context(request))
    except StorefrontError:
        raise
    except Exception as exc:
        logger.exception("Error collecting email")
        raise InternalError("Failed to collect email") from exc

    message = (
        "Email collected successfully" if result.created else "Email already exists in list"
    )
    return {"success": True, "message": message, "id": result.subscriber_id}


@router.delete(
    "/email-subscribers/{subscriber_id}",
    status_code=status.HTTP_200_OK,
    summary="Unsubscribe an email address",
)
async def unsubscribe(subscriber_id: str, service: SubscriberDependency) -> dict:
    try:
        await service.unsubscribe(subscriber_id)
    except StorefrontError:
        raise
    except Exception as exc:
        logger.exception("Error removing subscriber %s", subscriber_id)
        raise InternalError("Failed to remove subscriber") from exc
    return {"success": True, "id": subscriber_id}
