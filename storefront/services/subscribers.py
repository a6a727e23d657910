"""Email subscriber intake and unsubscribe."""

from __future__ import annotations

import logging
import re
from typing import Annotated

from fastapi import Depends

from storefront.config import settings
from storefront.errors import NotFoundError, ValidationError
from storefront.models.subscriber import (
    CollectEmailRequest,
    EmailSubscriber,
    MarketingEmail,
    SubmissionContext,
    SubscriptionResult,
)
from storefront.services.storage.document_store import DocumentStore, StoreDependency

logger = logging.getLogger(__name__)

SUBSCRIBERS_COLLECTION = "emailSubscribers"
MARKETING_COLLECTION = "marketingEmails"

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_DIGITS = re.compile(r"^\d{7,15}$")

CAMPAIGNS = {
    "promo_modal": "promo_modal_10_percent_off",
    "user_registration": "user_registration",
    "google_signin": "google_signin",
}
DEFAULT_CAMPAIGN = "general_signup"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_email(email: str) -> str:
    normalized = normalize_email(email or "")
    if not EMAIL_PATTERN.match(normalized):
        raise ValidationError("Invalid email address")
    return normalized


def validate_phone(phone: str | None) -> str | None:
    if phone is None or not phone.strip():
        return None
    if not PHONE_DIGITS.match(re.sub(r"\D", "", phone)):
        raise ValidationError("Invalid phone number")
    return phone.strip()


def campaign_for(source: str) -> str:
    return CAMPAIGNS.get(source, DEFAULT_CAMPAIGN)


class SubscriberService:
    """Records each email address once, with consent and attribution."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def find_by_email(self, email: str) -> tuple[str, dict] | None:
        matches = await self.store.where(
            SUBSCRIBERS_COLLECTION, "email", "==", normalize_email(email)
        )
        return matches[0] if matches else None

    async def collect(
        self,
        request: CollectEmailRequest,
        context: SubmissionContext | None = None,
    ) -> SubscriptionResult:
        email = validate_email(request.email)
        phone = validate_phone(request.phone)
        source = request.source or settings.DEFAULT_EMAIL_SOURCE
        context = context or SubmissionContext()

        existing = await self.find_by_email(email)
        if existing is not None:
            subscriber_id, data = existing
            if data.get("source") != source:
                # The merged source list is logged only; the stored record is unchanged.
                additional = [*data.get("additionalSources", []), source]
                logger.info(
                    "Email %s already subscribed via %s, new source %s",
                    email,
                    data.get("source"),
                    source,
                    extra={"additional_sources": additional},
                )
            return SubscriptionResult(subscriber_id=subscriber_id, created=False)

        campaign = campaign_for(source)
        subscriber = EmailSubscriber(
            email=email,
            phone=phone,
            source=source,
            campaign=campaign,
            sms_marketing=phone is not None,
            user_agent=context.user_agent,
            ip_address=context.ip_address,
            utm_source=context.utm_source,
            utm_medium=context.utm_medium,
            utm_campaign=context.utm_campaign,
        )
        subscriber_id = await self.store.add(
            SUBSCRIBERS_COLLECTION, subscriber.to_document()
        )
        marketing_id = await self.store.add(
            MARKETING_COLLECTION,
            MarketingEmail(
                email=email, phone=phone, source=source, campaign=campaign
            ).to_document(),
        )
        logger.info(
            "Email collected: %s (ID: %s)",
            email,
            subscriber_id,
            extra={"marketing_id": marketing_id, "campaign": campaign},
        )
        return SubscriptionResult(subscriber_id=subscriber_id, created=True)

    async def unsubscribe(self, subscriber_id: str) -> None:
        """Remove the primary record; the marketing copy is kept."""
        if not await self.store.delete(SUBSCRIBERS_COLLECTION, subscriber_id):
            raise NotFoundError("Subscriber not found")
        logger.info("Unsubscribed %s", subscriber_id)


def get_subscriber_service(store: StoreDependency) -> SubscriberService:
    """FastAPI dependency factory."""
    return SubscriberService(store)


SubscriberDependency = Annotated[SubscriberService, Depends(get_subscriber_service)]
