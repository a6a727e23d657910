"""Email subscriber documents and intake schemas."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from storefront.models.product import DocumentModel


class CollectEmailRequest(BaseModel):
    """Body of POST /collect-email.

    Format checks happen in the service so that failures surface as the
    structured 400 payload rather than a schema error.
    """

    email: str = ""
    phone: str | None = None
    source: str | None = None


class SubmissionContext(BaseModel):
    """Request metadata captured at submission time."""

    user_agent: str | None = None
    ip_address: str = "unknown"
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None


class EmailSubscriber(DocumentModel):
    """Primary record in the ``emailSubscribers`` collection."""

    email: str
    phone: str | None = None
    source: str
    campaign: str
    subscribed: bool = True
    email_marketing: bool = True
    sms_marketing: bool = False
    consent_given: bool = True
    consent_date: datetime = Field(default_factory=lambda: datetime.now(UTC))
    user_agent: str | None = None
    ip_address: str = "unknown"
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))


class MarketingEmail(DocumentModel):
    """Denormalized copy kept in ``marketingEmails`` for simpler querying."""

    email: str
    phone: str | None = None
    subscribed: bool = True
    source: str
    campaign: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class SubscriptionResult(BaseModel):
    subscriber_id: str
    created: bool
