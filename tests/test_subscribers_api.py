"""Tests for email subscriber intake and unsubscribe."""

import pytest

from storefront.errors import ValidationError
from storefront.models.subscriber import CollectEmailRequest
from storefront.services.subscribers import (
    SubscriberService,
    campaign_for,
    validate_email,
    validate_phone,
)


@pytest.mark.asyncio
async def test_collect_email_creates_subscriber_and_marketing_copy(client, store):
    response = await client.post(
        "/collect-email?utm_source=newsletter&utm_campaign=spring",
        json={"email": "driver@example.com", "phone": "+1 (555) 123-4567", "source": "promo_modal"},
        headers={"user-agent": "pytest-agent", "x-forwarded-for": "203.0.113.7"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Email collected successfully"

    subscriber = await store.get("emailSubscribers", body["id"])
    assert subscriber["email"] == "driver@example.com"
    assert subscriber["campaign"] == "promo_modal_10_percent_off"
    assert subscriber["smsMarketing"] is True
    assert subscriber["consentGiven"] is True
    assert subscriber["userAgent"] == "pytest-agent"
    assert subscriber["ipAddress"] == "203.0.113.7"
    assert subscriber["utmSource"] == "newsletter"
    assert subscriber["utmCampaign"] == "spring"
    assert subscriber["utmMedium"] is None

    [(_, marketing)] = await store.stream("marketingEmails")
    assert marketing["email"] == "driver@example.com"
    assert marketing["campaign"] == "promo_modal_10_percent_off"


@pytest.mark.asyncio
async def test_duplicate_email_is_recorded_once(client, store):
    first = await client.post("/collect-email", json={"email": "  Test@Example.com "})
    second = await client.post(
        "/collect-email", json={"email": "test@example.com", "source": "google_signin"}
    )

    assert first.json()["message"] == "Email collected successfully"
    assert second.status_code == 200
    assert second.json()["message"] == "Email already exists in list"
    assert second.json()["id"] == first.json()["id"]

    subscribers = await store.stream("emailSubscribers")
    assert len(subscribers) == 1
    assert subscribers[0][1]["email"] == "test@example.com"
    assert subscribers[0][1]["source"] == "promo_modal"
    assert subscribers[0][1]["ipAddress"] == "unknown"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("payload", "error"),
    [
        ({"email": "not-an-email"}, "Invalid email address"),
        ({}, "Invalid email address"),
        ({"email": "ok@example.com", "phone": "12-34"}, "Invalid phone number"),
    ],
)
async def test_invalid_submission_is_rejected(client, store, payload, error):
    response = await client.post("/collect-email", json=payload)

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": error}
    assert await store.stream("emailSubscribers") == []


@pytest.mark.asyncio
async def test_unsubscribe_removes_primary_record_only(client, store):
    created = await client.post("/collect-email", json={"email": "bye@example.com"})
    subscriber_id = created.json()["id"]

    response = await client.delete(f"/email-subscribers/{subscriber_id}")

    assert response.status_code == 200
    assert response.json() == {"success": True, "id": subscriber_id}
    assert await store.get("emailSubscribers", subscriber_id) is None
    assert len(await store.stream("marketingEmails")) == 1

    again = await client.post("/collect-email", json={"email": "bye@example.com"})
    assert again.json()["message"] == "Email collected successfully"


@pytest.mark.asyncio
async def test_unsubscribe_unknown_id_returns_404(client):
    response = await client.delete("/email-subscribers/ghost")

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Subscriber not found"}


@pytest.mark.asyncio
async def test_service_defaults_source_and_skips_sms_without_phone(store):
    service = SubscriberService(store)

    result = await service.collect(CollectEmailRequest(email="Quiet@Example.org"))

    assert result.created is True
    subscriber = await store.get("emailSubscribers", result.subscriber_id)
    assert subscriber["source"] == "promo_modal"
    assert subscriber["smsMarketing"] is False
    assert subscriber["phone"] is None
    assert (await service.find_by_email("QUIET@example.org"))[0] == result.subscriber_id


@pytest.mark.parametrize(
    ("source", "campaign"),
    [
        ("promo_modal", "promo_modal_10_percent_off"),
        ("user_registration", "user_registration"),
        ("google_signin", "google_signin"),
        ("footer", "general_signup"),
    ],
)
def test_campaign_for_source(source, campaign):
    assert campaign_for(source) == campaign


def test_validators():
    assert validate_email(" A@B.io ") == "a@b.io"
    assert validate_phone("   ") is None
    assert validate_phone("555-123-4567") == "555-123-4567"
    with pytest.raises(ValidationError):
        validate_email("a@b")
    with pytest.raises(ValidationError):
        validate_phone("1234567890123456")


@pytest.mark.asyncio
async def test_unsubscribe_store_failure_returns_structured_500(client, store, monkeypatch):
    async def _boom(*args, **kwargs):
        raise ConnectionError("store unavailable")

    monkeypatch.setattr(type(store), "delete", _boom)

    response = await client.delete("/email-subscribers/s1")

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Failed to remove subscriber"}
