"""Tests for the Stripe webhook"""

import json
import time
from types import SimpleNamespace
from uuid import uuid4

import pytest
import stripe
from httpx import AsyncClient
from sqlalchemy import select, func

from restodesk.models.audit import WebhookLog
from restodesk.models.billing import Recharge, Subscriber
from restodesk.models.notification import Notification
from restodesk.models.tenant import Profile
from restodesk.services import billing
from tests.conftest import sign_stripe_payload


async def post_event(client: AsyncClient, event: dict, signature: str = None):
    payload = json.dumps(event)
    headers = {"Content-Type": "application/json"}
    headers["Stripe-Signature"] = signature or sign_stripe_payload(payload)
    return await client.post("/webhooks/stripe", content=payload, headers=headers)


def make_event(event_type: str, obj: dict) -> dict:
    return {
        "id": f"evt_{uuid4().hex[:16]}",
        "object": "event",
        "type": event_type,
        "livemode": False,
        "data": {"object": obj},
    }


async def balance(db, tenant_id) -> int:
    return await db.scalar(select(Profile.minutes_balance).where(Profile.tenant_id == tenant_id))


async def recharge_status(db, recharge_id) -> str:
    return await db.scalar(select(Recharge.status).where(Recharge.id == recharge_id))


@pytest.fixture
async def pending_recharge(test_db, test_tenant):
    recharge = Recharge(
        tenant_id=test_tenant.id,
        pack_type="M",
        minutes=250,
        price_cents=4900,
        status="pending",
    )
    test_db.add(recharge)
    await test_db.commit()
    return recharge


def checkout_completed(recharge, tenant_id, **metadata_overrides) -> dict:
    metadata = {
        "recharge_id": str(recharge.id),
        "tenant_id": str(tenant_id),
        "pack_type": recharge.pack_type,
        "minutes": str(recharge.minutes),
    }
    metadata.update(metadata_overrides)
    return make_event(
        "checkout.session.completed",
        {"id": "cs_test_123", "object": "checkout.session", "mode": "payment", "metadata": metadata},
    )


async def test_checkout_completed_credits_minutes(client: AsyncClient, test_db, test_tenant, pending_recharge):
    response = await post_event(client, checkout_completed(pending_recharge, test_tenant.id))

    assert response.status_code == 200
    assert response.json() == {"received": True}
    assert await recharge_status(test_db, pending_recharge.id) == "completed"
    assert await balance(test_db, test_tenant.id) == 350

    categories = (await test_db.execute(
        select(Notification.category).where(Notification.tenant_id == test_tenant.id)
    )).scalars().all()
    assert categories == ["success"]


async def test_duplicate_delivery_credits_once(client: AsyncClient, test_db, test_tenant, pending_recharge):
    event = checkout_completed(pending_recharge, test_tenant.id)

    first = await post_event(client, event)
    second = await post_event(client, event)

    assert first.status_code == 200
    assert second.status_code == 200
    assert await balance(test_db, test_tenant.id) == 350

    notifications = await test_db.scalar(
        select(func.count(Notification.id)).where(Notification.tenant_id == test_tenant.id)
    )
    assert notifications == 1


async def test_legacy_user_id_metadata(client: AsyncClient, test_db, test_tenant, pending_recharge):
    event = checkout_completed(pending_recharge, test_tenant.id)
    metadata = event["data"]["object"]["metadata"]
    metadata["user_id"] = metadata.pop("tenant_id")

    response = await post_event(client, event)

    assert response.status_code == 200
    assert await balance(test_db, test_tenant.id) == 350


async def test_missing_metadata_is_bad_request(client: AsyncClient, test_db, test_tenant, pending_recharge):
    event = checkout_completed(pending_recharge, test_tenant.id)
    del event["data"]["object"]["metadata"]["recharge_id"]

    response = await post_event(client, event)

    assert response.status_code == 400
    assert await recharge_status(test_db, pending_recharge.id) == "pending"
    assert await balance(test_db, test_tenant.id) == 100


async def test_unknown_recharge_is_not_found(client: AsyncClient, test_db, test_tenant, pending_recharge):
    event = checkout_completed(pending_recharge, test_tenant.id, recharge_id=str(uuid4()))

    response = await post_event(client, event)

    assert response.status_code == 404
    assert await balance(test_db, test_tenant.id) == 100


async def test_failed_credit_is_rolled_back_and_logged(client: AsyncClient, test_db, test_tenant, pending_recharge, monkeypatch):
    def broken_notify(*args, **kwargs):
        raise RuntimeError("notifications table locked")

    monkeypatch.setattr(billing, "notify", broken_notify)

    response = await post_event(client, checkout_completed(pending_recharge, test_tenant.id))

    assert response.status_code == 500
    assert "notifications table locked" in response.json()["error"]
    assert await recharge_status(test_db, pending_recharge.id) == "pending"
    assert await balance(test_db, test_tenant.id) == 100
    assert await test_db.scalar(select(func.count(Notification.id))) == 0

    result = await test_db.execute(
        select(WebhookLog.status, WebhookLog.response_status, WebhookLog.data_type)
        .where(WebhookLog.webhook_type == "stripe")
    )
    assert result.all() == [("error", 500, "checkout.session.completed")]


async def test_recharge_of_other_tenant_is_not_credited(client: AsyncClient, test_db, test_tenant, other_tenant, pending_recharge):
    event = checkout_completed(pending_recharge, other_tenant.id)

    response = await post_event(client, event)

    assert response.status_code == 404
    assert await recharge_status(test_db, pending_recharge.id) == "pending"
    assert await balance(test_db, other_tenant.id) == 100


async def test_invalid_signature_writes_nothing(client: AsyncClient, test_db, test_tenant, pending_recharge):
    event = checkout_completed(pending_recharge, test_tenant.id)
    payload = json.dumps(event)

    bad = sign_stripe_payload(payload, secret="whsec_wrong")
    response = await post_event(client, event, signature=bad)
    assert response.status_code == 400

    stale = sign_stripe_payload(payload, timestamp=int(time.time()) - 3600)
    response = await post_event(client, event, signature=stale)
    assert response.status_code == 400

    response = await client.post(
        "/webhooks/stripe",
        content=payload,
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400

    assert await recharge_status(test_db, pending_recharge.id) == "pending"
    assert await balance(test_db, test_tenant.id) == 100

    logged = (await test_db.execute(
        select(WebhookLog.response_status).where(WebhookLog.webhook_type == "stripe")
    )).scalars().all()
    assert logged == [400, 400, 400]


async def test_expired_checkout_marks_failed(client: AsyncClient, test_db, test_tenant, pending_recharge):
    event = make_event(
        "checkout.session.expired",
        {"id": "cs_test_123", "metadata": {"recharge_id": str(pending_recharge.id)}},
    )

    response = await post_event(client, event)

    assert response.status_code == 200
    assert await recharge_status(test_db, pending_recharge.id) == "failed"
    assert await balance(test_db, test_tenant.id) == 100


async def test_failure_never_regresses_completed(client: AsyncClient, test_db, test_tenant, pending_recharge):
    await post_event(client, checkout_completed(pending_recharge, test_tenant.id))

    event = make_event(
        "payment_intent.payment_failed",
        {"id": "pi_test_123", "metadata": {"recharge_id": str(pending_recharge.id)}},
    )
    response = await post_event(client, event)

    assert response.status_code == 200
    assert await recharge_status(test_db, pending_recharge.id) == "completed"
    assert await balance(test_db, test_tenant.id) == 350


def subscription_created(customer: str = "cus_test", metadata: dict = None, price: str = "price_pro") -> dict:
    return make_event(
        "customer.subscription.created",
        {
            "id": "sub_test_123",
            "object": "subscription",
            "customer": customer,
            "metadata": metadata or {},
            "current_period_end": 1893456000,
            "items": {"data": [{"price": {"id": price}}]},
        },
    )


async def subscriber_row(db, tenant_id):
    result = await db.execute(
        select(Subscriber.tier, Subscriber.status, Subscriber.stripe_customer_id)
        .where(Subscriber.tenant_id == tenant_id)
    )
    return result.one_or_none()


async def test_subscription_created_from_metadata(client: AsyncClient, test_db, test_tenant):
    response = await post_event(client, subscription_created(metadata={"tenant_id": str(test_tenant.id)}))

    assert response.status_code == 200
    assert await subscriber_row(test_db, test_tenant.id) == ("pro", "active", "cus_test")

    titles = (await test_db.execute(
        select(Notification.title).where(Notification.tenant_id == test_tenant.id)
    )).scalars().all()
    assert titles == ["Welcome!"]


async def test_subscription_resolved_by_customer_email(client: AsyncClient, test_db, test_tenant, monkeypatch):
    def fake_retrieve(customer_id, **kwargs):
        assert customer_id == "cus_email"
        return SimpleNamespace(id=customer_id, email=test_tenant.contact_email)

    monkeypatch.setattr(stripe.Customer, "retrieve", fake_retrieve)

    response = await post_event(client, subscription_created(customer="cus_email", price="price_unknown"))

    assert response.status_code == 200
    assert await subscriber_row(test_db, test_tenant.id) == ("basic", "active", "cus_email")


async def test_invoice_renewal_upserts_without_second_welcome(client: AsyncClient, test_db, test_tenant):
    await post_event(client, subscription_created(metadata={"tenant_id": str(test_tenant.id)}))

    invoice = make_event(
        "invoice.payment_succeeded",
        {
            "id": "in_test_123",
            "object": "invoice",
            "customer": "cus_test",
            "subscription": "sub_test_123",
            "period_end": 1896134400,
            "lines": {"data": [{"price": {"id": "price_premium"}}]},
        },
    )
    response = await post_event(client, invoice)

    assert response.status_code == 200
    assert await subscriber_row(test_db, test_tenant.id) == ("premium", "active", "cus_test")

    subscribers = await test_db.scalar(select(func.count(Subscriber.id)))
    assert subscribers == 1

    welcomes = await test_db.scalar(
        select(func.count(Notification.id)).where(Notification.title == "Welcome!")
    )
    assert welcomes == 1


async def test_subscription_for_unknown_customer_is_not_found(client: AsyncClient, test_db, test_tenant, monkeypatch):
    monkeypatch.setattr(
        stripe.Customer,
        "retrieve",
        lambda customer_id, **kwargs: SimpleNamespace(id=customer_id, email="nobody@example.com"),
    )

    response = await post_event(client, subscription_created(customer="cus_nobody"))

    assert response.status_code == 404
    assert await test_db.scalar(select(func.count(Subscriber.id))) == 0


async def test_customer_lookup_failure_is_bad_gateway(client: AsyncClient, test_db, test_tenant, monkeypatch):
    def failing_retrieve(customer_id, **kwargs):
        raise stripe.APIConnectionError("network down")

    monkeypatch.setattr(stripe.Customer, "retrieve", failing_retrieve)

    response = await post_event(client, subscription_created(customer="cus_offline"))

    assert response.status_code == 502


async def test_subscription_deleted_cancels(client: AsyncClient, test_db, test_tenant):
    await post_event(client, subscription_created(metadata={"tenant_id": str(test_tenant.id)}))

    event = make_event(
        "customer.subscription.deleted",
        {"id": "sub_test_123", "object": "subscription", "customer": "cus_test"},
    )
    response = await post_event(client, event)

    assert response.status_code == 200
    assert await subscriber_row(test_db, test_tenant.id) == ("pro", "cancelled", "cus_test")


async def test_unhandled_event_type_is_acknowledged(client: AsyncClient, test_db):
    response = await post_event(client, make_event("charge.refunded", {"id": "ch_test"}))

    assert response.status_code == 200
    assert response.json() == {"received": True}

    status = await test_db.scalar(
        select(WebhookLog.status).where(WebhookLog.data_type == "charge.refunded")
    )
    assert status == "ignored"
