"""Tests for the call-automation webhook"""

from datetime import date, time
from uuid import UUID, uuid4

from httpx import AsyncClient
from sqlalchemy import select, func

from restodesk.models.audit import WebhookLog
from restodesk.models.order import Order
from restodesk.models.reservation import Reservation
from restodesk.services import ordering
from restodesk.webhooks import automation


async def count(db, model) -> int:
    return await db.scalar(select(func.count(model.id)))


async def test_reservation_created_confirmed(client: AsyncClient, test_db, test_tenant):
    response = await client.post(
        "/webhooks/automation",
        json={
            "type": "reservation",
            "restaurant_id": str(test_tenant.id),
            "client_name": "Alice",
            "client_phone": "+33600000000",
            "date": "2026-06-12",
            "time": "20:30",
            "party_size": 4,
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["type"] == "reservation"
    assert data["client_name"] == "Alice"

    reservation = await test_db.get(Reservation, UUID(data["id"]))
    assert reservation.tenant_id == test_tenant.id
    assert reservation.status == "confirmed"
    assert reservation.reservation_date == date(2026, 6, 12)
    assert reservation.reservation_time == time(20, 30)
    assert reservation.party_size == 4


async def test_legacy_french_payload(client: AsyncClient, test_db, test_tenant):
    """Older scenarios send user_id, type_demande1 and French field names"""
    response = await client.post(
        "/webhooks/automation",
        json={
            "type_demande1": "reservation",
            "user_id": str(test_tenant.id),
            "Nom": "Dupont",
            "Telephone": 612345678,
            "Date": "2026-06-12",
            "Heure": "19h30",
            "Nombre_personnes": "3",
        },
    )

    assert response.status_code == 200
    reservation = await test_db.get(Reservation, UUID(response.json()["id"]))
    assert reservation.client_name == "Dupont"
    assert reservation.client_phone == "612345678"
    assert reservation.reservation_time == time(19, 30)
    assert reservation.party_size == 3


async def test_party_size_defaults_to_one(client: AsyncClient, test_db, test_tenant):
    response = await client.post(
        "/webhooks/automation",
        json={
            "type": "reservation",
            "restaurant_id": str(test_tenant.id),
            "Nom": "Solo",
            "Date": "2026-06-12",
            "Heure": "12:00",
            "Nombre_personnes": "",
        },
    )

    assert response.status_code == 200
    reservation = await test_db.get(Reservation, UUID(response.json()["id"]))
    assert reservation.party_size == 1


async def test_order_total_from_menu_prices(client: AsyncClient, test_db, test_tenant, test_menu_prices):
    response = await client.post(
        "/webhooks/automation",
        json={
            "type": "order",
            "restaurant_id": str(test_tenant.id),
            "client_name": "Bob",
            "items": ["Pizza", "Coke", "Pizza"],
        },
    )

    assert response.status_code == 200
    order = await test_db.get(Order, UUID(response.json()["id"]))
    assert order.status == "received"
    assert order.total_cents == 2700
    assert order.items_json == ["Pizza", "Coke", "Pizza"]


async def test_unpriced_items_count_zero(client: AsyncClient, test_db, test_tenant, test_menu_prices):
    response = await client.post(
        "/webhooks/automation",
        json={
            "type_demande2": "commande",
            "restaurant_id": str(test_tenant.id),
            "Nom": "Carol",
            "Choix_menu": ["Pizza", "Unknown Dish"],
        },
    )

    assert response.status_code == 200
    order = await test_db.get(Order, UUID(response.json()["id"]))
    assert order.total_cents == 1200
    assert order.items_json == ["Pizza", "Unknown Dish"]


async def test_order_uses_only_own_tenant_prices(client: AsyncClient, test_db, test_tenant, other_tenant, test_menu_prices):
    response = await client.post(
        "/webhooks/automation",
        json={
            "type": "order",
            "restaurant_id": str(other_tenant.id),
            "client_name": "Dan",
            "items": ["Pizza"],
        },
    )

    assert response.status_code == 200
    order = await test_db.get(Order, UUID(response.json()["id"]))
    assert order.tenant_id == other_tenant.id
    assert order.total_cents == 0


async def test_missing_tenant_id_is_bad_request(client: AsyncClient, test_db):
    response = await client.post(
        "/webhooks/automation",
        json={"type": "order", "client_name": "Eve", "items": ["Pizza"]},
    )

    assert response.status_code == 400
    assert "error" in response.json()
    assert await count(test_db, Order) == 0


async def test_unknown_tenant_writes_nothing(client: AsyncClient, test_db, test_tenant):
    for tenant_id in [str(uuid4()), "not-a-uuid"]:
        response = await client.post(
            "/webhooks/automation",
            json={
                "type": "reservation",
                "restaurant_id": tenant_id,
                "client_name": "Frank",
                "date": "2026-06-12",
                "time": "20:00",
            },
        )
        assert response.status_code == 404

    assert await count(test_db, Reservation) == 0


async def test_reservation_without_slot_is_rejected(client: AsyncClient, test_db, test_tenant):
    response = await client.post(
        "/webhooks/automation",
        json={
            "type": "reservation",
            "restaurant_id": str(test_tenant.id),
            "client_name": "Grace",
        },
    )

    assert response.status_code == 422
    assert await count(test_db, Reservation) == 0


async def test_unknown_type_is_rejected(client: AsyncClient, test_db, test_tenant):
    response = await client.post(
        "/webhooks/automation",
        json={
            "type": "complaint",
            "restaurant_id": str(test_tenant.id),
            "client_name": "Heidi",
        },
    )

    assert response.status_code == 422


async def test_outcomes_are_logged(client: AsyncClient, test_db, test_tenant, test_menu_prices):
    await client.post(
        "/webhooks/automation",
        json={
            "type": "order",
            "restaurant_id": str(test_tenant.id),
            "client_name": "Ivan",
            "items": ["Pizza"],
        },
    )
    await client.post("/webhooks/automation", json={"type": "order", "client_name": "Judy"})

    result = await test_db.execute(
        select(WebhookLog.status, WebhookLog.response_status, WebhookLog.tenant_id)
        .where(WebhookLog.webhook_type == "automation")
        .order_by(WebhookLog.created_at)
    )
    rows = result.all()

    assert len(rows) == 2
    assert rows[0] == ("success", 200, test_tenant.id)
    assert rows[1][0] == "error"
    assert rows[1][1] == 400


async def test_both_legacy_flags_are_rejected(client: AsyncClient, test_db, test_tenant):
    response = await client.post(
        "/webhooks/automation",
        json={
            "type_demande1": "reservation",
            "type_demande2": "commande",
            "user_id": str(test_tenant.id),
            "Nom": "Karl",
            "Date": "2026-06-12",
            "Heure": "20h",
            "Choix_menu": ["Pizza"],
        },
    )

    assert response.status_code == 422
    assert await count(test_db, Reservation) == 0
    assert await count(test_db, Order) == 0


async def test_non_utf8_body_is_rejected_and_logged(client: AsyncClient, test_db):
    response = await client.post(
        "/webhooks/automation",
        content=b'{"type": "order", "Nom": "\xff\xfe"}',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Body is not valid JSON"}

    result = await test_db.execute(
        select(WebhookLog.status, WebhookLog.response_status).where(WebhookLog.webhook_type == "automation")
    )
    assert result.all() == [("error", 400)]


async def test_failed_insert_writes_nothing_but_the_log(client: AsyncClient, test_db, test_tenant, test_menu_prices, monkeypatch):
    async def create_then_fail(db, *args, **kwargs):
        await ordering.create_order(db, *args, **kwargs)
        await db.flush()
        raise RuntimeError("db exploded")

    monkeypatch.setattr(automation, "create_order", create_then_fail)

    response = await client.post(
        "/webhooks/automation",
        json={
            "type": "order",
            "restaurant_id": str(test_tenant.id),
            "client_name": "Lena",
            "items": ["Pizza"],
        },
    )

    assert response.status_code == 500
    assert "db exploded" in response.json()["error"]
    assert await count(test_db, Order) == 0

    result = await test_db.execute(
        select(WebhookLog.status, WebhookLog.response_status, WebhookLog.tenant_id, WebhookLog.error_message)
        .where(WebhookLog.webhook_type == "automation")
    )
    assert result.all() == [("error", 500, test_tenant.id, "db exploded")]
