"""Tests for the minutes balance"""

import asyncio
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import select, func

from restodesk.errors import NotFoundError
from restodesk.models.billing import MinuteConsumption
from restodesk.models.notification import Notification
from restodesk.models.tenant import Profile
from restodesk.services.minutes import add_minutes, consume_minutes


async def balance(db, tenant_id) -> int:
    return await db.scalar(select(Profile.minutes_balance).where(Profile.tenant_id == tenant_id))


async def test_add_minutes_is_relative(test_db, test_tenant):
    await add_minutes(test_db, test_tenant.id, 250)
    await add_minutes(test_db, test_tenant.id, 100)
    await test_db.commit()

    assert await balance(test_db, test_tenant.id) == 450


async def test_add_minutes_unknown_tenant(test_db, test_tenant):
    with pytest.raises(NotFoundError):
        await add_minutes(test_db, uuid4(), 10)


async def test_consume_refuses_overdraft(test_db, test_tenant):
    assert await consume_minutes(test_db, test_tenant.id, 60) is True
    assert await consume_minutes(test_db, test_tenant.id, 60) is False
    await test_db.commit()

    assert await balance(test_db, test_tenant.id) == 40
    entries = await test_db.scalar(select(func.count(MinuteConsumption.id)))
    assert entries == 1


async def test_concurrent_consumers_never_go_negative(session_factory, test_tenant):
    async def consume_once():
        async with session_factory() as db:
            ok = await consume_minutes(db, test_tenant.id, 30)
            await db.commit()
            return ok

    results = await asyncio.gather(*[consume_once() for _ in range(5)])

    assert results.count(True) == 3
    async with session_factory() as db:
        assert await balance(db, test_tenant.id) == 10


async def test_get_minutes(viewer_client: AsyncClient, test_tenant):
    response = await viewer_client.get(f"/tenants/{test_tenant.id}/minutes")

    assert response.status_code == 200
    data = response.json()
    assert data["minutes_balance"] == 100
    assert data["auto_recharge_threshold"] == 10


async def test_consume_endpoint(authenticated_client: AsyncClient, test_db, test_tenant):
    url = f"/tenants/{test_tenant.id}/minutes/consume"

    response = await authenticated_client.post(url, json={"minutes": 30, "description": "Call 1"})
    assert response.status_code == 200
    assert response.json() == {"minutes_consumed": 30, "minutes_balance": 70, "low_balance": False}

    response = await authenticated_client.post(url, json={"minutes": 500})
    assert response.status_code == 409
    assert await balance(test_db, test_tenant.id) == 70

    response = await authenticated_client.post(url, json={"minutes": 0})
    assert response.status_code == 422

    response = await authenticated_client.get(f"/tenants/{test_tenant.id}/minutes/consumptions")
    history = response.json()
    assert len(history) == 1
    assert history[0]["minutes"] == 30
    assert history[0]["description"] == "Call 1"


async def test_low_balance_warning_once(authenticated_client: AsyncClient, test_db, test_tenant):
    url = f"/tenants/{test_tenant.id}/minutes/consume"

    response = await authenticated_client.post(url, json={"minutes": 85})
    assert response.json()["low_balance"] is False

    # 15 -> 5 crosses the threshold of 10
    response = await authenticated_client.post(url, json={"minutes": 10})
    assert response.json() == {"minutes_consumed": 10, "minutes_balance": 5, "low_balance": True}

    response = await authenticated_client.post(url, json={"minutes": 2})
    assert response.json()["low_balance"] is True

    warnings = await test_db.scalar(
        select(func.count(Notification.id)).where(Notification.category == "warning")
    )
    assert warnings == 1


async def test_update_auto_recharge(authenticated_client: AsyncClient, test_tenant):
    url = f"/tenants/{test_tenant.id}/minutes/auto_recharge"

    response = await authenticated_client.patch(
        url,
        json={"auto_recharge_enabled": True, "auto_recharge_threshold": 30, "preferred_pack_type": "L"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["auto_recharge_enabled"] is True
    assert data["auto_recharge_threshold"] == 30
    assert data["preferred_pack_type"] == "L"
    assert data["minutes_balance"] == 100

    response = await authenticated_client.patch(url, json={"preferred_pack_type": "XXL"})
    assert response.status_code == 400


async def test_profile_update_cannot_touch_balance(authenticated_client: AsyncClient, test_db, test_tenant):
    response = await authenticated_client.patch(
        f"/tenants/{test_tenant.id}/profile",
        json={"display_name": "Chez Test", "minutes_balance": 99999},
    )

    assert response.status_code == 200
    assert response.json()["display_name"] == "Chez Test"
    assert await balance(test_db, test_tenant.id) == 100
