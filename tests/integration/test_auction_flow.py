# tests/integration/test_auction_flow.py
"""Integration tests for the auction lifecycle: list → bid → unlock → sweep.

Requires a running PostgreSQL DB with migrations applied (alembic upgrade head).
Each test seeds its own profiles with fresh UUIDs to avoid state pollution.
"""

import asyncio
import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import text

from config.settings import settings
from src.at_common.database import async_session_factory
from tests.unit.fakes import make_token

pytestmark = [pytest.mark.asyncio(loop_scope="session"), pytest.mark.integration]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, f'{user_id[:8]}@example.com')}"}


async def _create_auction(client: AsyncClient, designer_id: str, start_price: int = 1000) -> str:
    resp = await client.post(
        "/api/v1/auctions",
        json={"title": f"Piece {uuid.uuid4().hex[:6]}", "startPrice": start_price},
        headers=_headers(designer_id),
    )
    assert resp.status_code == 201, resp.text
    return str(resp.json()["data"]["id"])


async def _bid(client: AsyncClient, user_id: str, auction_id: str, amount: int):  # type: ignore[no-untyped-def]
    return await client.post(
        "/api/v1/bids",
        json={"auctionId": auction_id, "amount": amount},
        headers=_headers(user_id),
    )


async def _expire(auction_id: str) -> None:
    async with async_session_factory() as session, session.begin():
        await session.execute(
            text("""
                UPDATE auctions SET end_time = NOW() - INTERVAL '1 minute'
                WHERE id = CAST(:id AS UUID)
            """),
            {"id": auction_id},
        )


async def _seed_people(seed_profile, collectors: int = 3) -> tuple[str, list[str]]:  # type: ignore[no-untyped-def]
    designer = str(uuid.uuid4())
    await seed_profile(designer, "designer", "designer@example.com")
    people = []
    for _ in range(collectors):
        collector = str(uuid.uuid4())
        await seed_profile(collector, "collector", f"{collector[:8]}@example.com")
        people.append(collector)
    return designer, people


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


async def test_full_lifecycle_unlock_and_sale(client: AsyncClient, seed_profile) -> None:  # type: ignore[no-untyped-def]
    designer, (a, b, c) = await _seed_people(seed_profile)
    auction_id = await _create_auction(client, designer)

    for user, amount in [(a, 1100), (b, 1200), (a, 1300)]:
        resp = await _bid(client, user, auction_id, amount)
        assert resp.status_code == 200, resp.text

    detail = (await client.get(f"/api/v1/auctions/{auction_id}")).json()["data"]
    assert detail["status"] == "LOCKED"
    assert detail["unique_bidder_count"] == 2

    resp = await _bid(client, c, auction_id, 1400)
    assert resp.json()["data"]["auction_status"] == "UNLOCKED"

    await _expire(auction_id)
    resp = await client.post(
        "/api/v1/cron/auction-end",
        headers={"Authorization": f"Bearer {settings.CRON_SECRET}"},
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["processed"]["sold"] >= 1

    detail = (await client.get(f"/api/v1/auctions/{auction_id}")).json()["data"]
    assert detail["status"] == "SOLD"
    assert detail["winner_id"] == c
    assert detail["fulfillment_status"] == "pending_payment"


async def test_designer_cannot_bid(client: AsyncClient, seed_profile) -> None:  # type: ignore[no-untyped-def]
    designer, _ = await _seed_people(seed_profile, collectors=0)
    auction_id = await _create_auction(client, designer)
    resp = await _bid(client, designer, auction_id, 5000)
    assert resp.status_code == 400
    assert resp.json()["code"] == 4001


async def test_concurrent_bids_serialize(client: AsyncClient, seed_profile) -> None:  # type: ignore[no-untyped-def]
    designer, (a, b) = await _seed_people(seed_profile, collectors=2)
    auction_id = await _create_auction(client, designer)

    r1, r2 = await asyncio.gather(
        _bid(client, a, auction_id, 1100),
        _bid(client, b, auction_id, 1050),
    )

    codes = sorted(r.json()["code"] for r in (r1, r2))
    assert codes in ([0, 0], [0, 4002])
    detail = (await client.get(f"/api/v1/auctions/{auction_id}")).json()["data"]
    assert detail["current_price"] == 1100

    history = (await client.get(f"/api/v1/auctions/{auction_id}/bids")).json()["data"]["items"]
    amounts = [h["amount"] for h in reversed(history)]
    assert amounts == sorted(amounts)


async def test_expired_locked_auction_is_voided(client: AsyncClient, seed_profile) -> None:  # type: ignore[no-untyped-def]
    designer, (a,) = await _seed_people(seed_profile, collectors=1)
    auction_id = await _create_auction(client, designer)
    await _bid(client, a, auction_id, 1100)
    await _expire(auction_id)

    resp = await client.get(
        "/api/v1/cron/auction-end",
        headers={"Authorization": f"Bearer {settings.CRON_SECRET}"},
    )
    assert resp.json()["data"]["processed"]["void"] >= 1
    detail = (await client.get(f"/api/v1/auctions/{auction_id}")).json()["data"]
    assert detail["status"] == "VOID"

    second = await client.get(
        "/api/v1/cron/auction-end",
        headers={"Authorization": f"Bearer {settings.CRON_SECRET}"},
    )
    assert second.status_code == 200


async def test_remove_untouched_piece(client: AsyncClient, seed_profile) -> None:  # type: ignore[no-untyped-def]
    designer, _ = await _seed_people(seed_profile, collectors=0)
    auction_id = await _create_auction(client, designer)
    resp = await client.delete(f"/api/v1/auctions/{auction_id}", headers=_headers(designer))
    assert resp.json()["data"] == {"success": True}
    assert (await client.get(f"/api/v1/auctions/{auction_id}")).status_code == 404
