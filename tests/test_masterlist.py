"""Tests for the masterlist, saved slots and chatter tiers."""

from datetime import date, datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from portal.core.pages import EXPECTED_PAGES
from portal.models.attendance import ClockIn
from portal.models.sales import Sale

UTC = timezone.utc
TODAY = date(2024, 1, 15)


def _clockin(page_key, shift, ts, *, cover=False, **identity):
    return ClockIn(attendance_day=TODAY, shift=shift, page_key=page_key, is_cover=cover,
                   ph_ts=ts, **identity)


# ── Saved slots ─────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_upsert_slot_strips_at_sign(async_client: AsyncClient, manager_headers):
    resp = await async_client.post(
        "/api/v1/masterlist/slots",
        json={"page_key": "claire", "shift": "prime", "main_tg_username": " @saved_user ",
              "main_display_name": "  "},
        headers=manager_headers,
    )
    assert resp.status_code == 200
    slot = resp.json()
    assert slot["main_tg_username"] == "saved_user"
    assert slot["main_display_name"] is None


@pytest.mark.asyncio
async def test_upsert_slot_overwrites_existing(async_client: AsyncClient, manager_headers):
    first = await async_client.post(
        "/api/v1/masterlist/slots",
        json={"page_key": "claire", "shift": "midshift", "main_display_name": "First"},
        headers=manager_headers,
    )
    second = await async_client.post(
        "/api/v1/masterlist/slots",
        json={"page_key": "claire", "shift": "midshift", "main_display_name": "Second"},
        headers=manager_headers,
    )
    assert first.json()["id"] == second.json()["id"]
    assert second.json()["main_display_name"] == "Second"

    resp = await async_client.get("/api/v1/masterlist/slots", headers=manager_headers)
    assert [s["main_display_name"] for s in resp.json()["slots"]] == ["Second"]


@pytest.mark.asyncio
async def test_upsert_slot_rejects_unknown_shift(async_client: AsyncClient, manager_headers):
    resp = await async_client.post(
        "/api/v1/masterlist/slots",
        json={"page_key": "claire", "shift": "night"},
        headers=manager_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_input"


# ── Masterlist ──────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_masterlist_prefers_live_main_then_saved(
    async_client: AsyncClient, manager_headers, attendance_db
):
    attendance_db.add_all(
        [
            _clockin("bripaid", "prime", datetime(2024, 1, 14, 23, 50, tzinfo=UTC), cover=True,
                     user_name="Cat", tg_username="cat"),
            _clockin("bripaid", "prime", datetime(2024, 1, 15, 0, 30, tzinfo=UTC),
                     display_name="Eve Main", tg_username="@eve"),
            _clockin("claire", "closing", datetime(2024, 1, 15, 15, 50, tzinfo=UTC), cover=True,
                     user_name="Dan"),
        ]
    )
    await attendance_db.commit()
    await async_client.post(
        "/api/v1/masterlist/slots",
        json={"page_key": "claire", "shift": "prime", "main_tg_username": "@saved_user"},
        headers=manager_headers,
    )
    await async_client.post(
        "/api/v1/masterlist/slots",
        json={"page_key": "bripaid", "shift": "prime", "main_display_name": "Ignored"},
        headers=manager_headers,
    )

    resp = await async_client.get("/api/v1/masterlist", headers=manager_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["attendance_day"] == "2024-01-15"
    assert len(data["pages"]) == len(EXPECTED_PAGES)
    pages = {p["page_key"]: p for p in data["pages"]}

    assert pages["bripaid"]["prime"] == {
        "display_name": "Eve Main", "username": "@eve", "is_cover": False, "source": "attendance",
    }
    assert pages["claire"]["prime"] == {
        "display_name": "@saved_user", "username": "@saved_user", "is_cover": False, "source": "saved",
    }
    assert pages["claire"]["closing"]["is_cover"] is True
    assert pages["claire"]["closing"]["display_name"] == "Dan"
    assert pages["claire"]["midshift"] is None
    assert pages["ashley"]["prime"] is None


# ── Tiers ───────────────────────────────────────────────────────────
@pytest.fixture
async def ten_chatters(sales_db, fixed_now):
    for cid in range(1, 11):
        sales_db.add(
            Sale(team="Alpha", page="p1", chat_id=cid, amount=cid * 30,
                 ts=fixed_now - timedelta(days=2))
        )
    # another team and an old sale
    sales_db.add(Sale(team="Beta", page="p1", chat_id=99, amount=10_000, ts=fixed_now - timedelta(days=1)))
    sales_db.add(Sale(team="Alpha", page="p1", chat_id=1, amount=10_000, ts=fixed_now - timedelta(days=45)))
    await sales_db.commit()


@pytest.mark.asyncio
async def test_tiers_rank_and_enrich(
    async_client: AsyncClient, manager_headers, ten_chatters, attendance_db
):
    attendance_db.add_all(
        [
            _clockin("claire", "prime", datetime(2024, 1, 1, 0, 0, tzinfo=UTC),
                     chat_id=10, display_name="Old Name", tg_username="old"),
            _clockin("claire", "prime", datetime(2024, 1, 10, 0, 0, tzinfo=UTC),
                     chat_id=10, display_name="Top @top_dog  Seller", tg_username="@top.dog"),
        ]
    )
    await attendance_db.commit()

    resp = await async_client.get("/api/v1/masterlist/tiers?days=30&team=Alpha", headers=manager_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["team"] == "Alpha"
    assert data["note"] is None
    tiers = data["tiers"]
    assert [t["chatter_id"] for t in tiers] == [str(c) for c in range(10, 0, -1)]
    assert [t["tier"] for t in tiers] == [5, 4, 4, 3, 3, 3, 2, 2, 1, 1]

    top = tiers[0]
    assert top["display_name"] == "Top Seller"
    assert top["username"] == "@topdog"
    assert top["total_sales"] == 300.0
    assert top["daily_average"] == 10.0

    assert tiers[1]["display_name"] == "Chatter 9"
    assert tiers[1]["username"] == ""


@pytest.mark.asyncio
async def test_tiers_across_all_teams(async_client: AsyncClient, manager_headers, ten_chatters):
    resp = await async_client.get("/api/v1/masterlist/tiers", headers=manager_headers)
    data = resp.json()
    assert data["team"] is None
    assert data["days"] == 30
    assert data["tiers"][0]["chatter_id"] == "99"
    assert len(data["tiers"]) == 11
    assert data["note"] is not None


@pytest.mark.asyncio
async def test_tiers_empty(async_client: AsyncClient, manager_headers):
    resp = await async_client.get("/api/v1/masterlist/tiers?days=15", headers=manager_headers)
    assert resp.json() == {"days": 15, "team": None, "tiers": [], "note": None}


@pytest.mark.asyncio
async def test_tiers_reject_bad_window(async_client: AsyncClient, manager_headers):
    resp = await async_client.get("/api/v1/masterlist/tiers?days=0", headers=manager_headers)
    assert resp.status_code == 400
