"""Tests for the approval gate: classification, enforcement and HTTP behaviour."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from portal.core.access import (AccessLevel, ApprovalStatus, Role,
                                SessionClaims, classify, enforce, merge_role)
from portal.core.exceptions import AwaitingApproval, Forbidden, Unauthenticated
from portal.core.security import create_session_token
from portal.models.account import Account
from portal.models.masterlist import MasterlistSlot
from portal.models.page import Page
from portal.models.roster import RosterTeam

ADMINS = frozenset({"boss@example.com"})


# ── Pure classification ─────────────────────────────────────────────
def test_no_claims_is_unauthenticated():
    assert classify(None, ADMINS) is AccessLevel.UNAUTHENTICATED
    assert classify(SessionClaims(email=""), ADMINS) is AccessLevel.UNAUTHENTICATED


def test_allow_list_wins_over_stored_state():
    claims = SessionClaims(
        email="Boss@Example.com", role=Role.USER, status=ApprovalStatus.REJECTED
    )
    assert classify(claims, ADMINS) is AccessLevel.APPROVED_ADMIN


@pytest.mark.parametrize(
    "role, status, expected",
    [
        (Role.USER, ApprovalStatus.PENDING, AccessLevel.PENDING_APPROVAL),
        (Role.ADMIN, ApprovalStatus.PENDING, AccessLevel.PENDING_APPROVAL),
        (Role.USER, ApprovalStatus.REJECTED, AccessLevel.PENDING_APPROVAL),
        (Role.USER, ApprovalStatus.APPROVED, AccessLevel.APPROVED_USER),
        (Role.MANAGER, ApprovalStatus.APPROVED, AccessLevel.APPROVED_USER),
        (Role.ADMIN, ApprovalStatus.APPROVED, AccessLevel.APPROVED_ADMIN),
    ],
)
def test_classify_stored_state(role, status, expected):
    claims = SessionClaims(email="someone@example.com", role=role, status=status)
    assert classify(claims, ADMINS) is expected


def test_enforce_raises_matching_error():
    with pytest.raises(Unauthenticated):
        enforce(AccessLevel.UNAUTHENTICATED)
    with pytest.raises(AwaitingApproval):
        enforce(AccessLevel.PENDING_APPROVAL)
    with pytest.raises(Forbidden):
        enforce(AccessLevel.APPROVED_USER, admin=True)
    enforce(AccessLevel.APPROVED_USER)
    enforce(AccessLevel.APPROVED_ADMIN, admin=True)


@pytest.mark.parametrize(
    "current, requested, expected",
    [
        ("admin", Role.USER, Role.ADMIN),
        ("admin", None, Role.ADMIN),
        ("user", Role.MANAGER, Role.MANAGER),
        ("manager", None, Role.MANAGER),
        (None, None, Role.USER),
        ("manager", Role.ADMIN, Role.ADMIN),
    ],
)
def test_merge_role_admin_is_sticky(current, requested, expected):
    assert merge_role(current, requested) is expected


# ── Over HTTP ───────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_missing_session_is_401(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/teams")
    assert resp.status_code == 401
    body = resp.json()
    assert body == {"error": "unauthenticated", "detail": "Not signed in", "success": False}
    assert resp.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_invalid_token_is_401(async_client: AsyncClient):
    resp = await async_client.get(
        "/api/v1/teams", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_session_cookie_is_accepted(async_client: AsyncClient):
    token = create_session_token("boss@example.com")
    async_client.cookies.set("session_token", token)
    resp = await async_client.get("/api/v1/auth/me")
    assert resp.status_code == 200
    assert resp.json()["access"] == "approved_admin"


@pytest.mark.asyncio
async def test_pending_caller_gets_403_and_store_is_untouched(
    async_client: AsyncClient, pending_headers, accounts_db
):
    target = Account(email="waiting@example.com", name="waiting", role="user", status="pending")
    accounts_db.add(target)
    await accounts_db.commit()
    await accounts_db.refresh(target)

    before = (
        await accounts_db.execute(select(Account).where(Account.email == "pending@example.com"))
    ).scalar_one()
    snapshot = (before.role, before.status, before.last_login_at)

    for path in ("/api/v1/teams", "/api/v1/attendance/summary", "/api/v1/roster/teams"):
        resp = await async_client.get(path, headers=pending_headers)
        assert resp.status_code == 403
        assert resp.json()["error"] == "awaiting_approval"

    mutations = [
        ("POST", "/api/v1/roster/teams", {"name": "Sneaky"}),
        ("POST", "/api/v1/masterlist/slots",
         {"page_key": "claire", "shift": "prime", "main_tg_username": "@sneaky"}),
        ("POST", "/api/v1/admin/users/approve",
         {"id": target.id, "action": "approve", "role": "admin"}),
        ("POST", "/api/v1/pages", {"tag": "claire", "label": "Claire"}),
        ("PATCH", "/api/v1/pages/claire", {"label": "Renamed"}),
        ("DELETE", "/api/v1/pages/claire", None),
    ]
    for method, path, body in mutations:
        resp = await async_client.request(method, path, json=body, headers=pending_headers)
        assert resp.status_code == 403, path
        assert resp.json()["error"] == "awaiting_approval"

    accounts_db.expire_all()
    after = (
        await accounts_db.execute(select(Account).where(Account.email == "pending@example.com"))
    ).scalar_one()
    assert (after.role, after.status, after.last_login_at) == snapshot

    untouched = (
        await accounts_db.execute(select(Account).where(Account.id == target.id))
    ).scalar_one()
    assert (untouched.role, untouched.status) == ("user", "pending")

    for model in (RosterTeam, MasterlistSlot, Page):
        count = (await accounts_db.execute(select(func.count()).select_from(model))).scalar_one()
        assert count == 0, model.__tablename__

    resp = await async_client.get("/api/v1/roster/teams", headers={})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_pending_caller_can_still_read_own_claims(
    async_client: AsyncClient, pending_headers
):
    resp = await async_client.get("/api/v1/auth/me", headers=pending_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "pending"
    assert data["access"] == "pending_approval"


@pytest.mark.asyncio
async def test_allow_listed_admin_without_account_row(
    async_client: AsyncClient, admin_headers, accounts_db
):
    resp = await async_client.get("/api/v1/admin/users?status=all", headers=admin_headers)
    assert resp.status_code == 200

    me = await async_client.get("/api/v1/auth/me", headers=admin_headers)
    assert me.json()["access"] == "approved_admin"
    assert me.json()["role"] == "admin"

    rows = (await accounts_db.execute(select(Account))).scalars().all()
    assert rows == []


@pytest.mark.asyncio
async def test_allow_list_is_case_insensitive(async_client: AsyncClient, make_headers):
    resp = await async_client.get("/api/v1/auth/me", headers=make_headers("chief@example.com"))
    assert resp.json()["access"] == "approved_admin"


@pytest.mark.asyncio
async def test_approved_non_admin_is_forbidden_on_admin_routes(
    async_client: AsyncClient, manager_headers
):
    resp = await async_client.get("/api/v1/admin/users", headers=manager_headers)
    assert resp.status_code == 403
    assert resp.json()["error"] == "forbidden"

    resp = await async_client.get("/api/v1/teams", headers=manager_headers)
    assert resp.status_code == 200
