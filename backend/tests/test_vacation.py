"""Tests for the vacation request lifecycle: submit, decide, withdraw and listings."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy import select
from sqlmodel import col

from vacation_portal.models import Account, AuditLog, Role, VacationRequest

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

REQUESTS_URL = "/api/requests"


def _headers(account: Account) -> dict[str, str]:
    return {"X-User-Id": str(account.id), "X-Role": account.role}


@pytest.fixture
async def staff(
    db_session: AsyncSession,
    make_account: Callable[..., Awaitable[Account]],
) -> dict[str, Account]:
    supervisor = await make_account(db_session, role=Role.SUPERVISOR, display_name="Maggie Manager")
    subordinate = await make_account(db_session, role=Role.SUBORDINATE, display_name="Ethan Employee")
    colleague = await make_account(db_session, role=Role.SUBORDINATE, display_name="Cora Colleague")
    return {"supervisor": supervisor, "subordinate": subordinate, "colleague": colleague}


async def _submit(
    client: AsyncClient,
    account: Account,
    date_from: str = "2025-06-01",
    date_to: str = "2025-06-03",
    reason: str | None = "trip",
) -> dict[str, Any]:
    body: dict[str, Any] = {"date_from": date_from, "date_to": date_to}
    if reason is not None:
        body["reason"] = reason
    resp = await client.post(REQUESTS_URL, json=body, headers=_headers(account))
    assert resp.status_code == 201, resp.json()
    result: dict[str, Any] = resp.json()
    return result


# ---------------------------------------------------------------------------
# Submit
# ---------------------------------------------------------------------------


async def test_submit_creates_pending_request(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    data = await _submit(async_client, staff["subordinate"])
    assert data["status"] == "pending"
    assert data["date_from"] == "2025-06-01"
    assert data["date_to"] == "2025-06-03"
    assert data["reason"] == "trip"
    assert data["subject_id"] == str(staff["subordinate"].id)


async def test_submit_single_day_request(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    data = await _submit(async_client, staff["subordinate"], date_from="2025-06-01", date_to="2025-06-01")
    assert data["status"] == "pending"


async def test_submit_blank_reason_stored_as_null(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    data = await _submit(async_client, staff["subordinate"], reason="   ")
    assert data["reason"] is None


async def test_submit_trims_reason(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    data = await _submit(async_client, staff["subordinate"], reason="  family visit ")
    assert data["reason"] == "family visit"


async def test_submit_accepts_datetime_strings(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    data = await _submit(
        async_client, staff["subordinate"], date_from="2025-06-01T00:00:00", date_to="2025-06-02T00:00:00"
    )
    assert data["date_from"] == "2025-06-01"
    assert data["date_to"] == "2025-06-02"


async def test_submit_overlapping_requests_allowed(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    first = await _submit(async_client, staff["subordinate"])
    second = await _submit(async_client, staff["subordinate"])
    assert first["id"] != second["id"]


async def test_submit_reversed_range_rejected(
    async_client: AsyncClient,
    db_session: AsyncSession,
    staff: dict[str, Account],
) -> None:
    resp = await async_client.post(
        REQUESTS_URL,
        json={"date_from": "2025-06-03", "date_to": "2025-06-01"},
        headers=_headers(staff["subordinate"]),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "date_range"

    result = await db_session.execute(
        select(VacationRequest).where(col(VacationRequest.subject_id) == staff["subordinate"].id)
    )
    assert result.scalars().all() == []


async def test_submit_unparseable_dates(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    resp = await async_client.post(
        REQUESTS_URL,
        json={"date_from": "next tuesday", "date_to": "2025-06-01"},
        headers=_headers(staff["subordinate"]),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_dates"


async def test_submit_missing_date(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    resp = await async_client.post(
        REQUESTS_URL,
        json={"date_from": "2025-06-01"},
        headers=_headers(staff["subordinate"]),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_body"


async def test_submit_empty_date(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    resp = await async_client.post(
        REQUESTS_URL,
        json={"date_from": "", "date_to": "2025-06-01"},
        headers=_headers(staff["subordinate"]),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_body"


async def test_submit_requires_subordinate(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    resp = await async_client.post(
        REQUESTS_URL,
        json={"date_from": "2025-06-01", "date_to": "2025-06-02"},
        headers=_headers(staff["supervisor"]),
    )
    assert resp.status_code == 403
    assert resp.json() == {"error": "forbidden"}


async def test_submit_requires_identity(async_client: AsyncClient) -> None:
    resp = await async_client.post(REQUESTS_URL, json={"date_from": "2025-06-01", "date_to": "2025-06-02"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "unauthorized"}


async def test_submit_rejects_unknown_role_header(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    resp = await async_client.post(
        REQUESTS_URL,
        json={"date_from": "2025-06-01", "date_to": "2025-06-02"},
        headers={"X-User-Id": str(staff["subordinate"].id), "X-Role": "admin"},
    )
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Decide
# ---------------------------------------------------------------------------


async def test_approve_then_reject_is_not_pending(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    """Submit, approve, then a late reject finds nothing pending."""
    data = await _submit(async_client, staff["subordinate"])

    resp = await async_client.post(f"{REQUESTS_URL}/{data['id']}/approve", headers=_headers(staff["supervisor"]))
    assert resp.status_code == 200
    assert resp.json() == {"id": data["id"], "status": "approved"}

    resp = await async_client.post(f"{REQUESTS_URL}/{data['id']}/reject", headers=_headers(staff["supervisor"]))
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found_or_not_pending"


async def test_reject_pending_request(
    async_client: AsyncClient,
    db_session: AsyncSession,
    staff: dict[str, Account],
) -> None:
    data = await _submit(async_client, staff["subordinate"])
    resp = await async_client.post(f"{REQUESTS_URL}/{data['id']}/reject", headers=_headers(staff["supervisor"]))
    assert resp.status_code == 200
    assert resp.json()["status"] == "rejected"

    stored = await db_session.get(VacationRequest, uuid.UUID(data["id"]), populate_existing=True)
    assert stored is not None
    assert stored.status == "rejected"


async def test_approve_twice_second_fails(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    data = await _submit(async_client, staff["subordinate"])
    url = f"{REQUESTS_URL}/{data['id']}/approve"
    assert (await async_client.post(url, headers=_headers(staff["supervisor"]))).status_code == 200
    resp = await async_client.post(url, headers=_headers(staff["supervisor"]))
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found_or_not_pending"


async def test_approve_unknown_request(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    resp = await async_client.post(f"{REQUESTS_URL}/{uuid.uuid4()}/approve", headers=_headers(staff["supervisor"]))
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found_or_not_pending"


async def test_approve_requires_supervisor(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    data = await _submit(async_client, staff["subordinate"])
    resp = await async_client.post(f"{REQUESTS_URL}/{data['id']}/approve", headers=_headers(staff["subordinate"]))
    assert resp.status_code == 403


async def test_decision_writes_audit_entry(
    async_client: AsyncClient,
    db_session: AsyncSession,
    staff: dict[str, Account],
) -> None:
    data = await _submit(async_client, staff["subordinate"])
    await async_client.post(f"{REQUESTS_URL}/{data['id']}/approve", headers=_headers(staff["supervisor"]))

    result = await db_session.execute(
        select(AuditLog)
        .where(col(AuditLog.entity_id) == uuid.UUID(data["id"]))
        .order_by(col(AuditLog.created_at))
    )
    entries = list(result.scalars().all())
    assert [e.action for e in entries] == ["SUBMIT", "APPROVE"]
    assert entries[1].actor_id == staff["supervisor"].id
    assert entries[1].before_json == {"status": "pending"}
    assert entries[1].after_json == {"status": "approved"}


# ---------------------------------------------------------------------------
# Withdraw
# ---------------------------------------------------------------------------


async def test_withdraw_pending_request(
    async_client: AsyncClient,
    db_session: AsyncSession,
    staff: dict[str, Account],
) -> None:
    data = await _submit(async_client, staff["subordinate"])
    resp = await async_client.delete(f"{REQUESTS_URL}/{data['id']}", headers=_headers(staff["subordinate"]))
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}

    result = await db_session.execute(select(VacationRequest).where(col(VacationRequest.id) == uuid.UUID(data["id"])))
    assert result.scalar_one_or_none() is None


async def test_withdraw_twice_is_idempotent(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    data = await _submit(async_client, staff["subordinate"])
    url = f"{REQUESTS_URL}/{data['id']}"
    first = await async_client.delete(url, headers=_headers(staff["subordinate"]))
    second = await async_client.delete(url, headers=_headers(staff["subordinate"]))
    assert first.status_code == 200
    assert second.status_code == 200


async def test_withdraw_decided_request_keeps_it(
    async_client: AsyncClient,
    db_session: AsyncSession,
    staff: dict[str, Account],
) -> None:
    data = await _submit(async_client, staff["subordinate"])
    await async_client.post(f"{REQUESTS_URL}/{data['id']}/approve", headers=_headers(staff["supervisor"]))

    resp = await async_client.delete(f"{REQUESTS_URL}/{data['id']}", headers=_headers(staff["subordinate"]))
    assert resp.status_code == 200

    stored = await db_session.get(VacationRequest, uuid.UUID(data["id"]), populate_existing=True)
    assert stored is not None
    assert stored.status == "approved"


async def test_withdraw_other_subjects_request_has_no_effect(
    async_client: AsyncClient,
    db_session: AsyncSession,
    staff: dict[str, Account],
) -> None:
    data = await _submit(async_client, staff["subordinate"])
    resp = await async_client.delete(f"{REQUESTS_URL}/{data['id']}", headers=_headers(staff["colleague"]))
    assert resp.status_code == 200

    stored = await db_session.get(VacationRequest, uuid.UUID(data["id"]), populate_existing=True)
    assert stored is not None
    assert stored.status == "pending"


async def test_withdraw_requires_subordinate(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    data = await _submit(async_client, staff["subordinate"])
    resp = await async_client.delete(f"{REQUESTS_URL}/{data['id']}", headers=_headers(staff["supervisor"]))
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


async def test_list_mine_newest_first(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    first = await _submit(async_client, staff["subordinate"], date_from="2025-06-01", date_to="2025-06-02")
    second = await _submit(async_client, staff["subordinate"], date_from="2025-07-01", date_to="2025-07-02")
    await _submit(async_client, staff["colleague"])

    resp = await async_client.get(REQUESTS_URL, params={"mine": "true"}, headers=_headers(staff["subordinate"]))
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    assert [item["id"] for item in data["items"]] == [second["id"], first["id"]]


async def test_list_all_requires_supervisor(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    resp = await async_client.get(REQUESTS_URL, headers=_headers(staff["subordinate"]))
    assert resp.status_code == 403


async def test_list_all_includes_owner(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    await _submit(async_client, staff["subordinate"])
    await _submit(async_client, staff["colleague"])

    resp = await async_client.get(REQUESTS_URL, headers=_headers(staff["supervisor"]))
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    assert [item["owner_name"] for item in data["items"]] == ["Cora Colleague", "Ethan Employee"]
    assert data["items"][1]["owner_address"] == staff["subordinate"].contact_address


async def test_list_history_for_account(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    await _submit(async_client, staff["subordinate"])
    await _submit(async_client, staff["colleague"])

    resp = await async_client.get(
        f"/api/users/{staff['subordinate'].id}/requests",
        headers=_headers(staff["supervisor"]),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["user"]["display_name"] == "Ethan Employee"
    assert data["total"] == 1
    assert data["items"][0]["subject_id"] == str(staff["subordinate"].id)


async def test_list_history_unknown_account(async_client: AsyncClient, staff: dict[str, Account]) -> None:
    resp = await async_client.get(f"/api/users/{uuid.uuid4()}/requests", headers=_headers(staff["supervisor"]))
    assert resp.status_code == 404
    assert resp.json()["error"] == "user_not_found"


async def test_deleting_account_removes_its_requests(
    async_client: AsyncClient,
    db_session: AsyncSession,
    staff: dict[str, Account],
) -> None:
    await _submit(async_client, staff["subordinate"])
    resp = await async_client.delete(f"/api/users/{staff['subordinate'].id}", headers=_headers(staff["supervisor"]))
    assert resp.status_code == 200

    result = await db_session.execute(
        select(VacationRequest).where(col(VacationRequest.subject_id) == staff["subordinate"].id)
    )
    assert result.scalars().all() == []
