"""Tests for leave applications and their review workflow."""

import pytest
from httpx import AsyncClient

API = "/api"


async def _apply(client: AsyncClient, headers, **overrides):
    body = {
        "leave_type": "Annual Leave",
        "from_date": "2025-01-01",
        "to_date": "2025-01-03",
        "reason": "Family trip",
    }
    body.update(overrides)
    return await client.post(f"{API}/leaves", json=body, headers=headers)


@pytest.mark.asyncio
async def test_apply_leave(async_client: AsyncClient, employee, employee_headers):
    resp = await _apply(async_client, employee_headers)
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["total_days"] == 3
    assert data["status"] == "Pending"
    assert data["user_id"] == employee.id
    assert data["approved_by_id"] is None


@pytest.mark.asyncio
async def test_apply_leave_reversed_dates(async_client: AsyncClient, employee_headers):
    resp = await _apply(async_client, employee_headers, from_date="2025-01-05", to_date="2025-01-01")
    assert resp.status_code == 400
    assert resp.json()["message"] == "From date cannot be later than to date"


@pytest.mark.asyncio
async def test_apply_leave_unknown_type(async_client: AsyncClient, employee_headers):
    resp = await _apply(async_client, employee_headers, leave_type="Gardening Leave")
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_list_scoped_to_owner(async_client: AsyncClient, employee_headers, admin_headers):
    await _apply(async_client, employee_headers)
    await _apply(async_client, admin_headers, leave_type="Sick Leave")

    resp = await async_client.get(f"{API}/leaves", headers=employee_headers)
    assert [leave["leave_type"] for leave in resp.json()["data"]] == ["Annual Leave"]

    resp = await async_client.get(f"{API}/leaves", headers=admin_headers)
    assert resp.json()["pagination"]["total"] == 2

    resp = await async_client.get(f"{API}/leaves?status=Approved", headers=admin_headers)
    assert resp.json()["data"] == []


@pytest.mark.asyncio
async def test_approve_leave(async_client: AsyncClient, employee_headers, admin, admin_headers):
    leave_id = (await _apply(async_client, employee_headers)).json()["data"]["id"]

    resp = await async_client.patch(
        f"{API}/leaves/{leave_id}/status", json={"status": "Approved"}, headers=admin_headers
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["status"] == "Approved"
    assert data["approved_by_id"] == admin.id
    assert data["approved_date"] is not None

    # Terminal
    resp = await async_client.patch(
        f"{API}/leaves/{leave_id}/status",
        json={"status": "Rejected", "rejection_reason": "changed mind"},
        headers=admin_headers,
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_reject_requires_reason(async_client: AsyncClient, employee_headers, admin_headers):
    leave_id = (await _apply(async_client, employee_headers)).json()["data"]["id"]

    resp = await async_client.patch(
        f"{API}/leaves/{leave_id}/status", json={"status": "Rejected"}, headers=admin_headers
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Rejection reason is required"

    resp = await async_client.patch(
        f"{API}/leaves/{leave_id}/status",
        json={"status": "Rejected", "rejection_reason": "Peak season"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["rejection_reason"] == "Peak season"


@pytest.mark.asyncio
async def test_employee_cannot_review(async_client: AsyncClient, employee_headers):
    leave_id = (await _apply(async_client, employee_headers)).json()["data"]["id"]
    resp = await async_client.patch(
        f"{API}/leaves/{leave_id}/status", json={"status": "Approved"}, headers=employee_headers
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_employee_deletes_own_pending_only(
    async_client: AsyncClient, employee_headers, admin_headers
):
    own = (await _apply(async_client, employee_headers)).json()["data"]["id"]
    reviewed = (await _apply(async_client, employee_headers)).json()["data"]["id"]
    foreign = (await _apply(async_client, admin_headers)).json()["data"]["id"]
    await async_client.patch(
        f"{API}/leaves/{reviewed}/status", json={"status": "Approved"}, headers=admin_headers
    )

    resp = await async_client.delete(f"{API}/leaves/{foreign}", headers=employee_headers)
    assert resp.status_code == 403

    resp = await async_client.delete(f"{API}/leaves/{reviewed}", headers=employee_headers)
    assert resp.status_code == 400

    resp = await async_client.delete(f"{API}/leaves/{own}", headers=employee_headers)
    assert resp.status_code == 200

    # Admins may remove any request
    resp = await async_client.delete(f"{API}/leaves/{reviewed}", headers=admin_headers)
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_review_missing_leave(async_client: AsyncClient, admin_headers):
    resp = await async_client.patch(
        f"{API}/leaves/999/status", json={"status": "Approved"}, headers=admin_headers
    )
    assert resp.status_code == 404
