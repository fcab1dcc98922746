"""Tests for department CRUD endpoints."""

import pytest
from httpx import AsyncClient

API = "/api"


@pytest.mark.asyncio
async def test_create_department(async_client: AsyncClient, admin_headers):
    resp = await async_client.post(
        f"{API}/departments", json={"name": "Legal", "description": "Contracts"}, headers=admin_headers
    )
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["name"] == "Legal"
    assert data["employee_count"] == 0
    assert data["manager"] is None
    assert data["status"] == "Active"


@pytest.mark.asyncio
async def test_duplicate_name_rejected(async_client: AsyncClient, admin_headers, department):
    resp = await async_client.post(
        f"{API}/departments",
        json={"name": department.name.upper(), "description": "again"},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert "already exists" in resp.json()["message"]


@pytest.mark.asyncio
async def test_employee_can_read_but_not_write(async_client: AsyncClient, employee_headers, department):
    resp = await async_client.get(f"{API}/departments", headers=employee_headers)
    assert resp.status_code == 200
    assert [d["name"] for d in resp.json()["data"]] == [department.name]

    resp = await async_client.post(
        f"{API}/departments", json={"name": "Legal", "description": "x"}, headers=employee_headers
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_list_sorted_by_name(async_client: AsyncClient, admin_headers, create_department):
    for name in ("Sales", "Finance"):
        await create_department(name)
    resp = await async_client.get(f"{API}/departments", headers=admin_headers)
    # "Engineering" comes from the admin fixture
    assert [d["name"] for d in resp.json()["data"]] == ["Engineering", "Finance", "Sales"]


@pytest.mark.asyncio
async def test_update_department(async_client: AsyncClient, admin_headers, create_department):
    dept = await create_department("Ops")
    resp = await async_client.put(
        f"{API}/departments/{dept.id}",
        json={"description": "Operations", "employee_count": 99},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["description"] == "Operations"
    assert data["employee_count"] == 0


@pytest.mark.asyncio
async def test_rename_to_taken_name(async_client: AsyncClient, admin_headers, department, create_department):
    dept = await create_department("Ops")
    resp = await async_client.put(
        f"{API}/departments/{dept.id}", json={"name": department.name}, headers=admin_headers
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_delete_department(async_client: AsyncClient, admin_headers, create_department):
    dept = await create_department("Temp")
    resp = await async_client.delete(f"{API}/departments/{dept.id}", headers=admin_headers)
    assert resp.status_code == 200
    resp = await async_client.get(f"{API}/departments/{dept.id}", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["message"] == "Department not found"


@pytest.mark.asyncio
async def test_delete_department_with_employees_blocked(async_client: AsyncClient, admin_headers, department):
    resp = await async_client.delete(f"{API}/departments/{department.id}", headers=admin_headers)
    assert resp.status_code == 400
    assert "employee" in resp.json()["message"]
