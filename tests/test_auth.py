"""Tests for login, token refresh and the caller's own profile."""

import pytest
from httpx import AsyncClient

from ems.core.security import create_access_token, create_refresh_token

API = "/api"
PASSWORD = "secret123"


async def _login(client: AsyncClient, email: str, password: str = PASSWORD):
    return await client.post(f"{API}/auth/login", data={"username": email, "password": password})


@pytest.mark.asyncio
async def test_login_returns_token_pair(async_client: AsyncClient, employee):
    resp = await _login(async_client, "EMP@example.com")
    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["expires_in"] == 3600
    assert body["access_token"] and body["refresh_token"]
    assert "access_token" in resp.headers.get("set-cookie", "")


@pytest.mark.asyncio
async def test_login_wrong_password(async_client: AsyncClient, employee):
    resp = await _login(async_client, employee.email, "nope-nope")
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Invalid email or password"}


@pytest.mark.asyncio
async def test_login_unknown_email(async_client: AsyncClient):
    resp = await _login(async_client, "ghost@example.com")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_inactive_account_cannot_login(async_client: AsyncClient, department, create_user):
    await create_user(department.id, "gone@example.com", status="Inactive")
    resp = await _login(async_client, "gone@example.com")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Account is inactive"


@pytest.mark.asyncio
async def test_inactive_account_token_rejected(async_client: AsyncClient, department, create_user, headers_for):
    user = await create_user(department.id, "gone@example.com", status="Inactive")
    resp = await async_client.get(f"{API}/auth/me", headers=headers_for(user))
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_me_requires_token(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/auth/me")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Not authorized, no token"


@pytest.mark.asyncio
async def test_me_rejects_garbage_token(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Not authorized, token failed"


@pytest.mark.asyncio
async def test_refresh_token_is_not_an_access_token(async_client: AsyncClient, employee):
    token = create_refresh_token(employee.id)
    resp = await async_client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_me_accepts_cookie(async_client: AsyncClient, employee):
    async_client.cookies.set("access_token", create_access_token(employee.id))
    resp = await async_client.get(f"{API}/auth/me")
    assert resp.status_code == 200
    assert resp.json()["data"]["email"] == employee.email


@pytest.mark.asyncio
async def test_refresh_issues_new_pair(async_client: AsyncClient, employee):
    resp = await async_client.post(
        f"{API}/auth/refresh", json={"refresh_token": create_refresh_token(employee.id)}
    )
    assert resp.status_code == 200
    assert resp.json()["access_token"]


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(async_client: AsyncClient, employee):
    resp = await async_client.post(
        f"{API}/auth/refresh", json={"refresh_token": create_access_token(employee.id)}
    )
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid or expired refresh token"


@pytest.mark.asyncio
async def test_logout(async_client: AsyncClient):
    resp = await async_client.post(f"{API}/auth/logout")
    assert resp.status_code == 200
    assert resp.json()["success"] is True


@pytest.mark.asyncio
async def test_update_own_profile(async_client: AsyncClient, employee, employee_headers):
    resp = await async_client.put(
        f"{API}/auth/me", json={"city": "Lahore", "phone": "+92 300 1234567"}, headers=employee_headers
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["city"] == "Lahore"
    # Role and salary are not part of the self-service profile
    assert data["role"] == "Employee"


@pytest.mark.asyncio
async def test_change_password(async_client: AsyncClient, employee, employee_headers):
    resp = await async_client.put(
        f"{API}/auth/me/password",
        json={"current_password": "wrong-one", "new_password": "another1"},
        headers=employee_headers,
    )
    assert resp.status_code == 400

    resp = await async_client.put(
        f"{API}/auth/me/password",
        json={"current_password": PASSWORD, "new_password": "another1"},
        headers=employee_headers,
    )
    assert resp.status_code == 200
    assert (await _login(async_client, employee.email, "another1")).status_code == 200
    assert (await _login(async_client, employee.email, PASSWORD)).status_code == 401


@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/health")
    assert resp.status_code == 200
    assert resp.json() == {"db": True}


@pytest.mark.asyncio
async def test_unknown_route_uses_envelope(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/nope")
    assert resp.status_code == 404
    assert resp.json()["success"] is False
