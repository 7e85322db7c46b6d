"""
Authentication flow tests: login, profile, logout and token revocation.
"""

import pytest
from sqlalchemy import select

from fuelwale.app.core.jwt import decode_access_token
from fuelwale.app.models.audit_log import AuditLog
from fuelwale.app.models.enums import UserRole


@pytest.mark.asyncio
async def test_login_returns_session_profile(client, world, password):
    resp = await client.post("/v1/auth/login", json={"username": "driver1", "password": password})
    assert resp.status_code == 200
    data = resp.json()
    assert data["tokenType"] == "bearer"
    assert data["id"] == world.driver_user.id
    assert data["userId"] == "driver1"
    assert data["userType"] == UserRole.DRIVER.value

    payload = decode_access_token(data["accessToken"])
    assert payload["sub"] == "driver1"
    assert payload["role"] == "d"


@pytest.mark.asyncio
async def test_login_by_email(client, world, password):
    resp = await client.post("/v1/auth/login", json={"username": "exec@example.com", "password": password})
    assert resp.status_code == 200
    assert resp.json()["userType"] == "e"


@pytest.mark.asyncio
async def test_wrong_password_is_rejected_and_audited(client, db_session, world):
    resp = await client.post("/v1/auth/login", json={"username": "driver1", "password": "nope"})
    assert resp.status_code == 401

    entry = (await db_session.execute(
        select(AuditLog).where(AuditLog.action == "LOGIN_FAILED")
    )).scalar_one()
    assert entry.meta_data == {"reason": "Invalid password"}


@pytest.mark.asyncio
async def test_unknown_user_is_rejected(client, world):
    resp = await client.post("/v1/auth/login", json={"username": "ghost", "password": "whatever"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_inactive_user_cannot_login(client, db_session, world, password):
    world.other_driver_user.is_active = False
    db_session.add(world.other_driver_user)
    await db_session.commit()

    resp = await client.post("/v1/auth/login", json={"username": "driver2", "password": password})
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_me_and_logout_revokes_token(client, world, mock_redis, password):
    resp = await client.post("/v1/auth/login", json={"username": "exec", "password": password})
    auth = {"Authorization": f"Bearer {resp.json()['accessToken']}"}

    resp = await client.get("/v1/auth/me", headers=auth)
    assert resp.status_code == 200
    assert resp.json()["username"] == "exec"

    resp = await client.post("/v1/auth/logout", headers=auth)
    assert resp.status_code == 200
    assert resp.json()["revoked"] is True
    assert any(k.startswith("blacklist:token:") for k in mock_redis.store)

    resp = await client.get("/v1/auth/me", headers=auth)
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_garbage_token_is_rejected(client, world):
    resp = await client.get("/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.json()["error_code"] == "ERR_UNAUTHORIZED"


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["redis"] is True
