import asyncio
from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlmodel import select

from identity_service.api.utils.jwt import TokenCodec, hash_refresh_token
from identity_service.domain.entities import Session


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_me_with_valid_token(client: AsyncClient, register_user):
    data = await register_user()

    response = await client.get("/auth/me", headers=bearer(data["access_token"]))

    assert response.status_code == 200
    assert response.json() == {
        "user_id": 42,
        "user_type": "voter",
        "admin_role": "analyst",
        "token_rotated": False,
    }
    assert "x-access-token" not in response.headers


@pytest.mark.asyncio
async def test_me_without_token(client: AsyncClient):
    response = await client.get("/auth/me")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "NO_ACCESS_TOKEN"


@pytest.mark.asyncio
async def test_me_with_garbage_token(client: AsyncClient):
    response = await client.get("/auth/me", headers=bearer("invalid_token_here"))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "ACCESS_TOKEN_INVALID"


@pytest.mark.asyncio
async def test_me_with_token_from_other_secret(client: AsyncClient, register_user):
    await register_user()
    forged = TokenCodec("some-other-secret", 60, 120).issue_access_token(42, "voter", "manager")

    response = await client.get("/auth/me", headers=bearer(forged))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "ACCESS_TOKEN_INVALID"


@pytest.mark.asyncio
async def test_me_with_valid_token_but_no_session(client: AsyncClient, codec, register_user):
    """Correctly signed token that was never stored"""
    await register_user()
    token = codec.issue_access_token(42, "voter", "analyst")

    response = await client.get("/auth/me", headers=bearer(token))

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "SESSION_INVALID"


@pytest.mark.asyncio
async def test_expired_token_without_refresh(client: AsyncClient, seed_session):
    access_token, _ = await seed_session(42, issued_seconds_ago=61, device_id="device-42")

    response = await client.get("/auth/me", headers=bearer(access_token))

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_EXPIRED_NO_REFRESH"


@pytest.mark.asyncio
async def test_expired_token_with_refresh_but_no_device(client: AsyncClient, seed_session):
    access_token, refresh_token = await seed_session(
        42, issued_seconds_ago=61, device_id="device-42"
    )

    response = await client.get(
        "/auth/me",
        headers={**bearer(access_token), "x-refresh-token": refresh_token},
    )

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_EXPIRED_NO_REFRESH"


@pytest.mark.asyncio
async def test_expired_token_is_rotated(client: AsyncClient, codec, seed_session, db_session):
    """At t=61s with a 1m access lifetime the gate rotates transparently"""
    access_token, refresh_token = await seed_session(
        42, admin_role="analyst", issued_seconds_ago=61, device_id="device-42"
    )

    response = await client.get(
        "/auth/me",
        headers={
            **bearer(access_token),
            "x-refresh-token": refresh_token,
            "x-device-id": "device-42",
        },
    )

    assert response.status_code == 200
    assert response.json()["token_rotated"] is True
    new_access = response.headers["x-access-token"]
    new_refresh = response.headers["x-refresh-token"]
    assert new_access != access_token
    assert new_refresh != refresh_token

    claims = codec.verify_access_token(new_access).value
    assert claims.user_id == 42
    assert claims.admin_role == "analyst"

    db_session.expire_all()
    session = (await db_session.exec(select(Session).where(Session.user_id == 42))).one()
    assert session.access_token == new_access
    assert session.refresh_token_hash == hash_refresh_token(new_refresh)
    assert session.jwt_token_id == codec.read_token_id(new_access)
    assert (session.expires_at - session.last_activity) <= timedelta(seconds=60)

    # the rotated pair works without further refresh
    follow_up = await client.get("/auth/me", headers=bearer(new_access))
    assert follow_up.status_code == 200
    assert follow_up.json()["token_rotated"] is False


@pytest.mark.asyncio
async def test_refresh_token_and_device_from_body(client: AsyncClient, seed_session):
    access_token, refresh_token = await seed_session(
        42, issued_seconds_ago=61, device_id="device-42"
    )

    response = await client.post(
        "/auth/logout",
        headers=bearer(access_token),
        json={"refreshToken": refresh_token, "device_id": "device-42"},
    )

    assert response.status_code == 200
    assert "x-access-token" in response.headers


@pytest.mark.asyncio
async def test_refresh_token_is_single_use(client: AsyncClient, seed_session):
    access_token, refresh_token = await seed_session(
        42, issued_seconds_ago=61, device_id="device-42"
    )
    headers = {
        **bearer(access_token),
        "x-refresh-token": refresh_token,
        "x-device-id": "device-42",
    }

    first = await client.get("/auth/me", headers=headers)
    second = await client.get("/auth/me", headers=headers)

    assert first.status_code == 200
    assert second.status_code == 401
    assert second.json()["error"]["code"] == "REFRESH_TOKEN_INVALID"


@pytest.mark.asyncio
async def test_concurrent_refresh_rotates_once(concurrent_client: AsyncClient, seed_session):
    """Parallel requests presenting the same refresh token: exactly one wins"""
    access_token, refresh_token = await seed_session(
        42, issued_seconds_ago=61, device_id="device-42"
    )
    headers = {
        **bearer(access_token),
        "x-refresh-token": refresh_token,
        "x-device-id": "device-42",
    }

    responses = await asyncio.gather(
        *(concurrent_client.get("/auth/me", headers=headers) for _ in range(8))
    )

    statuses = sorted(response.status_code for response in responses)
    assert statuses == [200] + [401] * 7
    for response in responses:
        if response.status_code == 401:
            assert response.json()["error"]["code"] == "REFRESH_TOKEN_INVALID"

    winner = next(response for response in responses if response.status_code == 200)
    follow_up = await concurrent_client.get(
        "/auth/me", headers=bearer(winner.headers["x-access-token"])
    )
    assert follow_up.status_code == 200


@pytest.mark.asyncio
async def test_refresh_from_other_device_is_rejected(client: AsyncClient, seed_session):
    access_token, refresh_token = await seed_session(
        42, issued_seconds_ago=61, device_id="device-42"
    )

    response = await client.get(
        "/auth/me",
        headers={
            **bearer(access_token),
            "x-refresh-token": refresh_token,
            "x-device-id": "stolen-laptop",
        },
    )

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "REFRESH_TOKEN_INVALID"


@pytest.mark.asyncio
async def test_refresh_after_refresh_window_is_rejected(client: AsyncClient, seed_session):
    access_token, refresh_token = await seed_session(
        42, issued_seconds_ago=121, device_id="device-42"
    )

    response = await client.get(
        "/auth/me",
        headers={
            **bearer(access_token),
            "x-refresh-token": refresh_token,
            "x-device-id": "device-42",
        },
    )

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "REFRESH_TOKEN_INVALID"


@pytest.mark.asyncio
async def test_logout_invalidates_session(client: AsyncClient, register_user):
    data = await register_user()

    logout = await client.post("/auth/logout", headers=bearer(data["access_token"]))
    me = await client.get("/auth/me", headers=bearer(data["access_token"]))

    assert logout.status_code == 200
    assert logout.json() == {"message": "Logged out successfully"}
    assert me.status_code == 401
    assert me.json()["error"]["code"] == "SESSION_INVALID"


@pytest.mark.asyncio
async def test_logout_stops_refresh(client: AsyncClient, codec, register_user):
    """A logged out session cannot be revived with its refresh token"""
    data = await register_user()
    await client.post("/auth/logout", headers=bearer(data["access_token"]))
    expired = codec.issue_access_token(
        42, "voter", "analyst", issued_at=datetime.now(UTC) - timedelta(seconds=61)
    )

    response = await client.get(
        "/auth/me",
        headers={
            **bearer(expired),
            "x-refresh-token": data["refresh_token"],
            "x-device-id": "device-42",
        },
    )

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "REFRESH_TOKEN_INVALID"


@pytest.mark.asyncio
async def test_last_activity_is_touched(client: AsyncClient, register_user, db_session):
    data = await register_user()
    db_session.expire_all()
    before = (await db_session.exec(select(Session))).one().last_activity

    await client.get("/auth/me", headers=bearer(data["access_token"]))

    db_session.expire_all()
    after = (await db_session.exec(select(Session))).one().last_activity
    assert after >= before
