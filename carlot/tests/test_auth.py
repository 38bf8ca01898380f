import pytest

from carlot.auth.auth_handler import decode_jwt
from carlot.auth.passwords_handler import UNUSABLE_PASSWORD, hash_password_async, verify_password_async


@pytest.mark.asyncio
async def test_register_and_login(async_client):
    user = {
        "username": "newseller",
        "email": "newseller@example.com",
        "password": "strongpass"
    }

    resp = await async_client.post("/auth/register", json=user)
    assert resp.status_code == 201
    session = decode_jwt(resp.json()["data"]["access_token"])
    assert session["role"] == "seller"

    login = {"email": user["email"], "password": user["password"]}
    resp2 = await async_client.post("/auth/login", json=login)
    assert resp2.status_code == 200
    assert decode_jwt(resp2.json()["data"]["access_token"])["user_id"] == session["user_id"]


@pytest.mark.asyncio
async def test_register_duplicate_email(async_client):
    user = {"email": "dup@example.com", "password": "strongpass"}

    await async_client.post("/auth/register", json=user)
    resp = await async_client.post("/auth/register", json=user)

    assert resp.status_code == 409
    assert resp.json() == {"error": "Email already registered"}


@pytest.mark.asyncio
async def test_register_rejects_short_password(async_client):
    resp = await async_client.post("/auth/register", json={"email": "a@example.com", "password": "short"})

    assert resp.status_code == 422
    assert resp.json()["fields"][0]["field"] == "password"


@pytest.mark.asyncio
async def test_login_with_wrong_password(async_client):
    await async_client.post("/auth/register", json={"email": "b@example.com", "password": "strongpass"})

    resp = await async_client.post("/auth/login", json={"email": "b@example.com", "password": "wrongpass"})
    assert resp.status_code == 401

    resp = await async_client.post("/auth/login", json={"email": "nobody@example.com", "password": "wrongpass"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_health_and_metrics(async_client):
    assert (await async_client.get("/health")).json() == {"status": "ok"}

    resp = await async_client.get("/metrics/prometheus")
    assert resp.status_code == 200
    assert "carlot_service_calls_total" in resp.text


@pytest.mark.asyncio
async def test_login_to_account_without_password_is_rejected(async_client, seller):
    resp = await async_client.post("/auth/login", json={"email": seller["email"], "password": "anything1"})

    assert resp.status_code == 401
    assert resp.json() == {"error": "Invalid email or password"}


@pytest.mark.asyncio
async def test_password_hashes_round_trip_and_reject_malformed():
    hashed = await hash_password_async("strongpass")

    assert hashed.startswith("$2b$04$")
    assert await verify_password_async("strongpass", hashed) is True
    assert await verify_password_async("wrongpass", hashed) is False
    assert await verify_password_async("strongpass", UNUSABLE_PASSWORD) is False
    assert await verify_password_async("strongpass", "$2b$not-a-hash") is False
