import pytest

from socialnet.api.user.login import FORGOT_PASSWORD_MESSAGE

SIGNUP = {
    "name": "Alice",
    "username": "alice",
    "email": "Alice@Example.com",
    "password": "password123",
}


async def _signup(client, **overrides):
    response = await client.post("/api/signup", json={**SIGNUP, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


def _bearer(tokens):
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_signup_then_profile(client):
    tokens = await _signup(client)

    assert tokens["token_type"] == "bearer"
    response = await client.get("/api/user/profile", headers=_bearer(tokens))
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == tokens["user_id"]
    assert body["email"] == "alice@example.com"
    assert body["username"] == "alice"


@pytest.mark.asyncio
async def test_signup_duplicate_email(client):
    await _signup(client)

    response = await client.post("/api/signup", json={**SIGNUP, "username": "alice2"})

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


@pytest.mark.asyncio
async def test_signup_rejects_short_password(client):
    response = await client.post("/api/signup", json={**SIGNUP, "password": "short"})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_login(client):
    await _signup(client)

    ok = await client.post("/api/login", json={"email": "alice@example.com", "password": "password123"})
    bad = await client.post("/api/login", json={"email": "alice@example.com", "password": "wrong-password"})
    unknown = await client.post("/api/login", json={"email": "nobody@example.com", "password": "password123"})

    assert ok.status_code == 200
    assert bad.status_code == 401
    assert unknown.status_code == 401
    assert bad.json()["error"]["code"] == "AUTHENTICATION_FAILED"


@pytest.mark.asyncio
async def test_refresh_rotates_token(client):
    tokens = await _signup(client)

    first = await client.post("/api/token/refresh", json={"refresh_token": tokens["refresh_token"]})
    replay = await client.post("/api/token/refresh", json={"refresh_token": tokens["refresh_token"]})

    assert first.status_code == 200
    assert first.json()["refresh_token"] != tokens["refresh_token"]
    assert replay.status_code == 401


@pytest.mark.asyncio
async def test_access_token_is_not_a_refresh_token(client):
    tokens = await _signup(client)

    response = await client.post("/api/token/refresh", json={"refresh_token": tokens["access_token"]})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_protected_route_requires_token(client):
    missing = await client.get("/api/user/profile")
    garbage = await client.get("/api/user/profile", headers={"Authorization": "Bearer not-a-jwt"})

    assert missing.status_code in (401, 403)
    assert garbage.status_code == 401


@pytest.mark.asyncio
async def test_update_profile(client):
    tokens = await _signup(client)
    await _signup(client, username="bobby", email="bob@example.com", name="Bob")

    updated = await client.patch("/api/user/profile", json={"bio": "hi there"}, headers=_bearer(tokens))
    taken = await client.patch("/api/user/profile", json={"username": "bobby"}, headers=_bearer(tokens))
    empty = await client.patch("/api/user/profile", json={}, headers=_bearer(tokens))

    assert updated.status_code == 200
    assert updated.json()["bio"] == "hi there"
    assert taken.status_code == 409
    assert empty.status_code == 422


@pytest.mark.asyncio
async def test_search_excludes_self(client):
    tokens = await _signup(client)
    await _signup(client, username="alicia", email="alicia@example.com", name="Alicia")

    response = await client.get("/api/user/search", params={"q": "ALI"}, headers=_bearer(tokens))

    assert response.status_code == 200
    assert [u["username"] for u in response.json()] == ["alicia"]


@pytest.mark.asyncio
async def test_password_reset_flow(client, monkeypatch):
    tokens = await _signup(client)
    sent = []

    async def capture(user, token):
        sent.append(token)

    monkeypatch.setattr("socialnet.api.user.login.send_password_reset", capture)

    forgot = await client.post("/api/password/forgot", json={"email": "alice@example.com"})
    assert forgot.status_code == 200
    assert forgot.json()["message"] == FORGOT_PASSWORD_MESSAGE
    assert len(sent) == 1

    reset = await client.post("/api/password/reset", json={"token": sent[0], "new_password": "new-password-1"})
    reused = await client.post("/api/password/reset", json={"token": sent[0], "new_password": "another-pass-2"})
    old_login = await client.post("/api/login", json={"email": "alice@example.com", "password": "password123"})
    new_login = await client.post("/api/login", json={"email": "alice@example.com", "password": "new-password-1"})
    stale_refresh = await client.post("/api/token/refresh", json={"refresh_token": tokens["refresh_token"]})

    assert reset.status_code == 200
    assert reused.status_code == 422
    assert old_login.status_code == 401
    assert new_login.status_code == 200
    assert stale_refresh.status_code == 401


@pytest.mark.asyncio
async def test_forgot_password_hides_unknown_email(client, monkeypatch):
    sent = []

    async def capture(user, token):
        sent.append(token)

    monkeypatch.setattr("socialnet.api.user.login.send_password_reset", capture)

    response = await client.post("/api/password/forgot", json={"email": "nobody@example.com"})

    assert response.status_code == 200
    assert response.json()["message"] == FORGOT_PASSWORD_MESSAGE
    assert sent == []
