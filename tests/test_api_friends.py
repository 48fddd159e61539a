import pytest


async def _send(client, auth_headers, sender, recipient):
    return await client.post(
        "/api/user/friend/request",
        json={"recipient_id": recipient.id},
        headers=auth_headers(sender.id),
    )


@pytest.mark.asyncio
async def test_request_accept_unfriend(client, auth_headers, relay, make_user):
    alice, bob = await make_user("Alice"), await make_user("Bob")

    sent = await _send(client, auth_headers, alice, bob)
    assert sent.status_code == 201
    request_id = sent.json()["id"]
    assert sent.json()["status"] == "pending"

    inbox = await client.get("/api/user/friend/requests/received", headers=auth_headers(bob.id))
    assert [r["id"] for r in inbox.json()] == [request_id]
    assert inbox.json()[0]["sender"]["name"] == "Alice"

    outbox = await client.get("/api/user/friend/requests/sent", headers=auth_headers(alice.id))
    assert outbox.json()[0]["recipient"]["id"] == bob.id

    accepted = await client.post(
        f"/api/user/friend/request/{request_id}/accept", headers=auth_headers(bob.id)
    )
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "accepted"
    assert accepted.json()["responded_at"] is not None

    friends_of_alice = await client.get("/api/user/friends", headers=auth_headers(alice.id))
    friends_of_bob = await client.get("/api/user/friends", headers=auth_headers(bob.id))
    assert [u["id"] for u in friends_of_alice.json()] == [bob.id]
    assert [u["id"] for u in friends_of_bob.json()] == [alice.id]

    removed = await client.delete(f"/api/user/friends/{bob.id}", headers=auth_headers(alice.id))
    assert removed.status_code == 204
    again = await client.delete(f"/api/user/friends/{bob.id}", headers=auth_headers(alice.id))
    assert again.status_code == 404
    assert again.json()["error"]["code"] == "NOT_FRIENDS"

    history = await client.get(f"/api/user/friend/request/{request_id}", headers=auth_headers(alice.id))
    assert history.json()["status"] == "accepted"

    await relay.drain()
    notes = await client.get("/api/user/notifications", headers=auth_headers(alice.id))
    assert notes.json()["unread_count"] == 1
    assert notes.json()["notifications"][0]["type"] == "friend_request_accepted"


@pytest.mark.asyncio
async def test_respond_with_decision(client, auth_headers, make_user):
    alice, bob = await make_user("Alice"), await make_user("Bob")
    request_id = (await _send(client, auth_headers, alice, bob)).json()["id"]

    rejected = await client.post(
        f"/api/user/friend/request/{request_id}/respond",
        json={"decision": "reject"},
        headers=auth_headers(bob.id),
    )
    resolved_again = await client.post(
        f"/api/user/friend/request/{request_id}/respond",
        json={"decision": "accept"},
        headers=auth_headers(bob.id),
    )

    assert rejected.status_code == 200
    assert rejected.json()["status"] == "rejected"
    assert resolved_again.status_code == 409
    assert resolved_again.json()["error"]["code"] == "ALREADY_RESOLVED"
    friends = await client.get("/api/user/friends", headers=auth_headers(alice.id))
    assert friends.json() == []


@pytest.mark.asyncio
async def test_unknown_decision_is_rejected(client, auth_headers, make_user):
    alice, bob = await make_user("Alice"), await make_user("Bob")
    request_id = (await _send(client, auth_headers, alice, bob)).json()["id"]

    response = await client.post(
        f"/api/user/friend/request/{request_id}/respond",
        json={"decision": "maybe"},
        headers=auth_headers(bob.id),
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_send_errors(client, auth_headers, make_user):
    alice, bob = await make_user("Alice"), await make_user("Bob")

    self_request = await _send(client, auth_headers, alice, alice)
    unknown = await client.post(
        "/api/user/friend/request",
        json={"recipient_id": "missing"},
        headers=auth_headers(alice.id),
    )
    first = await _send(client, auth_headers, alice, bob)
    duplicate = await _send(client, auth_headers, alice, bob)
    reverse = await _send(client, auth_headers, bob, alice)

    assert self_request.status_code == 400
    assert self_request.json()["error"]["code"] == "INVALID_TARGET"
    assert unknown.status_code == 404
    assert unknown.json()["error"]["code"] == "USER_NOT_FOUND"
    assert first.status_code == 201
    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["code"] == "DUPLICATE_PENDING"
    assert reverse.status_code == 409
    assert reverse.json()["error"]["details"]["request_id"] == first.json()["id"]


@pytest.mark.asyncio
async def test_already_friends(client, auth_headers, make_user):
    alice, bob = await make_user("Alice"), await make_user("Bob")
    request_id = (await _send(client, auth_headers, alice, bob)).json()["id"]
    await client.post(f"/api/user/friend/request/{request_id}/accept", headers=auth_headers(bob.id))

    response = await _send(client, auth_headers, bob, alice)

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "ALREADY_FRIENDS"


@pytest.mark.asyncio
async def test_only_recipient_can_respond(client, auth_headers, make_user):
    alice, bob, carol = await make_user("Alice"), await make_user("Bob"), await make_user("Carol")
    request_id = (await _send(client, auth_headers, alice, bob)).json()["id"]

    by_sender = await client.post(
        f"/api/user/friend/request/{request_id}/accept", headers=auth_headers(alice.id)
    )
    by_stranger = await client.post(
        f"/api/user/friend/request/{request_id}/reject", headers=auth_headers(carol.id)
    )
    missing = await client.post("/api/user/friend/request/missing/accept", headers=auth_headers(bob.id))
    peek = await client.get(f"/api/user/friend/request/{request_id}", headers=auth_headers(carol.id))

    assert by_sender.status_code == 403
    assert by_sender.json()["error"]["code"] == "NOT_AUTHORIZED"
    assert by_stranger.status_code == 403
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "NOT_FOUND"
    assert peek.status_code == 404


@pytest.mark.asyncio
async def test_friend_profile_shows_interests(client, auth_headers, make_user):
    alice, bob = await make_user("Alice"), await make_user("Bob", bio="music lover")
    await client.put(
        "/api/user/interests/Music",
        json={"items": [{"name": "Jazz", "rating": 5}, {"name": "Blues", "rating": 4}]},
        headers=auth_headers(bob.id),
    )

    before = await client.get(f"/api/user/friends/{bob.id}/profile", headers=auth_headers(alice.id))
    assert before.status_code == 404

    request_id = (await _send(client, auth_headers, alice, bob)).json()["id"]
    await client.post(f"/api/user/friend/request/{request_id}/accept", headers=auth_headers(bob.id))

    profile = await client.get(f"/api/user/friends/{bob.id}/profile", headers=auth_headers(alice.id))
    assert profile.status_code == 200
    body = profile.json()
    assert body["bio"] == "music lover"
    assert body["interests"] == [
        {"category": "Music", "items": [{"name": "Jazz", "rating": 5}, {"name": "Blues", "rating": 4}]}
    ]
    assert "email" not in body


@pytest.mark.asyncio
async def test_interest_rating_bounds_over_http(client, auth_headers, make_user):
    alice = await make_user("Alice")

    too_high = await client.put(
        "/api/user/interests/Music",
        json={"items": [{"name": "Jazz", "rating": 6}]},
        headers=auth_headers(alice.id),
    )
    ok = await client.put(
        "/api/user/interests/Music",
        json={"items": [{"name": "Jazz", "rating": 1}]},
        headers=auth_headers(alice.id),
    )
    listed = await client.get("/api/user/interests", headers=auth_headers(alice.id))
    deleted = await client.delete("/api/user/interests/Music", headers=auth_headers(alice.id))

    assert too_high.status_code == 422
    assert ok.status_code == 200
    assert [i["category"] for i in listed.json()] == ["Music"]
    assert deleted.status_code == 204


@pytest.mark.asyncio
async def test_notification_inbox(client, auth_headers, relay, make_user):
    alice, bob = await make_user("Alice"), await make_user("Bob")
    await _send(client, auth_headers, alice, bob)
    await relay.drain()

    inbox = await client.get("/api/user/notifications", headers=auth_headers(bob.id))
    notification = inbox.json()["notifications"][0]
    assert notification["type"] == "friend_request_received"
    assert notification["actor_id"] == alice.id

    read = await client.post(
        f"/api/user/notifications/{notification['id']}/read", headers=auth_headers(bob.id)
    )
    assert read.json()["is_read"] is True

    read_all = await client.post("/api/user/notifications/read-all", headers=auth_headers(bob.id))
    assert read_all.json() == {"updated": 0}
