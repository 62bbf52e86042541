"""User Routes: verifies accounts, balance adjustment, invites and leaderboard.

Invariants:
    - Balance never goes negative through either PUT /balance or PUT /{id}
    - Invite credits the inviter once; a duplicate e-mail is 409
    - Rank and leaderboard both use balance
"""

from uuid import uuid4

import pytest

from reward_tracker.core.domain_types import UserStatus


async def test_create_user(client):
    res = await client.post(
        "/api/v1/users", json={"username": " alice ", "email": "alice@example.com"},
    )
    assert res.status_code == 201
    body = res.json()
    assert body["username"] == "alice"
    assert body["balance"] == 0.0
    assert body["status"] == "active"


async def test_create_user_duplicate_email_is_409(client, seed_user):
    res = await client.post(
        "/api/v1/users", json={"username": "again", "email": "alice@example.com"},
    )
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "ALREADY_EXISTS"


async def test_create_user_malformed_email_is_400(client):
    res = await client.post("/api/v1/users", json={"username": "x", "email": "nope"})
    assert res.status_code == 400


async def test_get_user_by_email(client, seed_user):
    res = await client.get("/api/v1/users/email", params={"email": "alice@example.com"})
    assert res.status_code == 200
    assert res.json()["id"] == str(seed_user.id)


async def test_get_user_by_unknown_email_is_404(client):
    res = await client.get("/api/v1/users/email", params={"email": "ghost@example.com"})
    assert res.status_code == 404


async def test_list_users_filters_by_status(client, make_user):
    await make_user("a@example.com")
    await make_user("p@example.com", status=UserStatus.PENDING)
    res = await client.get("/api/v1/users", params={"status": "pending"})
    body = res.json()
    assert body["count"] == 1
    assert body["users"][0]["email"] == "p@example.com"


async def test_update_user_partial(client, seed_user):
    res = await client.put(
        f"/api/v1/users/{seed_user.id}", json={"bio": "hello", "time_zone": "UTC"},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["bio"] == "hello"
    assert body["username"] == "alice"


async def test_update_user_balance_goes_through_ledger(client, seed_user):
    res = await client.put(f"/api/v1/users/{seed_user.id}", json={"balance": 75})
    assert res.status_code == 200
    assert res.json()["balance"] == 75.0


async def test_update_user_negative_balance_is_rejected(client, seed_user):
    res = await client.put(f"/api/v1/users/{seed_user.id}", json={"balance": -1})
    assert res.status_code == 422
    res = await client.get(f"/api/v1/users/{seed_user.id}")
    assert res.json()["balance"] == 50.0


async def test_update_user_counters_are_not_writable(client, seed_user):
    res = await client.put(f"/api/v1/users/{seed_user.id}", json={"referrals": 99})
    assert res.status_code == 400


async def test_update_user_email_conflict_is_409(client, seed_user, make_user):
    await make_user("bob@example.com")
    res = await client.put(
        f"/api/v1/users/{seed_user.id}", json={"email": "bob@example.com"},
    )
    assert res.status_code == 409


@pytest.mark.parametrize("field", ["username", "email", "status"])
async def test_update_user_null_required_field_is_400(client, seed_user, field):
    res = await client.put(f"/api/v1/users/{seed_user.id}", json={field: None})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "BAD_REQUEST"
    res = await client.get(f"/api/v1/users/{seed_user.id}")
    body = res.json()
    assert body["username"] == "alice"
    assert body["email"] == "alice@example.com"
    assert body["status"] == "active"


async def test_update_user_null_optional_field_clears_it(client, seed_user):
    await client.put(f"/api/v1/users/{seed_user.id}", json={"bio": "hello"})
    res = await client.put(f"/api/v1/users/{seed_user.id}", json={"bio": None})
    assert res.status_code == 200
    assert res.json()["bio"] is None


async def test_update_user_email_is_stored_normalized(client, seed_user):
    res = await client.put(
        f"/api/v1/users/{seed_user.id}", json={"email": "Alice.New@EXAMPLE.com"},
    )
    assert res.status_code == 200
    assert res.json()["email"] == "Alice.New@example.com"


async def test_get_user_by_email_folds_domain_case(client, seed_user):
    res = await client.get("/api/v1/users/email", params={"email": "alice@EXAMPLE.COM"})
    assert res.status_code == 200
    assert res.json()["id"] == str(seed_user.id)


async def test_delete_user(client, seed_user):
    res = await client.delete(f"/api/v1/users/{seed_user.id}")
    assert res.status_code == 204
    res = await client.get(f"/api/v1/users/{seed_user.id}")
    assert res.status_code == 404


async def test_adjust_balance(client, seed_user):
    res = await client.put(f"/api/v1/users/{seed_user.id}/balance", json={"delta": 10})
    assert res.status_code == 200
    assert res.json() == {"user_id": str(seed_user.id), "balance": 60.0}


async def test_adjust_balance_overdraft_is_422(client, seed_user):
    res = await client.put(f"/api/v1/users/{seed_user.id}/balance", json={"delta": -51})
    assert res.status_code == 422
    assert "below zero" in res.json()["error"]["message"]


async def test_adjust_balance_unknown_user_is_404(client):
    res = await client.put(f"/api/v1/users/{uuid4()}/balance", json={"delta": 1})
    assert res.status_code == 404


async def test_invite_credits_inviter(client, seed_user):
    res = await client.post(
        "/api/v1/users/invite",
        json={"inviter_id": str(seed_user.id), "invitee_email": "new@example.com"},
    )
    assert res.status_code == 201

    res = await client.get(f"/api/v1/users/{seed_user.id}/summary")
    body = res.json()
    assert body["balance"] == 60.0
    assert body["referrals"] == 1

    res = await client.get("/api/v1/users/email", params={"email": "new@example.com"})
    assert res.json()["status"] == "pending"

    res = await client.get(f"/api/v1/users/{seed_user.id}/invites")
    assert [i["invitee_email"] for i in res.json()] == ["new@example.com"]


async def test_invite_existing_email_is_409(client, seed_user):
    res = await client.post(
        "/api/v1/users/invite",
        json={"inviter_id": str(seed_user.id), "invitee_email": "alice@example.com"},
    )
    assert res.status_code == 409
    res = await client.get(f"/api/v1/users/{seed_user.id}")
    assert res.json()["balance"] == 50.0


async def test_invite_malformed_email_is_400(client, seed_user):
    res = await client.post(
        "/api/v1/users/invite",
        json={"inviter_id": str(seed_user.id), "invitee_email": "bad-email"},
    )
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "invalid email format"


async def test_rank_uses_balance(client, make_user):
    low = await make_user("low@example.com", balance=1.0, tasks_completed=10)
    await make_user("high@example.com", balance=5.0)
    res = await client.get(f"/api/v1/users/{low.id}/rank")
    assert res.status_code == 200
    assert res.json() == {"user_id": str(low.id), "rank": 2, "metric": "balance"}


async def test_leader_and_top(client, make_user):
    await make_user("low@example.com", balance=1.0)
    await make_user("high@example.com", balance=5.0)

    res = await client.get("/api/v1/users/leader")
    assert res.json()["email"] == "high@example.com"
    assert res.json()["rank"] == 1

    res = await client.get("/api/v1/users/top", params={"limit": 10})
    body = res.json()
    assert body["count"] == 2
    assert [u["rank"] for u in body["users"]] == [1, 2]


async def test_leader_without_users_is_404(client):
    res = await client.get("/api/v1/users/leader")
    assert res.status_code == 404


async def test_top_with_zero_limit_is_422(client):
    res = await client.get("/api/v1/users/top", params={"limit": 0})
    assert res.status_code == 422
