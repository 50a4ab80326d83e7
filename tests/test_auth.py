from datetime import timedelta

import pytest

from sqlalchemy import func, select

from finance_api.core.security import create_access_token
from finance_api.crud.category import DEFAULT_CATEGORIES
from finance_api.models.category import Category
from finance_api.models.transaction import Transaction


async def test_register_returns_public_user_and_token(client):
    resp = await client.post(
        "/api/auth/register",
        json={"name": "Alice", "email": "Alice@Example.com", "password": "secret123"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "User created successfully"
    assert body["token"]
    assert set(body["user"]) == {"id", "name", "email", "createdAt"}
    assert body["user"]["email"] == "alice@example.com"
    assert body["user"]["name"] == "Alice"


async def test_register_seeds_exactly_fourteen_categories(client, register):
    headers, _ = await register()

    resp = await client.get("/api/categories", headers=headers)
    categories = resp.json()["categories"]

    assert len(categories) == 14
    assert sum(1 for c in categories if c["type"] == "INCOME") == 5
    assert sum(1 for c in categories if c["type"] == "EXPENSE") == 9
    assert {(c["name"], c["type"]) for c in categories} == {
        (c["name"], c["type"].value) for c in DEFAULT_CATEGORIES
    }


async def test_register_seeds_per_user(client, register):
    alice, _ = await register("alice@example.com")
    bob, _ = await register("bob@example.com", name="Bob")

    alice_ids = {c["id"] for c in (await client.get("/api/categories", headers=alice)).json()["categories"]}
    bob_ids = {c["id"] for c in (await client.get("/api/categories", headers=bob)).json()["categories"]}
    assert len(alice_ids) == len(bob_ids) == 14
    assert not alice_ids & bob_ids


async def test_register_duplicate_email(client, register):
    await register("alice@example.com")
    resp = await client.post(
        "/api/auth/register",
        json={"name": "Other", "email": "ALICE@example.com", "password": "another1"},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "User already exists with this email"


async def test_register_validation_errors(client):
    resp = await client.post(
        "/api/auth/register",
        json={"name": "A", "email": "not-an-email", "password": "123"},
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["detail"] == "Validation failed"
    fields = {err["field"] for err in body["errors"]}
    assert {"name", "email", "password"} <= fields


@pytest.mark.parametrize(
    "password, status_code",
    [("a" * 72, 201), ("a" * 100, 400), ("\u20ac" * 25, 400)],
)
async def test_register_password_byte_limit(client, password, status_code):
    resp = await client.post(
        "/api/auth/register",
        json={"name": "Alice", "email": "alice@example.com", "password": password},
    )
    assert resp.status_code == status_code
    if status_code == 400:
        assert [err["field"] for err in resp.json()["errors"]] == ["password"]


async def test_login_success(client, register):
    _, registered = await register()
    resp = await client.post(
        "/api/auth/login",
        json={"email": "alice@example.com", "password": "secret123"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Login successful"
    assert body["user"]["id"] == registered["user"]["id"]

    profile = await client.get(
        "/api/auth/profile",
        headers={"Authorization": f"Bearer {body['token']}"},
    )
    assert profile.status_code == 200


async def test_login_errors_do_not_reveal_which_part_was_wrong(client, register):
    await register()
    wrong_password = await client.post(
        "/api/auth/login",
        json={"email": "alice@example.com", "password": "wrong-password"},
    )
    unknown_email = await client.post(
        "/api/auth/login",
        json={"email": "nobody@example.com", "password": "secret123"},
    )
    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"detail": "Invalid email or password"}


async def test_profile(client, register):
    headers, registered = await register()
    resp = await client.get("/api/auth/profile", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["user"] == registered["user"]


async def test_profile_requires_token(client):
    resp = await client.get("/api/auth/profile")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


async def test_invalid_and_expired_tokens_are_rejected(client, register):
    _, registered = await register()
    expired = create_access_token(registered["user"]["id"], expires_delta=timedelta(seconds=-10))

    for token in ("garbage", expired, registered["token"] + "x"):
        resp = await client.get("/api/categories", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    resp = await client.get("/api/categories", headers={"Authorization": f"Bearer {expired}"})
    assert resp.json()["detail"] == "Token has expired"


async def test_profile_of_deleted_user_is_not_found(client, register):
    headers, _ = await register()
    resp = await client.delete("/api/auth/profile", headers=headers)
    assert resp.status_code == 200

    resp = await client.get("/api/auth/profile", headers=headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "User not found"

    # Other protected routes treat the stale token as invalid
    resp = await client.get("/api/categories", headers=headers)
    assert resp.status_code == 401


async def test_delete_profile_cascades(client, register, category_id, create_transaction, session_factory):
    headers, _ = await register()
    bob, _ = await register("bob@example.com", name="Bob")
    travel = await category_id(headers, "Travel")
    await create_transaction(headers, travel)
    await create_transaction(bob, await category_id(bob, "Travel"))

    resp = await client.delete("/api/auth/profile", headers=headers)
    assert resp.status_code == 200

    async with session_factory() as session:
        categories = (await session.execute(select(func.count(Category.id)))).scalar_one()
        transactions = (await session.execute(select(func.count(Transaction.id)))).scalar_one()
    # Only Bob's data remains
    assert categories == 14
    assert transactions == 1
