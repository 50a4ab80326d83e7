import uuid

import pytest


async def test_list_is_ordered_by_type_then_name(client, auth_headers):
    resp = await client.get("/api/categories", headers=auth_headers)
    assert resp.status_code == 200
    categories = resp.json()["categories"]
    keys = [(c["type"], c["name"]) for c in categories]
    assert keys == sorted(keys)
    assert categories[0]["type"] == "EXPENSE"


@pytest.mark.parametrize("category_type, expected", [("INCOME", 5), ("EXPENSE", 9)])
async def test_list_filtered_by_type(client, auth_headers, category_type, expected):
    resp = await client.get("/api/categories", params={"type": category_type}, headers=auth_headers)
    categories = resp.json()["categories"]
    assert len(categories) == expected
    assert all(c["type"] == category_type for c in categories)


async def test_create_category(client, auth_headers):
    resp = await client.post(
        "/api/categories",
        json={"name": "  Groceries ", "type": "EXPENSE"},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Category created successfully"
    assert body["category"]["name"] == "Groceries"
    assert body["category"]["type"] == "EXPENSE"

    resp = await client.get("/api/categories", headers=auth_headers)
    assert len(resp.json()["categories"]) == 15


async def test_create_duplicate_name_and_type_conflicts(client, auth_headers):
    resp = await client.post(
        "/api/categories",
        json={"name": "Travel", "type": "EXPENSE"},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Category 'Travel' already exists for expense transactions"


async def test_same_name_allowed_under_other_type(client, auth_headers):
    resp = await client.post(
        "/api/categories",
        json={"name": "Travel", "type": "INCOME"},
        headers=auth_headers,
    )
    assert resp.status_code == 201


async def test_same_name_allowed_for_other_user(client, register):
    await register("alice@example.com")
    bob, _ = await register("bob@example.com", name="Bob")
    resp = await client.post("/api/categories", json={"name": "Pets", "type": "EXPENSE"}, headers=bob)
    assert resp.status_code == 201


async def test_create_validation(client, auth_headers):
    resp = await client.post("/api/categories", json={"name": "", "type": "SAVINGS"}, headers=auth_headers)
    assert resp.status_code == 400
    fields = {err["field"] for err in resp.json()["errors"]}
    assert fields == {"name", "type"}


async def test_update_category(client, auth_headers, category_id):
    travel = await category_id(auth_headers, "Travel")
    resp = await client.put(f"/api/categories/{travel}", json={"name": "Trips"}, headers=auth_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Category updated successfully"
    assert body["category"]["id"] == travel
    assert body["category"]["name"] == "Trips"
    assert body["category"]["type"] == "EXPENSE"


async def test_update_to_existing_name_conflicts(client, auth_headers, category_id):
    travel = await category_id(auth_headers, "Travel")
    resp = await client.put(f"/api/categories/{travel}", json={"name": "Shopping"}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Category 'Shopping' already exists for expense transactions"


async def test_update_type_into_collision_conflicts(client, auth_headers, category_id):
    await client.post("/api/categories", json={"name": "Gifts", "type": "INCOME"}, headers=auth_headers)
    resp = await client.post("/api/categories", json={"name": "Gifts", "type": "EXPENSE"}, headers=auth_headers)
    gifts_expense = resp.json()["category"]["id"]

    resp = await client.put(f"/api/categories/{gifts_expense}", json={"type": "INCOME"}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Category 'Gifts' already exists for income transactions"


async def test_update_missing_or_foreign_category_is_not_found(client, register, category_id):
    alice, _ = await register("alice@example.com")
    bob, _ = await register("bob@example.com", name="Bob")
    alice_travel = await category_id(alice, "Travel")

    for target in (alice_travel, str(uuid.uuid4())):
        resp = await client.put(f"/api/categories/{target}", json={"name": "Mine"}, headers=bob)
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Category not found"

    # Alice's category is untouched
    assert await category_id(alice, "Travel") == alice_travel


async def test_type_change_blocked_while_transactions_reference_category(
    client, auth_headers, category_id, create_transaction
):
    travel = await category_id(auth_headers, "Travel")
    await create_transaction(auth_headers, travel)

    resp = await client.put(f"/api/categories/{travel}", json={"type": "INCOME"}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Cannot change category type. It has 1 associated transactions."

    # Renaming is still fine
    resp = await client.put(f"/api/categories/{travel}", json={"name": "Trips"}, headers=auth_headers)
    assert resp.status_code == 200


async def test_type_change_allowed_without_transactions(client, auth_headers, category_id):
    education = await category_id(auth_headers, "Education")
    resp = await client.put(f"/api/categories/{education}", json={"type": "INCOME"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["category"]["type"] == "INCOME"


async def test_delete_category_without_transactions(client, auth_headers, category_id):
    travel = await category_id(auth_headers, "Travel")
    resp = await client.delete(f"/api/categories/{travel}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Category deleted successfully"}

    resp = await client.delete(f"/api/categories/{travel}", headers=auth_headers)
    assert resp.status_code == 404


@pytest.mark.parametrize("count", [1, 3])
async def test_delete_category_with_transactions_is_blocked(
    client, auth_headers, category_id, create_transaction, count
):
    travel = await category_id(auth_headers, "Travel")
    for _ in range(count):
        await create_transaction(auth_headers, travel)

    resp = await client.delete(f"/api/categories/{travel}", headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == f"Cannot delete category. It has {count} associated transactions."


async def test_delete_succeeds_once_transactions_are_gone(client, auth_headers, category_id, create_transaction):
    travel = await category_id(auth_headers, "Travel")
    tx = await create_transaction(auth_headers, travel)
    await client.delete(f"/api/transactions/{tx['id']}", headers=auth_headers)

    resp = await client.delete(f"/api/categories/{travel}", headers=auth_headers)
    assert resp.status_code == 200


async def test_delete_foreign_category_is_not_found(client, register, category_id):
    alice, _ = await register("alice@example.com")
    bob, _ = await register("bob@example.com", name="Bob")
    alice_travel = await category_id(alice, "Travel")

    resp = await client.delete(f"/api/categories/{alice_travel}", headers=bob)
    assert resp.status_code == 404
    assert await category_id(alice, "Travel") == alice_travel
