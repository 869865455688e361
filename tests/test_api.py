"""Tests for the lists HTTP API."""

from fastapi.testclient import TestClient

from ingredient_lists.api.app import create_app
from tests.conftest import backend_entries

AUTH = {"Authorization": "Bearer token-1"}
MILK = {"name": "Milk", "category": "Dairy", "quantity": 250, "unit": "ml"}


def _client(container) -> TestClient:  # type: ignore[no-untyped-def]
    return TestClient(create_app(container))


def test_health(container) -> None:
    response = _client(container).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_requests_without_credential_are_rejected(container) -> None:
    client = _client(container)

    assert client.get("/lists").status_code == 401
    basic = client.get("/lists", headers={"Authorization": "Basic abc"})
    assert basic.status_code == 401


def test_get_lists(container) -> None:
    response = _client(container).get("/lists", headers=AUTH)

    assert response.status_code == 200
    lists = response.json()["lists"]
    assert [item["name"] for item in lists] == ["Grocery", "Pantry"]
    assert lists[1]["ingredients"][0]["name"] == "Carrot"


def test_create_add_and_merge(container) -> None:
    client = _client(container)
    apple = {"name": "Apple", "category": "Fruit", "quantity": 3, "unit": "count"}

    created = client.post("/lists", json={"name": "Weekly"}, headers=AUTH)
    assert created.status_code == 201
    client.post("/lists/Weekly/ingredients", json=apple, headers=AUTH)
    response = client.post(
        "/lists/Weekly/ingredients", json={**apple, "quantity": 2}, headers=AUTH
    )

    assert response.status_code == 200
    weekly = client.get("/lists/Weekly", headers=AUTH).json()
    assert weekly["ingredients"] == [
        {
            "name": "Apple",
            "category": "Fruit",
            "quantity": 5.0,
            "unit": "count",
            "is_custom": False,
        }
    ]


def test_duplicate_list_conflicts(container) -> None:
    response = _client(container).post(
        "/lists", json={"name": "Grocery"}, headers=AUTH
    )

    assert response.status_code == 409


def test_delete_missing_list_is_not_found(container) -> None:
    response = _client(container).delete("/lists/Freezer", headers=AUTH)

    assert response.status_code == 404


def test_rename_list(container) -> None:
    client = _client(container)

    response = client.patch("/lists/Grocery", json={"name": "Weekly"}, headers=AUTH)

    assert response.status_code == 200
    assert client.get("/lists/Weekly", headers=AUTH).status_code == 200
    assert client.get("/lists/Grocery", headers=AUTH).status_code == 404


def test_non_positive_quantity_is_rejected(container) -> None:
    response = _client(container).post(
        "/lists/Grocery/ingredients", json={**MILK, "quantity": 0}, headers=AUTH
    )

    assert response.status_code == 422


def test_remove_and_edit_ingredient(container) -> None:
    client = _client(container)

    edited = client.put(
        "/lists/Pantry/ingredients",
        json={
            "old": {"name": "Milk", "category": "Dairy"},
            "new": {**MILK, "unit": "L", "quantity": 1},
        },
        headers=AUTH,
    )
    removed = client.request(
        "DELETE",
        "/lists/Pantry/ingredients",
        json={"name": "Carrot", "category": "Produce"},
        headers=AUTH,
    )
    missing = client.request(
        "DELETE",
        "/lists/Pantry/ingredients",
        json={"name": "Carrot", "category": "Produce"},
        headers=AUTH,
    )

    assert edited.status_code == 200
    assert removed.status_code == 200
    assert missing.status_code == 404
    pantry = client.get("/lists/Pantry", headers=AUTH).json()["ingredients"]
    assert [(item["name"], item["unit"]) for item in pantry] == [
        ("Cereal", "g"),
        ("Cheese", "g"),
        ("Milk", "L"),
    ]


def test_search_list(container) -> None:
    response = _client(container).get("/lists/Pantry/search?q=CH", headers=AUTH)

    assert response.status_code == 200
    assert [item["name"] for item in response.json()["ingredients"]] == ["Cheese"]


def test_move_ingredient(container) -> None:
    client = _client(container)

    response = client.post(
        "/moves",
        json={
            "source": "Pantry",
            "destination": "Grocery",
            "ingredient": {"name": "Milk", "category": "Dairy"},
        },
        headers=AUTH,
    )

    assert response.status_code == 200
    assert "Milk" in [
        entry.name for entry in backend_entries(container.gateway, "Grocery")
    ]
    assert "Milk" not in [
        entry.name for entry in backend_entries(container.gateway, "Pantry")
    ]


def test_failed_move_reports_failure_and_restores(container) -> None:
    container.gateway.fail("remove", "Pantry")
    client = _client(container)

    response = client.post(
        "/moves",
        json={
            "source": "Pantry",
            "destination": "Grocery",
            "ingredient": {"name": "Milk", "category": "Dairy"},
        },
        headers=AUTH,
    )

    assert response.status_code == 502
    grocery = client.get("/lists/Grocery", headers=AUTH).json()["ingredients"]
    pantry = client.get("/lists/Pantry", headers=AUTH).json()["ingredients"]
    assert "Milk" not in [item["name"] for item in grocery]
    assert "Milk" in [item["name"] for item in pantry]


def test_catalog_and_units(container) -> None:
    client = _client(container)

    catalog = client.get("/catalog?q=ch", headers=AUTH)
    units = client.get("/units", headers=AUTH)

    assert [item["name"] for item in catalog.json()["ingredients"]] == [
        "Chicken",
        "Chips",
    ]
    assert units.json()["units"][0] == "count"


def test_upstream_failure_on_session_load(container) -> None:
    container.gateway.fail_fetches = True

    response = _client(container).get("/lists", headers=AUTH)

    assert response.status_code == 502


def test_register_user(container) -> None:
    response = _client(container).post("/users/me", headers=AUTH)

    assert response.status_code == 200
    assert container.gateway.users == {"token-1"}


def test_lists_are_scoped_per_token(container) -> None:
    client = _client(container)
    other = {"Authorization": "Bearer token-2"}

    first = client.post("/lists", json={"name": "Weekly"}, headers=AUTH)
    second = client.post("/lists", json={"name": "Weekly"}, headers=other)
    again = client.post("/lists", json={"name": "Weekly"}, headers=other)

    assert first.status_code == 201
    assert second.status_code == 201
    assert again.status_code == 409
    lists = client.get("/lists", headers=other).json()["lists"]
    assert [item["name"] for item in lists] == ["Grocery", "Pantry", "Weekly"]


def test_purge_custom_ingredient(container) -> None:
    client = _client(container)
    sauce = {"name": "Sauce", "category": "Condiment", "quantity": 1, "unit": "jar"}
    for list_name in ("Grocery", "Pantry"):
        client.post(
            f"/lists/{list_name}/ingredients",
            json={**sauce, "is_custom": True},
            headers=AUTH,
        )

    response = client.request(
        "DELETE",
        "/custom-ingredients",
        json={"name": "Sauce", "category": "Condiment"},
        headers=AUTH,
    )

    assert response.status_code == 200
    assert response.json() == {"removed": 2}
    assert "Sauce" not in [
        entry.name for entry in backend_entries(container.gateway, "Pantry")
    ]


def test_move_within_one_list_is_unprocessable(container) -> None:
    response = _client(container).post(
        "/moves",
        json={
            "source": "Pantry",
            "destination": "Pantry",
            "ingredient": {"name": "Milk", "category": "Dairy"},
        },
        headers=AUTH,
    )

    assert response.status_code == 422
    assert response.json()["detail"] == "Source and destination must differ."
