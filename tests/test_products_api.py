# tests/test_products_api.py
import pytest

from app import store
from sdk.catalog import Product

WIDGET = {"name": "Widget", "price": 9.99, "image": "http://x/y.png"}
MISSING_ID = "0" * 32


def create(client, **overrides):
    r = client.post("/products", json={**WIDGET, **overrides})
    assert r.status_code == 201, r.text
    return r.json()["data"]


def test_widget_scenario(client):
    r = client.post("/products", json=WIDGET)
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    pid = body["data"]["id"]
    assert body["data"]["price"] == 9.99

    r2 = client.put(f"/products/{pid}", json={"price": 12.5})
    assert r2.status_code == 200
    assert r2.json()["data"]["price"] == 12.5

    r3 = client.delete(f"/products/{pid}")
    assert r3.status_code == 200
    assert r3.json() == {"success": True, "message": "Product deleted"}

    listed = client.get("/products").json()["data"]
    assert pid not in [p["id"] for p in listed]


def test_create_assigns_unique_ids_and_lists_them(client):
    ids = [create(client, name=f"Item {i}")["id"] for i in range(3)]
    assert len(set(ids)) == 3

    r = client.get("/products")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert [p["id"] for p in body["data"]] == ids


def test_create_returns_camel_case_timestamps(client):
    data = create(client)
    assert "createdAt" in data and "updatedAt" in data
    assert "created_at" not in data


@pytest.mark.parametrize("missing", ["name", "price", "image"])
def test_create_missing_field_is_400(client, missing):
    payload = {k: v for k, v in WIDGET.items() if k != missing}
    r = client.post("/products", json=payload)
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Please provide all fields"}
    assert client.get("/products").json()["data"] == []


@pytest.mark.parametrize("field,value", [
    ("name", "   "),
    ("image", ""),
    ("price", 0),
    ("price", -3),
    ("price", "abc"),
    ("price", True),
])
def test_create_invalid_field_is_400(client, field, value):
    r = client.post("/products", json={**WIDGET, field: value})
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_create_coerces_text_price(client):
    data = create(client, price="9.99")
    assert data["price"] == 9.99


def test_create_rejects_non_json_body(client):
    r = client.post("/products", content=b"not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_uncategorized_is_stored_as_no_category(client):
    data = create(client, category="Uncategorized")
    assert "category" not in data
    data = create(client, category="  Gadgets ")
    assert data["category"] == "Gadgets"


def test_update_changes_only_patched_field(client):
    before = create(client, category="Tools")
    r = client.put(f"/products/{before['id']}", json={"price": "12.5"})
    assert r.status_code == 200
    after = r.json()["data"]

    assert after["price"] == 12.5
    for key in ("id", "name", "image", "category", "createdAt"):
        assert after[key] == before[key]
    p = Product.model_validate(after)
    assert p.updated_at > p.created_at


def test_update_can_clear_category(client):
    before = create(client, category="Tools")
    after = client.put(f"/products/{before['id']}", json={"category": None}).json()["data"]
    assert "category" not in after


@pytest.mark.parametrize("patch", [
    {"name": None},
    {"name": ""},
    {"price": 0},
    {"price": False},
    {"image": None},
    {"colour": "red"},
])
def test_update_invalid_patch_is_400(client, patch):
    pid = create(client)["id"]
    r = client.put(f"/products/{pid}", json=patch)
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert client.get(f"/products/{pid}").json()["data"]["name"] == "Widget"


def test_update_unknown_id_is_404_and_store_unchanged(client):
    create(client)
    before = client.get("/products").json()
    r = client.put(f"/products/{MISSING_ID}", json={"price": 1})
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Product not found"}
    assert client.get("/products").json() == before


@pytest.mark.parametrize("bad_id", ["123", "not-an-id", "Z" * 32, "0" * 33, "3fa85f64-5717-4562-b3fc-2c963f66afa6"])
def test_malformed_id_is_400_before_store_lookup(client, monkeypatch, bad_id):
    def boom(*args, **kwargs):
        pytest.fail("store should not be called for a malformed id")

    monkeypatch.setattr(store, "update_product", boom)
    monkeypatch.setattr(store, "delete_product", boom)
    monkeypatch.setattr(store, "get_product", boom)

    for r in (
        client.put(f"/products/{bad_id}", json={"price": 1}),
        client.delete(f"/products/{bad_id}"),
        client.get(f"/products/{bad_id}"),
    ):
        assert r.status_code == 400
        assert r.json() == {"success": False, "message": "Invalid Product ID"}


def test_delete_removes_exactly_one_and_second_delete_is_404(client):
    keep = create(client, name="Keep")["id"]
    drop = create(client, name="Drop")["id"]

    assert client.delete(f"/products/{drop}").status_code == 200
    ids = [p["id"] for p in client.get("/products").json()["data"]]
    assert ids == [keep]

    r = client.delete(f"/products/{drop}")
    assert r.status_code == 404
    assert r.json()["success"] is False


def test_get_single_product(client):
    data = create(client)
    r = client.get(f"/products/{data['id']}")
    assert r.status_code == 200
    assert r.json()["data"] == data
    assert client.get(f"/products/{MISSING_ID}").status_code == 404


def test_unexpected_store_failure_is_500(client, monkeypatch):
    def broken(db):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(store, "list_products", broken)
    r = client.get("/products")
    assert r.status_code == 500
    assert r.json() == {"success": False, "message": "Server error"}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
