import pytest

from storefront.bootstrap import migrate_legacy_images
from storefront.extensions import storage


def test_list_items_carries_first_image_as_preview(client, make_item):
    with_images = make_item(name="Bear", images=["/uploads/a.jpg", "/uploads/b.jpg"])
    bare = make_item(name="Fox")

    items = {it["id"]: it for it in client.get("/items").get_json()}
    assert items[with_images]["preview_image_url"] == "/uploads/a.jpg"
    assert items[bare]["preview_image_url"] is None


def test_get_item_returns_gallery_and_legacy_image(client, make_item):
    item_id = make_item(name="Bear", price="8.5", stock=2, description="soft",
                        images=["/uploads/a.jpg", "/uploads/b.jpg"])

    item = client.get(f"/items/{item_id}").get_json()
    assert item["images"] == ["/uploads/a.jpg", "/uploads/b.jpg"]
    assert item["image_url"] == "/uploads/a.jpg"
    assert item["price"] == 8.5
    assert item["status"] == "in-stock"
    assert item["description"] == "soft"


@pytest.mark.parametrize("item_id", ["999", "abc"])
def test_get_missing_item(client, item_id):
    res = client.get(f"/items/{item_id}")
    assert res.status_code == 404
    assert res.get_json() == {"error": "Item not found"}


def test_create_item_over_http(client, auth_headers):
    res = client.post(
        "/admin/items",
        json={"name": "Bear", "price": 19.999, "stock": 0, "status": "in-stock"},
        headers=auth_headers,
    )
    assert res.status_code == 201
    item_id = res.get_json()["id"]

    item = client.get(f"/items/{item_id}").get_json()
    assert item["price"] == 20.0
    # status from the client is ignored, stock decides
    assert item["status"] == "pre-order"


@pytest.mark.parametrize("stock", ["-3", "many", None, ""])
def test_bad_stock_is_clamped_to_zero(client, auth_headers, stock):
    res = client.post("/admin/items", json={"name": "Owl", "price": 5, "stock": stock}, headers=auth_headers)
    assert res.status_code == 201
    item = client.get(f"/items/{res.get_json()['id']}").get_json()
    assert item["stock"] == 0
    assert item["status"] == "pre-order"


def test_huge_stock_is_capped(client, auth_headers):
    res = client.post("/admin/items", json={"name": "Owl", "price": 5, "stock": "1e30"}, headers=auth_headers)
    assert res.status_code == 201
    item = client.get(f"/items/{res.get_json()['id']}").get_json()
    assert item["stock"] == 2**31 - 1
    assert item["status"] == "in-stock"


@pytest.mark.parametrize(
    "body, message",
    [
        ({"name": "Owl", "price": "cheap"}, "Price must be a number"),
        ({"name": "Owl", "price": 1e30}, "Price is out of range"),
        ({"name": "Owl"}, "Name and price are required"),
        ({"price": 3}, "Name and price are required"),
        ({"name": "Owl", "price": 3, "images": "one.jpg"}, "Images must be a list"),
    ],
)
def test_create_item_validation(client, auth_headers, body, message):
    res = client.post("/admin/items", json=body, headers=auth_headers)
    assert res.status_code == 400
    assert message in res.get_json()["error"]


def test_update_flips_status_across_zero(client, make_item, auth_headers):
    item_id = make_item(name="Bear", price=10, stock=0)

    res = client.put(f"/admin/items/{item_id}", json={"name": "Bear", "price": 10, "stock": 4},
                     headers=auth_headers)
    assert res.get_json() == {"success": True}
    assert client.get(f"/items/{item_id}").get_json()["status"] == "in-stock"

    client.put(f"/admin/items/{item_id}", json={"name": "Bear", "price": "12.345", "stock": 0},
               headers=auth_headers)
    item = client.get(f"/items/{item_id}").get_json()
    assert item["status"] == "pre-order"
    assert item["price"] == 12.35


def test_update_errors(client, auth_headers):
    body = {"name": "Bear", "price": 1, "stock": 1}
    assert client.put("/admin/items/77", json=body, headers=auth_headers).status_code == 404

    res = client.put("/admin/items/7a", json=body, headers=auth_headers)
    assert res.status_code == 400
    assert res.get_json() == {"error": "Invalid item ID"}

    res = client.put("/admin/items/7", json={"name": "Bear", "price": "x"}, headers=auth_headers)
    assert res.status_code == 400


def test_item_writes_need_a_token(client, make_item):
    item_id = make_item()
    assert client.post("/admin/items", json={"name": "A", "price": 1}).status_code == 403
    assert client.put(f"/admin/items/{item_id}", json={"name": "A", "price": 1}).status_code == 403


def test_legacy_image_url_moves_into_gallery_once(app):
    with app.app_context():
        storage.execute(
            "INSERT INTO items (name, price, image_url, status, description, stock) "
            "VALUES ('Old', 3, '/uploads/old.jpg', 'in-stock', '', 1)"
        )
        assert migrate_legacy_images() == 1
        assert migrate_legacy_images() == 0
        rows = storage.execute("SELECT image_url FROM item_images").rows
    assert rows == [{"image_url": "/uploads/old.jpg"}]
