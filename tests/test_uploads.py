import io
import os
import re

from PIL import Image

from storefront.services.images import attention_crop
from tests.conftest import count_rows, image_bytes

UPLOAD_URL_RE = re.compile(r"^/uploads/image-\d+-\d+\.jpg$")


def _stored_path(app, url):
    return os.path.join(app.config["UPLOAD_FOLDER"], url.rsplit("/", 1)[1])


def test_upload_is_resized_into_the_box(client, app, auth_headers):
    res = client.post(
        "/admin/items/upload-image",
        data={"image": (image_bytes((1600, 1200)), "photo.jpg")},
        content_type="multipart/form-data",
        headers=auth_headers,
    )
    assert res.status_code == 200
    url = res.get_json()["url"]
    assert UPLOAD_URL_RE.match(url)

    with Image.open(_stored_path(app, url)) as img:
        assert img.size == (800, 600)

    served = client.get(url)
    assert served.status_code == 200
    served.close()


def test_small_images_are_not_enlarged(client, app, auth_headers):
    res = client.post(
        "/admin/items/upload-image",
        data={"image": (image_bytes((200, 100), fmt="PNG"), "tiny.png")},
        content_type="multipart/form-data",
        headers=auth_headers,
    )
    url = res.get_json()["url"]
    assert url.endswith(".png")
    with Image.open(_stored_path(app, url)) as img:
        assert img.size == (200, 100)


def test_upload_without_file(client, auth_headers):
    res = client.post("/admin/items/upload-image", data={}, content_type="multipart/form-data",
                      headers=auth_headers)
    assert res.status_code == 400
    assert res.get_json() == {"error": "No file uploaded"}


def test_broken_image_leaves_nothing_behind(client, app, auth_headers):
    res = client.post(
        "/admin/items/upload-image",
        data={"image": (io.BytesIO(b"definitely not a picture"), "fake.jpg")},
        content_type="multipart/form-data",
        headers=auth_headers,
    )
    assert res.status_code == 500
    assert res.get_json() == {"error": "Failed to process image"}
    assert os.listdir(app.config["UPLOAD_FOLDER"]) == []


def test_item_upload_records_gallery_image(client, app, make_item, auth_headers):
    item_id = make_item()
    res = client.post(
        f"/admin/items/{item_id}/upload-image",
        data={"image": (image_bytes(), "photo.jpg")},
        content_type="multipart/form-data",
        headers=auth_headers,
    )
    assert res.status_code == 200
    url = res.get_json()["url"]
    assert client.get(f"/items/{item_id}").get_json()["images"] == [url]


def test_item_upload_for_missing_item(client, app, auth_headers):
    res = client.post(
        "/admin/items/321/upload-image",
        data={"image": (image_bytes(), "photo.jpg")},
        content_type="multipart/form-data",
        headers=auth_headers,
    )
    assert res.status_code == 404
    assert os.listdir(app.config["UPLOAD_FOLDER"]) == []
    assert count_rows(app, "item_images") == 0


def test_multi_upload(client, app, auth_headers):
    res = client.post(
        "/admin/items/upload-images",
        data={"images": [(image_bytes(), "a.jpg"), (image_bytes((300, 900)), "b.jpg")]},
        content_type="multipart/form-data",
        headers=auth_headers,
    )
    assert res.status_code == 200
    urls = res.get_json()["urls"]
    assert len(urls) == 2
    assert all(os.path.exists(_stored_path(app, u)) for u in urls)


def test_multi_upload_limits(client, auth_headers):
    res = client.post("/admin/items/upload-images", data={}, content_type="multipart/form-data",
                      headers=auth_headers)
    assert res.get_json() == {"urls": []}

    files = [(image_bytes((50, 50)), f"{i}.jpg") for i in range(6)]
    res = client.post("/admin/items/upload-images", data={"images": files},
                      content_type="multipart/form-data", headers=auth_headers)
    assert res.status_code == 400


def test_uploads_need_a_token(client):
    res = client.post(
        "/admin/items/upload-image",
        data={"image": (image_bytes(), "photo.jpg")},
        content_type="multipart/form-data",
    )
    assert res.status_code == 403


def test_cover_mode_crops_to_the_box(make_app):
    app = make_app(IMAGE_RESIZE_MODE="cover")
    token = None
    with app.app_context():
        token = app.extensions["admin_auth"].issue_token("admin")
    res = app.test_client().post(
        "/admin/items/upload-image",
        data={"image": (image_bytes((2000, 1000)), "wide.jpg")},
        content_type="multipart/form-data",
        headers={"Authorization": f"Bearer {token}"},
    )
    with Image.open(_stored_path(app, res.get_json()["url"])) as img:
        assert img.size == (800, 800)


def test_attention_crop_prefers_the_busy_region():
    img = Image.new("L", (1600, 800), 255)
    # checkerboard on the right half, flat white on the left
    for x in range(800, 1600, 20):
        for y in range(0, 800, 20):
            if (x // 20 + y // 20) % 2:
                img.paste(0, (x, y, x + 20, y + 20))

    cropped = attention_crop(img, (800, 800))
    assert cropped.size == (800, 800)
    assert cropped.crop((0, 0, 100, 800)).getextrema() == (0, 255)
