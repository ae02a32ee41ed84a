# storefront/admin/item_routes.py
from flask import current_app, jsonify, request

from storefront.auth import admin_required
from storefront.errors import ValidationError
from . import admin_bp


def _catalog():
    return current_app.extensions["catalog"]


@admin_bp.post("/items")
@admin_required
def create_item():
    data = request.get_json(force=True, silent=True) or {}
    item_id = _catalog().create_item(
        name=data.get("name"),
        price=data.get("price"),
        description=data.get("description"),
        stock=data.get("stock"),
        images=data.get("images"),
        image_url=data.get("image_url"),
    )
    return jsonify({"success": True, "id": item_id}), 201


@admin_bp.put("/items/<item_id>")
@admin_required
def update_item(item_id):
    data = request.get_json(force=True, silent=True) or {}
    _catalog().update_item(
        item_id,
        name=data.get("name"),
        price=data.get("price"),
        description=data.get("description"),
        stock=data.get("stock"),
        image_url=data.get("image_url"),
    )
    return jsonify({"success": True}), 200


# ── image ingestion ─────────────────────────────────────────────────────────

def _single_file(field: str = "image"):
    fs = request.files.get(field)
    if not fs or not fs.filename:
        raise ValidationError("No file uploaded")
    return fs


@admin_bp.post("/items/upload-image")
@admin_required
def upload_image():
    url = _catalog().upload_image(_single_file())
    return jsonify({"url": url}), 200


@admin_bp.post("/items/upload-images")
@admin_required
def upload_images():
    urls = _catalog().upload_images(request.files.getlist("images"))
    return jsonify({"urls": urls}), 200


@admin_bp.post("/items/<item_id>/upload-image")
@admin_required
def upload_item_image(item_id):
    url = _catalog().upload_item_image(item_id, _single_file())
    return jsonify({"url": url}), 200
