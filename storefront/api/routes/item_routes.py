# storefront/api/routes/item_routes.py
from flask import Blueprint, current_app, jsonify

api_items = Blueprint("api_items", __name__)


def _catalog():
    return current_app.extensions["catalog"]


@api_items.get("/items")
def list_items():
    # each item carries preview_image_url (first gallery image or null)
    return jsonify(_catalog().list_items()), 200


@api_items.get("/items/<item_id>")
def get_item(item_id):
    return jsonify(_catalog().get_item(item_id)), 200
