# storefront/api/routes/order_routes.py
from flask import Blueprint, current_app, jsonify, request

from storefront.errors import InternalError
from storefront.services.orders import OrderDraft, PlacementFailed, PUBLIC_CONFIRMATION

order_bp = Blueprint("order_bp", __name__)


def _orders():
    return current_app.extensions["orders"]


def _place_from_request(message: str):
    """Shared by the public and the admin order forms."""
    draft = OrderDraft.from_payload(request.get_json(force=True, silent=True) or {})
    result = _orders().place_order(draft)
    if isinstance(result, PlacementFailed):
        raise InternalError(result.reason)
    return jsonify(result.to_dict(message)), 201


@order_bp.post("/orders")
def create_order():
    return _place_from_request(PUBLIC_CONFIRMATION)


@order_bp.get("/track/<tracking_id>")
def track_order(tracking_id: str):
    # always 200; the body says whether the code exists
    return jsonify(_orders().track(tracking_id)), 200
