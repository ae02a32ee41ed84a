# storefront/admin/order_routes.py
from flask import current_app, jsonify, request

from storefront.api.routes.order_routes import _place_from_request
from storefront.auth import admin_required
from storefront.services.orders import ADMIN_CONFIRMATION
from . import admin_bp


def _orders():
    return current_app.extensions["orders"]


@admin_bp.get("/orders")
@admin_required
def list_orders():
    return jsonify(_orders().list_orders()), 200


@admin_bp.post("/orders")
@admin_required
def create_order():
    return _place_from_request(ADMIN_CONFIRMATION)


@admin_bp.post("/orders/<int:order_id>/status")
@admin_required
def update_order_status(order_id: int):
    data = request.get_json(force=True, silent=True) or {}
    _orders().update_status(order_id, data.get("status"))
    return jsonify({"success": True}), 200


@admin_bp.delete("/orders/<int:order_id>")
@admin_required
def delete_order(order_id: int):
    _orders().delete_order(order_id)
    return jsonify({"success": True, "message": "Order deleted"}), 200
