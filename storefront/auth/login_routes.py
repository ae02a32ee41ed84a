# storefront/auth/login_routes.py
from flask import Blueprint, current_app, jsonify, request

auth_bp = Blueprint("auth", __name__, url_prefix="/admin")


@auth_bp.post("/login")
def login():
    """Exchange admin credentials for a bearer token."""
    data = request.get_json(force=True, silent=True) or {}
    token = current_app.extensions["admin_auth"].authenticate(
        data.get("username"), data.get("password")
    )
    return jsonify({"token": token}), 200
