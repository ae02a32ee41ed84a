# storefront/auth/gate.py
"""Bearer-token gate in front of every administrative route.

Flask-Login resolves the admin from the ``Authorization`` header on each
request; nothing is kept in the session.
"""
from flask import current_app, g
from flask_login import login_required

from storefront.errors import Forbidden
from storefront.extensions import login_manager


def bearer_token(header: str | None) -> str | None:
    """``Bearer <token>`` or the bare token."""
    if not header:
        return None
    token = header[7:] if header.startswith("Bearer ") else header
    return token.strip() or None


@login_manager.request_loader
def load_admin_from_request(request):
    token = bearer_token(request.headers.get("Authorization"))
    if not token:
        g.admin_auth_error = "No token"
        return None

    auth = current_app.extensions["admin_auth"]
    try:
        username = auth.verify_token(token)
    except Forbidden as e:
        g.admin_auth_error = e.message
        return None

    admin = auth.find_admin(username)
    if admin is None:
        g.admin_auth_error = "Token invalid"
    return admin


@login_manager.unauthorized_handler
def reject_request():
    current_app.logger.info("[AUTH] rejected admin request: %s", g.get("admin_auth_error", "No token"))
    raise Forbidden(g.get("admin_auth_error", "No token"))


def admin_required(view):
    return login_required(view)
