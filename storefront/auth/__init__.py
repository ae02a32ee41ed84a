# storefront/auth/__init__.py

# one blueprint object shared by app.py and the gate
from . import login_routes as _login

auth_bp = _login.auth_bp

# importing the gate attaches the Flask-Login loaders
from . import gate  # noqa: F401,E402
from .gate import admin_required  # noqa: E402

__all__ = ["auth_bp", "admin_required"]
