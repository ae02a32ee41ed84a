# storefront/services/auth.py
from __future__ import annotations

from flask import current_app
from itsdangerous import BadData, URLSafeTimedSerializer

from storefront.errors import AuthError, Forbidden, ValidationError
from storefront.models import Admin


class AdminAuthService:
    """Password login for admins and the signed, time-limited tokens it hands out."""

    def __init__(self, storage):
        self.storage = storage

    def _serializer(self) -> URLSafeTimedSerializer:
        secret = current_app.config.get("SECRET_KEY")
        if not secret:
            raise RuntimeError("SECRET_KEY is not set; admin tokens cannot be signed.")
        salt = current_app.config.get("ADMIN_TOKEN_SALT", "storefront-admin")
        return URLSafeTimedSerializer(secret_key=secret, salt=salt)

    def find_admin(self, username: str) -> Admin | None:
        return self.storage.session.query(Admin).filter_by(username=username).first()

    def authenticate(self, username, password) -> str:
        username = (username or "").strip() if isinstance(username, str) else ""
        password = password if isinstance(password, str) else ""
        if not username or not password:
            raise ValidationError("Username and password are required")

        admin = self.find_admin(username)
        if admin is None or not admin.check_password(password):
            current_app.logger.info("[AUTH] login rejected for %r", username)
            raise AuthError("Invalid credentials")

        current_app.logger.info("[AUTH] login ok for %r", username)
        return self.issue_token(admin.username)

    def issue_token(self, username: str) -> str:
        return self._serializer().dumps({"username": username})

    def verify_token(self, token: str) -> str:
        """Return the username a token was issued for; expiry is the only revocation."""
        max_age = int(current_app.config.get("ADMIN_TOKEN_MAX_AGE", 4 * 60 * 60))
        try:
            data = self._serializer().loads(token, max_age=max_age)
        except BadData as e:
            raise Forbidden("Token invalid") from e
        username = data.get("username") if isinstance(data, dict) else None
        if not username:
            raise Forbidden("Token invalid")
        return username

    def ensure_admin(self, username: str, password: str, force: bool = False) -> tuple[Admin, bool]:
        """Create the admin if missing; with ``force`` reset the password of an existing one.

        Returns the admin and whether anything was written.
        """
        admin = self.find_admin(username)
        if admin is not None and not force:
            return admin, False
        if admin is None:
            admin = Admin(username=username)
        admin.set_password(password)
        self.storage.insert(admin)
        return admin, True
