# storefront/errors.py
"""Error taxonomy shared by the services and the HTTP layer.

Every error carries the HTTP status it maps to; handlers registered in
``register_error_handlers`` render them as ``{"error": "<message>"}``.
"""
from __future__ import annotations

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException


class StorefrontError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(StorefrontError):
    status_code = 400
    default_message = "Invalid request"


class AuthError(StorefrontError):
    status_code = 401
    default_message = "Invalid credentials"


class Forbidden(AuthError):
    status_code = 403
    default_message = "No token"


class NotFound(StorefrontError):
    status_code = 404
    default_message = "Not found"


class InternalError(StorefrontError):
    status_code = 500


class StorageError(InternalError):
    default_message = "Storage failure"


class ImageProcessingError(InternalError):
    default_message = "Failed to process image"


def register_error_handlers(app):
    @app.errorhandler(StorefrontError)
    def _storefront_error(err: StorefrontError):
        if err.status_code >= 500:
            current_app.logger.error("[ERROR] %s: %s", type(err).__name__, err.message)
        return jsonify({"error": err.message}), err.status_code

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        return jsonify({"error": err.description or err.name}), err.code

    @app.errorhandler(Exception)
    def _unexpected(err: Exception):
        current_app.logger.exception("[ERROR] unhandled exception")
        return jsonify({"error": str(err) or InternalError.default_message}), 500
