# storefront/app.py
import logging
import os

# Show INFO logs even outside the werkzeug access log
logging.basicConfig(level=logging.INFO)

from flask import Flask
from storefront.config import BASE_DIR, Config

# Extensions
from storefront.extensions import db, login_manager, bcrypt, migrate, cors, init_mail, storage
from storefront.errors import register_error_handlers
from storefront.services import AdminAuthService, CatalogService, ImageService, OrderService
from storefront.services.notify import notify_owner
from storefront.bootstrap import init_database
from storefront.cli import register_cli

# Blueprints
from storefront.auth import auth_bp
from storefront.admin import admin_bp
from storefront.api.routes.item_routes import api_items
from storefront.api.routes.order_routes import order_bp
from storefront.client import client_bp
from storefront import models as _models  # noqa: F401

MIGRATIONS_DIR = os.path.join(BASE_DIR, "migrations")


def create_app(config_class=Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.json.ensure_ascii = False  # UTF-8 JSON, emoji statuses stay readable

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db, directory=MIGRATIONS_DIR)
    login_manager.init_app(app)
    login_manager.session_protection = None  # bearer tokens only, no session cookie
    bcrypt.init_app(app)
    init_mail(app)
    storage.init_app(app, db)
    cors.init_app(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)
    register_error_handlers(app)

    # Services share the one storage adapter
    images = ImageService(
        app.config["UPLOAD_FOLDER"],
        max_size=app.config.get("IMAGE_MAX_SIZE", 800),
        mode=app.config.get("IMAGE_RESIZE_MODE", "inside"),
    )
    app.extensions["catalog"] = CatalogService(storage, images)
    app.extensions["orders"] = OrderService(storage, notifier=notify_owner)
    app.extensions["admin_auth"] = AdminAuthService(storage)

    # Register blueprints (client last: it owns the SPA catch-all)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(api_items)
    app.register_blueprint(order_bp)
    app.register_blueprint(client_bp)

    register_cli(app)

    with app.app_context():
        storage.open()
        if app.config.get("AUTO_INIT_DB", True):
            init_database()

    return app
