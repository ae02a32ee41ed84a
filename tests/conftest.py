import io

import pytest
from PIL import Image

from storefront.app import create_app
from storefront.config import Config
from storefront.extensions import storage


def make_config(tmp_path, **overrides):
    class TestConfig(Config):
        TESTING = True
        SECRET_KEY = "test-secret"
        SQLALCHEMY_DATABASE_URI = "sqlite:///" + str(tmp_path / "storefront-test.db")
        STORAGE_TRANSACTIONS = True
        AUTO_INIT_DB = True
        UPLOAD_FOLDER = str(tmp_path / "uploads")
        FRONTEND_DIR = str(tmp_path / "build")
        ADMIN_USERNAME = "admin"
        ADMIN_PASSWORD = "adminpass"
        BCRYPT_LOG_ROUNDS = 4
        MAIL_SUPPRESS_SEND = True
        MAIL_DEFAULT_SENDER = "shop@example.com"
        ORDER_NOTIFY_EMAIL = None

    for key, value in overrides.items():
        setattr(TestConfig, key, value)
    return TestConfig


@pytest.fixture
def make_app(tmp_path):
    apps = []

    def _make(**overrides):
        app = create_app(make_config(tmp_path, **overrides))
        apps.append(app)
        return app

    yield _make

    for app in apps:
        with app.app_context():
            storage.close()


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_token(app):
    with app.app_context():
        return app.extensions["admin_auth"].issue_token("admin")


@pytest.fixture
def auth_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def make_item(app):
    def _make(name="Bear", price=10, stock=3, **kwargs):
        with app.app_context():
            return app.extensions["catalog"].create_item(name=name, price=price, stock=stock, **kwargs)

    return _make


def count_rows(app, table: str) -> int:
    with app.app_context():
        return storage.execute(f"SELECT COUNT(*) AS n FROM {table}").first()["n"]


def order_payload(*lines, **overrides):
    body = {
        "customer_name": "Aisha",
        "instagram": "@aisha",
        "delivery_method": "delivery",
        "payment_method": "transfer",
        "delivery_charge": 0,
        "orderItems": [{"item_id": item_id, "quantity": qty} for item_id, qty in lines],
    }
    body.update(overrides)
    return body


def image_bytes(size=(1600, 1200), fmt="JPEG", color=(200, 30, 30)) -> io.BytesIO:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    buf.seek(0)
    return buf
