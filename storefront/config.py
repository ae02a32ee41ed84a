# storefront/config.py
import os
from dotenv import load_dotenv

BASE_DIR = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(BASE_DIR, ".env"))

INSTANCE_DIR = os.path.join(BASE_DIR, "instance")


def _env(key: str, default=None):
    v = os.getenv(key)
    return v if v not in (None, "", "None") else default


def _env_bool(key: str, default: bool = False) -> bool:
    v = os.getenv(key)
    if v in (None, "", "None"):
        return default
    return str(v).strip().lower() in ("1", "true", "t", "yes", "y", "on")


def _env_int(key: str, default: int) -> int:
    try:
        return int(_env(key, default))
    except (TypeError, ValueError):
        return default


def _env_list(key: str, default: list[str]) -> list[str]:
    v = _env(key)
    if v is None:
        return default
    return [part.strip() for part in v.split(",") if part.strip()]


def _resolve_sqlite_uri(db_url: str | None) -> str:
    """Embedded SQLite by default; relative sqlite paths are anchored to the package."""
    if not db_url:
        os.makedirs(INSTANCE_DIR, exist_ok=True)
        db_path = os.path.join(INSTANCE_DIR, "storefront.db")
        return "sqlite:///" + db_path.replace("\\", "/")

    if db_url.startswith("sqlite:///"):
        raw_path = db_url.replace("sqlite:///", "", 1)
        if not raw_path or raw_path == ":memory:":
            return db_url
        if not os.path.isabs(raw_path):
            raw_path = os.path.join(BASE_DIR, raw_path)
        db_path = os.path.normpath(raw_path)
        os.makedirs(os.path.dirname(db_path), exist_ok=True)
        return "sqlite:///" + db_path.replace("\\", "/")

    # remote or managed SQL stores are passed through untouched
    return db_url


class Config:
    SECRET_KEY = _env("SECRET_KEY", "dev-please-change-me")

    SQLALCHEMY_DATABASE_URI = _resolve_sqlite_uri(_env("DATABASE_URL"))
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # False -> order writes run statement by statement with a compensating delete
    STORAGE_TRANSACTIONS = _env_bool("STORAGE_TRANSACTIONS", True)
    AUTO_INIT_DB = _env_bool("AUTO_INIT_DB", True)

    UPLOAD_FOLDER = _env("UPLOAD_FOLDER", os.path.join(BASE_DIR, "static", "uploads"))
    FRONTEND_DIR = _env("FRONTEND_DIR", os.path.join(BASE_DIR, "build"))
    IMAGE_MAX_SIZE = _env_int("IMAGE_MAX_SIZE", 800)
    IMAGE_RESIZE_MODE = _env("IMAGE_RESIZE_MODE", "inside")  # inside | cover
    MAX_IMAGES_PER_UPLOAD = _env_int("MAX_IMAGES_PER_UPLOAD", 5)

    ADMIN_TOKEN_SALT = _env("ADMIN_TOKEN_SALT", "storefront-admin")
    ADMIN_TOKEN_MAX_AGE = _env_int("ADMIN_TOKEN_MAX_AGE", 4 * 60 * 60)
    ADMIN_USERNAME = _env("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD = _env("ADMIN_PASSWORD", "adminpass")

    CORS_ORIGINS = _env_list("CORS_ORIGINS", ["*"])

    MAIL_SERVER = _env("MAIL_SERVER", "localhost")
    MAIL_PORT = _env_int("MAIL_PORT", 25)
    MAIL_USE_SSL = _env_bool("MAIL_USE_SSL", False)
    MAIL_USE_TLS = _env_bool("MAIL_USE_TLS", False)
    MAIL_USERNAME = _env("MAIL_USERNAME")
    MAIL_PASSWORD = _env("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = _env("MAIL_DEFAULT_SENDER", _env("MAIL_USERNAME"))
    MAIL_SUPPRESS_SEND = _env_bool("MAIL_SUPPRESS_SEND", False)
    ORDER_NOTIFY_EMAIL = _env("ORDER_NOTIFY_EMAIL")
