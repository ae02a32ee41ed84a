# storefront/extensions.py
from __future__ import annotations

import socket
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_bcrypt import Bcrypt
from flask_migrate import Migrate
from flask_cors import CORS
from flask_mail import Mail

from storefront.storage import Storage

# Keep extension instances in one place to avoid circular imports
db = SQLAlchemy()
login_manager = LoginManager()
bcrypt = Bcrypt()
migrate = Migrate()
cors = CORS()
mail = Mail()
storage = Storage(db)


def _coerce_bool(v, default=False) -> bool:
    if v is None:
        return default
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    return s in ("1", "true", "t", "yes", "y", "on")


def _clean_hostname(server: str | None) -> str:
    """Return hostname without scheme/path/spaces."""
    s = (server or "").strip()
    if "://" in s:
        s = s.split("://", 1)[1]
    if "/" in s:
        s = s.split("/", 1)[0]
    return s


def init_mail(app):
    """
    Initialize Flask-Mail with the MAIL_* settings sanitized: hostname without
    scheme, SSL winning over TLS, a port that matches the chosen transport.
    """
    cfg = app.config

    server = _clean_hostname(cfg.get("MAIL_SERVER")) or "localhost"
    cfg["MAIL_SERVER"] = server

    use_ssl = _coerce_bool(cfg.get("MAIL_USE_SSL"), False)
    use_tls = _coerce_bool(cfg.get("MAIL_USE_TLS"), False)
    if use_ssl and use_tls:
        use_tls = False
        cfg["MAIL_USE_TLS"] = False
        app.logger.info("MAIL_USE_SSL and MAIL_USE_TLS were True -> disabling TLS (prefer SSL).")

    try:
        int(cfg.get("MAIL_PORT"))
    except (TypeError, ValueError):
        port = 465 if use_ssl else (587 if use_tls else 25)
        cfg["MAIL_PORT"] = port
        app.logger.info("MAIL_PORT was invalid -> setting %s (SSL=%s, TLS=%s).", port, use_ssl, use_tls)

    if not cfg.get("MAIL_DEFAULT_SENDER"):
        cfg["MAIL_DEFAULT_SENDER"] = cfg.get("MAIL_USERNAME")

    # DNS sanity check only matters when mail actually leaves the process
    if cfg.get("ORDER_NOTIFY_EMAIL") and not _coerce_bool(cfg.get("MAIL_SUPPRESS_SEND"), False):
        try:
            infos = socket.getaddrinfo(server, cfg.get("MAIL_PORT") or 0, proto=socket.IPPROTO_TCP)
            if not infos:
                app.logger.warning("DNS resolve for '%s' returned no IP addresses.", server)
        except OSError as e:
            app.logger.error("DNS resolve failed for MAIL_SERVER='%s': %s", server, e)

    app.logger.info(
        "MAIL cfg -> server=%s port=%s ssl=%s tls=%s sender=%s notify=%s",
        cfg.get("MAIL_SERVER"),
        cfg.get("MAIL_PORT"),
        bool(cfg.get("MAIL_USE_SSL")),
        bool(cfg.get("MAIL_USE_TLS")),
        cfg.get("MAIL_DEFAULT_SENDER"),
        cfg.get("ORDER_NOTIFY_EMAIL"),
    )

    mail.init_app(app)
