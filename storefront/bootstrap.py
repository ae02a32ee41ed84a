# storefront/bootstrap.py
"""Schema creation, legacy data fix-ups and the default admin, run at startup."""
from flask import current_app

from storefront.extensions import db, storage

# copy items.image_url into the gallery table unless the pair is already there
_LEGACY_IMAGES_SQL = """
    INSERT INTO item_images (item_id, image_url)
    SELECT i.id, i.image_url
    FROM items i
    WHERE i.image_url IS NOT NULL AND i.image_url != ''
      AND NOT EXISTS (
          SELECT 1 FROM item_images ii
          WHERE ii.item_id = i.id AND ii.image_url = i.image_url
      )
"""


def migrate_legacy_images() -> int:
    res = storage.execute(_LEGACY_IMAGES_SQL)
    if res.rows_affected:
        current_app.logger.info("[DB] copied %s legacy image_url value(s) into item_images", res.rows_affected)
    return res.rows_affected


def seed_admin() -> bool:
    cfg = current_app.config
    _, created = current_app.extensions["admin_auth"].ensure_admin(
        cfg.get("ADMIN_USERNAME", "admin"), cfg.get("ADMIN_PASSWORD", "adminpass")
    )
    if created:
        current_app.logger.info("[DB] seeded default admin %r", cfg.get("ADMIN_USERNAME", "admin"))
    return created


def init_database() -> None:
    """Idempotent; call inside an app context."""
    db.create_all()
    migrate_legacy_images()
    seed_admin()
    current_app.logger.info("[DB] database initialized")
