# storefront/services/catalog.py
from __future__ import annotations

import re

from flask import current_app
from sqlalchemy import update

from storefront.errors import NotFound, StorageError, ValidationError
from storefront.models import Item, ItemImage
from storefront.models.item import status_for_stock
from storefront.services.coercion import clamped_stock, strict_price, to_money

_ID_RE = re.compile(r"^\d+$")

_ITEM_COLUMNS = "i.id, i.name, i.price, i.image_url, i.status, i.description, i.stock"


def parse_item_id(raw, *, invalid=ValidationError) -> int:
    """Ids arrive as path strings; only plain digit literals are accepted."""
    s = str(raw).strip() if raw is not None else ""
    if not _ID_RE.match(s) or int(s) <= 0:
        if invalid is NotFound:
            raise NotFound("Item not found")
        raise ValidationError("Invalid item ID")
    return int(s)


def _item_dict(row: dict) -> dict:
    out = dict(row)
    out["price"] = float(to_money(row.get("price")))
    out["description"] = row.get("description") or ""
    return out


def _clean_name(val) -> str:
    return str(val).replace("\u00a0", " ").strip() if val is not None else ""


class CatalogService:
    def __init__(self, storage, images=None):
        self.storage = storage
        self.images = images

    # ── reads ────────────────────────────────────────────────────────────────

    def list_items(self) -> list[dict]:
        res = self.storage.execute(f"""
            SELECT {_ITEM_COLUMNS},
                   (SELECT ii.image_url FROM item_images ii
                     WHERE ii.item_id = i.id ORDER BY ii.id LIMIT 1) AS preview_image_url
            FROM items i
            ORDER BY i.id
        """)
        return [_item_dict(r) for r in res.rows]

    def get_item(self, item_id) -> dict:
        item_id = parse_item_id(item_id, invalid=NotFound)
        row = self.storage.execute(
            f"SELECT {_ITEM_COLUMNS} FROM items i WHERE i.id = :id", {"id": item_id}
        ).first()
        if row is None:
            raise NotFound("Item not found")
        item = _item_dict(row)
        images = self.storage.execute(
            "SELECT image_url FROM item_images WHERE item_id = :id ORDER BY id", {"id": item_id}
        )
        item["images"] = [r["image_url"] for r in images.rows]
        return item

    def item_exists(self, item_id: int) -> bool:
        res = self.storage.execute("SELECT 1 AS hit FROM items WHERE id = :id", {"id": item_id})
        return res.first() is not None

    # ── writes ───────────────────────────────────────────────────────────────

    def create_item(self, name, price, description=None, stock=None, images=None, image_url=None) -> int:
        name = _clean_name(name)
        if not name or price is None:
            raise ValidationError("Name and price are required")
        price_dec = strict_price(price)
        stock_num = clamped_stock(stock)

        images = images if images is not None else []
        if not isinstance(images, list) or not all(isinstance(u, str) for u in images):
            raise ValidationError("Images must be a list of URLs")
        urls = [u.strip() for u in images if u.strip()]
        # the first gallery image doubles as the legacy single image
        legacy_url = (image_url or "").strip() or (urls[0] if urls else None)

        item = Item(
            name=name,
            price=price_dec,
            image_url=legacy_url,
            status=status_for_stock(stock_num),
            description=(description or ""),
            stock=stock_num,
        )
        with self.storage.atomic():
            item_id = self.storage.insert(item)
            for url in urls:
                self.storage.insert(ItemImage(item_id=item_id, image_url=url))

        current_app.logger.info("[CATALOG] created item #%s %r (stock=%s)", item_id, name, stock_num)
        return item_id

    def update_item(self, item_id, name, price, description=None, stock=None, image_url=None) -> None:
        name = _clean_name(name)
        if not name or price is None:
            raise ValidationError("Name and price are required")
        item_id = parse_item_id(item_id)
        price_dec = strict_price(price)
        stock_num = clamped_stock(stock)

        res = self.storage.execute(
            update(Item)
            .where(Item.id == item_id)
            .values(
                name=name,
                price=price_dec,
                image_url=(image_url or None),
                description=(description or ""),
                stock=stock_num,
                status=status_for_stock(stock_num),
            )
        )
        if res.rows_affected == 0:
            raise NotFound("Item not found")
        current_app.logger.info("[CATALOG] updated item #%s (stock=%s)", item_id, stock_num)

    def add_image(self, item_id: int, url: str) -> int:
        return self.storage.insert(ItemImage(item_id=item_id, image_url=url))

    # ── uploads ──────────────────────────────────────────────────────────────

    def upload_image(self, file_storage) -> str:
        return self.images.save_upload(file_storage, field="image")

    def upload_images(self, files: list) -> list[str]:
        limit = current_app.config.get("MAX_IMAGES_PER_UPLOAD", 5)
        files = [f for f in files if f and f.filename]
        if len(files) > limit:
            raise ValidationError(f"At most {limit} images per upload")
        urls: list[str] = []
        try:
            for fs in files:
                urls.append(self.images.save_upload(fs, field="images"))
        except Exception:
            for url in urls:
                self.images.discard(url)
            raise
        return urls

    def upload_item_image(self, item_id, file_storage) -> str:
        item_id = parse_item_id(item_id, invalid=NotFound)
        if not self.item_exists(item_id):
            raise NotFound("Item not found")
        url = self.images.save_upload(file_storage, field="image")
        try:
            self.add_image(item_id, url)
        except StorageError:
            self.images.discard(url)
            raise
        return url
