from storefront.extensions import db

IN_STOCK = "in-stock"
PRE_ORDER = "pre-order"


def status_for_stock(stock: int) -> str:
    """An item with nothing on the shelf can only be pre-ordered."""
    return PRE_ORDER if stock == 0 else IN_STOCK


class Item(db.Model):
    __tablename__ = "items"
    __table_args__ = (
        db.CheckConstraint(f"status IN ('{IN_STOCK}', '{PRE_ORDER}')", name="ck_items_status"),
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    # single preview image kept for older clients; the gallery lives in item_images
    image_url = db.Column(db.String(255), nullable=True)
    status = db.Column(db.String(20), nullable=False, default=PRE_ORDER)
    description = db.Column(db.Text, nullable=True, default="")
    stock = db.Column(db.Integer, nullable=False, default=0)

    images = db.relationship(
        "ItemImage",
        backref="item",
        lazy=True,
        order_by="ItemImage.id",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Item {self.name} ({self.status})>"
