from storefront.extensions import db


class ItemImage(db.Model):
    __tablename__ = "item_images"

    id = db.Column(db.Integer, primary_key=True)
    item_id = db.Column(
        db.Integer, db.ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    image_url = db.Column(db.String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<ItemImage {self.item_id} - {self.image_url}>"
