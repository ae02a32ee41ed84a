# storefront/models/order.py
from datetime import datetime, timezone
from storefront.extensions import db

DEFAULT_ORDER_STATUS = "waiting for updates"
DELIVERY_METHODS = ("pickup", "delivery")
PAYMENT_METHODS = ("transfer", "cash")


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Order(db.Model):
    __tablename__ = "orders"
    __table_args__ = (
        db.CheckConstraint("delivery_method IN ('pickup', 'delivery')", name="ck_orders_delivery"),
        db.CheckConstraint("payment_method IN ('transfer', 'cash')", name="ck_orders_payment"),
    )

    id = db.Column(db.Integer, primary_key=True)

    customer_name = db.Column(db.String(120), nullable=False)
    instagram = db.Column(db.String(120), nullable=True)
    phone = db.Column(db.String(40), nullable=True)

    delivery_method = db.Column(db.String(20), nullable=False)
    payment_method = db.Column(db.String(20), nullable=False)
    delivery_charge = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    tracking_id = db.Column(db.String(11), unique=True, index=True, nullable=False)
    # free-form, written by the admin panel
    status = db.Column(db.Text, nullable=False, default=DEFAULT_ORDER_STATUS)

    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    items = db.relationship(
        "OrderItem", backref="order", lazy=True, cascade="all, delete", passive_deletes=True
    )

    def __repr__(self):
        return f"<Order #{self.id} – {self.customer_name} – {self.tracking_id}>"
