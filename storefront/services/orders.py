# storefront/services/orders.py
"""Order placement, tracking and admin management.

Placing an order writes one ``orders`` row and one ``order_items`` row per
line. The sequence has to look atomic to readers:

* where the store supports transactions, the whole sequence runs in one and
  is rolled back on failure;
* otherwise rows are committed one by one and, if a later insert fails, the
  order (and any of its lines) is deleted again. A crash between the failed
  insert and that delete leaves an empty order behind.

Tracking codes are not checked for collisions before the insert; the unique
constraint on ``orders.tracking_id`` rejects a duplicate and the placement
fails like any other storage error (no regenerate-and-retry).
"""
from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, field
from decimal import Decimal

from flask import current_app
from sqlalchemy import bindparam, text

from storefront.errors import NotFound, StorageError, ValidationError
from storefront.models import Order, OrderItem
from storefront.models.order import DEFAULT_ORDER_STATUS, DELIVERY_METHODS, PAYMENT_METHODS
from storefront.services.coercion import MAX_INT, format_money, round_money, strict_price, to_money

TRACKING_PREFIX = "POA"
TRACKING_ALPHABET = string.ascii_uppercase + string.digits
TRACKING_LENGTH = 8

PUBLIC_CONFIRMATION = "Your order has been confirmed!"
ADMIN_CONFIRMATION = "Order created successfully"

_LINES_SQL = """
    SELECT oi.order_id, i.name, i.status, i.price, oi.quantity
    FROM order_items oi
    JOIN items i ON oi.item_id = i.id
    WHERE oi.order_id IN :order_ids
    ORDER BY oi.id
"""


def generate_tracking_code() -> str:
    return TRACKING_PREFIX + "".join(secrets.choice(TRACKING_ALPHABET) for _ in range(TRACKING_LENGTH))


def order_total(lines: list[dict], delivery_charge) -> Decimal:
    """Σ(price × quantity) + delivery charge, rounded to cents."""
    subtotal = sum(
        (to_money(line["price"]) * int(line["quantity"]) for line in lines), Decimal("0")
    )
    return round_money(subtotal + to_money(delivery_charge))


def _text(val) -> str:
    return str(val).replace("\u00a0", " ").strip() if val is not None else ""


def _positive_int(val, message: str) -> int:
    if isinstance(val, bool):
        raise ValidationError(message)
    # JSON clients may send 2.0 for 2
    if isinstance(val, float) and val.is_integer():
        val = int(val)
    if isinstance(val, int):
        num = val
    elif isinstance(val, str) and val.strip().isdecimal() and len(val.strip()) <= 10:
        num = int(val.strip())
    else:
        raise ValidationError(message)
    if num <= 0 or num > MAX_INT:
        raise ValidationError(message)
    return num


def _timestamp(val):
    return val.isoformat() if hasattr(val, "isoformat") else val


def _order_dict(row: dict) -> dict:
    out = dict(row)
    out["delivery_charge"] = float(to_money(row.get("delivery_charge")))
    out["created_at"] = _timestamp(row.get("created_at"))
    return out


# ── placement input / results ───────────────────────────────────────────────

@dataclass
class OrderLine:
    item_id: int
    quantity: int


@dataclass
class OrderDraft:
    customer_name: str
    instagram: str | None
    phone: str | None
    delivery_method: str
    payment_method: str
    delivery_charge: Decimal
    lines: list[OrderLine]

    @classmethod
    def from_payload(cls, data: dict) -> "OrderDraft":
        """Validate a placement request body; nothing is written before this passes."""
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")

        customer_name = _text(data.get("customer_name"))
        if not customer_name:
            raise ValidationError("Customer name is required")

        instagram = _text(data.get("instagram")) or None
        phone = _text(data.get("phone")) or None
        if not (instagram or phone):
            raise ValidationError("Please provide either Instagram username or Phone number")

        delivery_method = _text(data.get("delivery_method"))
        if delivery_method not in DELIVERY_METHODS:
            raise ValidationError(f"Delivery method must be one of: {', '.join(DELIVERY_METHODS)}")
        payment_method = _text(data.get("payment_method"))
        if payment_method not in PAYMENT_METHODS:
            raise ValidationError(f"Payment method must be one of: {', '.join(PAYMENT_METHODS)}")

        raw_charge = data.get("delivery_charge")
        if raw_charge is None or (isinstance(raw_charge, str) and not raw_charge.strip()):
            delivery_charge = Decimal("0.00")
        else:
            delivery_charge = strict_price(raw_charge, "Delivery charge")

        raw_lines = data.get("orderItems")
        if not isinstance(raw_lines, list) or not raw_lines:
            raise ValidationError("Order must have at least one item")
        lines = []
        for raw in raw_lines:
            if not isinstance(raw, dict):
                raise ValidationError("Each order item needs item_id and quantity")
            lines.append(OrderLine(
                item_id=_positive_int(raw.get("item_id"), "Order item has an invalid item_id"),
                quantity=_positive_int(raw.get("quantity"), "Quantity must be a positive integer"),
            ))

        return cls(
            customer_name=customer_name,
            instagram=instagram,
            phone=phone,
            delivery_method=delivery_method,
            payment_method=payment_method,
            delivery_charge=delivery_charge,
            lines=lines,
        )


@dataclass
class Placed:
    order_id: int
    tracking_id: str
    draft: OrderDraft
    items: list[dict] = field(default_factory=list)
    total_price: str = "0.00"

    def to_dict(self, message: str = PUBLIC_CONFIRMATION) -> dict:
        return {
            "order_id": self.order_id,
            "tracking_id": self.tracking_id,
            "customer_name": self.draft.customer_name,
            "instagram": self.draft.instagram,
            "phone": self.draft.phone,
            "delivery_method": self.draft.delivery_method,
            "payment_method": self.draft.payment_method,
            "delivery_charge": float(self.draft.delivery_charge),
            "total_price": self.total_price,
            "items": self.items,
            "message": message,
        }


@dataclass
class PlacementFailed:
    reason: str
    order_id: int | None = None
    compensated: bool = False


# ── service ─────────────────────────────────────────────────────────────────

class OrderService:
    def __init__(self, storage, notifier=None):
        self.storage = storage
        self.notifier = notifier

    def place_order(self, draft: OrderDraft) -> Placed | PlacementFailed:
        tracking_id = generate_tracking_code()
        order = Order(
            customer_name=draft.customer_name,
            instagram=draft.instagram,
            phone=draft.phone,
            delivery_method=draft.delivery_method,
            payment_method=draft.payment_method,
            delivery_charge=draft.delivery_charge,
            tracking_id=tracking_id,
            status=DEFAULT_ORDER_STATUS,
        )

        if self.storage.supports_transactions:
            outcome = self._write_in_transaction(order, draft)
        else:
            outcome = self._write_with_compensation(order, draft)
        if isinstance(outcome, PlacementFailed):
            current_app.logger.error(
                "[ORDER] placement failed (order=%s, compensated=%s): %s",
                outcome.order_id, outcome.compensated, outcome.reason,
            )
            return outcome

        placed = self._confirm(outcome, tracking_id, draft)
        current_app.logger.info(
            "[ORDER] placed #%s %s total=%s", placed.order_id, tracking_id, placed.total_price
        )
        if self.notifier is not None:
            self.notifier(placed)
        return placed

    def _write_in_transaction(self, order: Order, draft: OrderDraft) -> int | PlacementFailed:
        try:
            with self.storage.transaction():
                order_id = self.storage.insert(order)
                for line in draft.lines:
                    self.storage.insert(OrderItem(
                        order_id=order_id, item_id=line.item_id, quantity=line.quantity
                    ))
        except StorageError as e:
            return PlacementFailed(reason=e.message)
        return order_id

    def _write_with_compensation(self, order: Order, draft: OrderDraft) -> int | PlacementFailed:
        try:
            order_id = self.storage.insert(order)
        except StorageError as e:
            return PlacementFailed(reason=e.message)

        # the order row is committed; whatever fails now has to be undone
        try:
            for line in draft.lines:
                self.storage.insert(OrderItem(
                    order_id=order_id, item_id=line.item_id, quantity=line.quantity
                ))
        except Exception as e:
            reason = e.message if isinstance(e, StorageError) else str(e) or type(e).__name__
            return PlacementFailed(
                reason=reason, order_id=order_id, compensated=self._compensate(order_id)
            )
        return order_id

    def _compensate(self, order_id: int) -> bool:
        """Undo a half-written order; lines first in case the store does not cascade."""
        try:
            self.storage.execute("DELETE FROM order_items WHERE order_id = :id", {"id": order_id})
            self.storage.execute("DELETE FROM orders WHERE id = :id", {"id": order_id})
        except StorageError:
            current_app.logger.exception("[ORDER] compensating delete of order #%s failed", order_id)
            return False
        current_app.logger.warning("[ORDER] rolled back order #%s by compensating delete", order_id)
        return True

    def _confirm(self, order_id: int, tracking_id: str, draft: OrderDraft) -> Placed:
        lines = self._lines_for([order_id]).get(order_id, [])
        return Placed(
            order_id=order_id,
            tracking_id=tracking_id,
            draft=draft,
            items=[{"name": r["name"], "status": r["status"], "quantity": r["quantity"]} for r in lines],
            total_price=format_money(order_total(lines, draft.delivery_charge)),
        )

    def _lines_for(self, order_ids: list[int]) -> dict[int, list[dict]]:
        if not order_ids:
            return {}
        stmt = text(_LINES_SQL).bindparams(bindparam("order_ids", expanding=True))
        res = self.storage.execute(stmt, {"order_ids": list(order_ids)})
        by_order: dict[int, list[dict]] = {}
        for row in res.rows:
            by_order.setdefault(row["order_id"], []).append(row)
        return by_order

    # ── admin ────────────────────────────────────────────────────────────────

    def list_orders(self) -> list[dict]:
        res = self.storage.execute("SELECT * FROM orders ORDER BY created_at DESC, id DESC")
        lines = self._lines_for([r["id"] for r in res.rows])
        orders = []
        for row in res.rows:
            order_lines = lines.get(row["id"], [])
            order = _order_dict(row)
            order["items"] = [
                {"name": r["name"], "status": r["status"], "quantity": r["quantity"]}
                for r in order_lines
            ]
            order["total_price"] = format_money(order_total(order_lines, row.get("delivery_charge")))
            orders.append(order)
        return orders

    def update_status(self, order_id: int, new_status) -> None:
        # any text is accepted; there is no transition table
        if new_status is None or not str(new_status).strip():
            raise ValidationError("Status is required")
        res = self.storage.execute(
            "UPDATE orders SET status = :status WHERE id = :id",
            {"status": str(new_status), "id": order_id},
        )
        if res.rows_affected == 0:
            raise NotFound("Order not found")
        current_app.logger.info("[ORDER] #%s status -> %r", order_id, new_status)

    def delete_order(self, order_id: int) -> None:
        with self.storage.atomic():
            self.storage.execute("DELETE FROM order_items WHERE order_id = :id", {"id": order_id})
            res = self.storage.execute("DELETE FROM orders WHERE id = :id", {"id": order_id})
            if res.rows_affected == 0:
                raise NotFound("Order not found")
        current_app.logger.info("[ORDER] deleted #%s", order_id)

    # ── public tracking ──────────────────────────────────────────────────────

    def track(self, tracking_code: str) -> dict:
        """Unknown codes are reported as ``{"found": False}``, never as an error."""
        row = self.storage.execute(
            "SELECT * FROM orders WHERE tracking_id = :code", {"code": (tracking_code or "").strip()}
        ).first()
        if row is None:
            return {"found": False}
        items = self.storage.execute(
            """
            SELECT i.name, oi.quantity
            FROM order_items oi
            JOIN items i ON oi.item_id = i.id
            WHERE oi.order_id = :id
            ORDER BY oi.id
            """,
            {"id": row["id"]},
        )
        return {"found": True, "order": _order_dict(row), "items": items.rows}
