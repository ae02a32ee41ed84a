# storefront/services/notify.py
from flask import current_app
from flask_mail import Message

from storefront.extensions import mail


def send_email(subject, recipients, body, sender=None):
    """Plain-text UTF-8 e-mail through Flask-Mail."""
    if isinstance(recipients, str):
        recipients = [recipients]

    msg = Message(
        subject=subject or "",
        recipients=list(recipients or []),
        body=body or "",
        sender=sender,
    )
    msg.charset = "utf-8"
    mail.send(msg)
    return msg


def _order_summary(placed) -> str:
    draft = placed.draft
    lines = [
        f"Order #{placed.order_id}",
        f"Tracking code: {placed.tracking_id}",
        f"Customer: {draft.customer_name}",
    ]
    if draft.instagram:
        lines.append(f"Instagram: {draft.instagram}")
    if draft.phone:
        lines.append(f"Phone: {draft.phone}")
    lines += [
        f"Delivery: {draft.delivery_method} (charge {draft.delivery_charge:.2f})",
        f"Payment: {draft.payment_method}",
        "",
        "Items:",
    ]
    for it in placed.items:
        lines.append(f"• {it['name']} × {it['quantity']} ({it['status']})")
    lines += ["", f"Total: {placed.total_price}"]
    return "\n".join(lines)


def notify_owner(placed) -> None:
    """Tell the shop owner about a new order; never fails the placement."""
    owner = current_app.config.get("ORDER_NOTIFY_EMAIL")
    if not owner:
        return
    try:
        send_email(
            subject=f"New order #{placed.order_id} ({placed.tracking_id})",
            recipients=[owner],
            body=_order_summary(placed),
        )
        current_app.logger.info("[ORDER] owner notified about #%s", placed.order_id)
    except Exception:
        current_app.logger.exception("Owner e-mail failed")
