import logging
import smtplib
from email.mime.text import MIMEText

from config import SMTP_FROM_EMAIL, SMTP_HOST, SMTP_PASSWORD, SMTP_PORT, SMTP_USER
from models.order import Order

logger = logging.getLogger(__name__)


def is_configured() -> bool:
    return bool(SMTP_HOST and SMTP_USER and SMTP_PASSWORD)


def init_email_service() -> bool:
    if not is_configured():
        logger.warning("SMTP not configured, outgoing email is disabled")
        return False
    logger.info("Email service ready (%s:%s as %s)", SMTP_HOST, SMTP_PORT, SMTP_FROM_EMAIL or SMTP_USER)
    return True


def order_snapshot(order: Order) -> dict:
    """Plain-data copy of an order that is safe to hand to a background thread."""
    return {
        "order_uid": order.order_uid,
        "status": order.status.value if hasattr(order.status, "value") else str(order.status),
        "payment_method": order.payment_method,
        "total": order.total,
        "items": [{"name": it.name, "quantity": it.quantity, "price": it.price} for it in order.items],
    }


def send_order_email(recipient_email: str | None, order_data: dict, headline: str = "Your order has been placed.") -> None:
    if not recipient_email or not is_configured():
        return
    items = order_data.get("items", [])
    items_text = "\n".join([f"- {it['name']} x{it['quantity']} ({float(it['price']):.2f})" for it in items]) or "-"
    text = (
        f"{headline}\n\n"
        f"Order ID: {order_data.get('order_uid', '-')}\n"
        f"Status: {order_data.get('status', '-')}\n"
        f"Payment: {order_data.get('payment_method') or '-'}\n"
        f"Total: {float(order_data.get('total', 0)):.2f}\n\n"
        f"Items:\n{items_text}\n"
    )
    try:
        send_email(recipient_email, f"Medzy Order {order_data.get('order_uid', '-')}", text)
    except Exception:
        # Email failures should not block the order flow.
        logger.exception("Email send failed for order %s to %s", order_data.get("order_uid"), recipient_email)


def send_reminder_email(email: str | None, title: str, body: str) -> None:
    if not email or not is_configured():
        return
    text = f"{title}\n\n{body}\n\nOpen Medzy to review your medicines."
    try:
        send_email(email, title, text)
    except Exception:
        logger.exception("Reminder email send failed to %s", email)


def send_email(recipient_email: str, subject: str, body: str) -> None:
    msg = MIMEText(body)
    msg["Subject"] = subject
    msg["From"] = SMTP_FROM_EMAIL or SMTP_USER
    msg["To"] = recipient_email
    if SMTP_PORT == 465:
        with smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, timeout=10) as server:
            server.login(SMTP_USER, SMTP_PASSWORD)
            server.send_message(msg)
        return
    with smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=10) as server:
        server.ehlo()
        if server.has_extn("starttls"):
            server.starttls()
            server.ehlo()
        server.login(SMTP_USER, SMTP_PASSWORD)
        server.send_message(msg)
