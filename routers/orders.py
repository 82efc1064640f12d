import logging
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from dependencies import ensure_staff, get_current_user
from models.cart import CartItem
from models.medicine import Medicine
from models.notification import NotificationType
from models.order import Order, OrderItem, OrderStatus, PaymentStatus
from models.payment import PaymentMethod
from models.user import User, STAFF_ROLES
from schemas.order import CheckoutRequest, OrderOut, OrderStatusUpdate
from services.email_service import order_snapshot, send_order_email
from services.notifications import notify_user, run_in_background
from services.points import award_order_points

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Orders"])

ALLOWED_TRANSITIONS = {
    OrderStatus.pending: {OrderStatus.confirmed, OrderStatus.cancelled},
    OrderStatus.confirmed: {OrderStatus.shipped, OrderStatus.cancelled},
    OrderStatus.shipped: {OrderStatus.delivered},
    OrderStatus.delivered: set(),
    OrderStatus.cancelled: set(),
}


def _generate_order_uid() -> str:
    now = datetime.utcnow().strftime("%Y%m%d")
    short = uuid.uuid4().hex[:6].upper()
    return f"ORD-{now}-{short}"


def get_order_for_user(db: Session, order_id: int, user: User) -> Order:
    q = db.query(Order).filter(Order.id == order_id)
    if user.role not in STAFF_ROLES:
        q = q.filter(Order.user_id == user.id)
    order = q.first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


def _restock(db: Session, order: Order) -> None:
    med_ids = [it.medicine_id for it in order.items]
    meds = {m.id: m for m in db.query(Medicine).filter(Medicine.id.in_(med_ids)).all()}
    for it in order.items:
        med = meds.get(it.medicine_id)
        if med:
            med.stock = (med.stock or 0) + it.quantity


def apply_status(db: Session, order: Order, new_status: OrderStatus, actor: User) -> Order:
    old_status = order.status
    if new_status == old_status:
        return order
    if new_status not in ALLOWED_TRANSITIONS[old_status]:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot change order status from {old_status.value} to {new_status.value}",
        )
    if new_status == OrderStatus.cancelled:
        if order.payment_status == PaymentStatus.paid:
            raise HTTPException(status_code=400, detail="Refund the payment before cancelling a paid order")
        _restock(db, order)
    order.status = new_status
    order.last_status_updated_by_role = actor.role
    order.last_status_updated_at = datetime.utcnow()

    owner = db.query(User).filter(User.id == order.user_id).first()
    title = "Order Update"
    body = f"{order.order_uid} status is now {new_status.value.upper()}"
    if new_status == OrderStatus.delivered:
        points = award_order_points(db, order)
        if points:
            body += f". You earned {points} points"
    if owner:
        notify_user(db, owner, NotificationType.order, title, body)
    db.commit()
    db.refresh(order)
    logger.info("Order %s: %s -> %s by %s", order.order_uid, old_status.value, new_status.value, actor.role)
    if owner:
        run_in_background(send_order_email, owner.email, order_snapshot(order), f"Your order is now {new_status.value}.")
    return order


@router.post("/", response_model=OrderOut, status_code=201)
def checkout(
    data: CheckoutRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Turn the current cart into an order."""
    rows = db.query(CartItem).filter(CartItem.user_id == current_user.id).all()
    if not rows:
        raise HTTPException(status_code=400, detail="Cart is empty")
    if data.payment_method is not None:
        try:
            PaymentMethod(data.payment_method)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid payment method")

    shortages = []
    rx_missing = []
    for row in rows:
        med = row.medicine
        if (med.stock or 0) < row.quantity:
            shortages.append(f"{med.name} (available {med.stock or 0})")
        if med.rx_required and not data.prescriptions.get(med.id):
            rx_missing.append(med.name)
    if shortages:
        raise HTTPException(status_code=400, detail={"message": "Insufficient stock", "medicines": shortages})
    if rx_missing:
        raise HTTPException(
            status_code=400,
            detail={"message": "Prescription required for one or more medicines", "medicines": rx_missing},
        )

    delivery_address = (data.delivery_address or current_user.address or "").strip() or None
    order = Order(
        order_uid=_generate_order_uid(),
        user_id=current_user.id,
        status=OrderStatus.pending,
        total=round(sum(row.medicine.price * row.quantity for row in rows), 2),
        payment_method=data.payment_method,
        delivery_address=delivery_address,
    )
    db.add(order)
    db.flush()

    for row in rows:
        med = row.medicine
        db.add(
            OrderItem(
                order_id=order.id,
                medicine_id=med.id,
                name=med.name,
                quantity=row.quantity,
                price=med.price,
                rx_required=bool(med.rx_required),
                prescription_file=data.prescriptions.get(med.id),
            )
        )
        med.stock = (med.stock or 0) - row.quantity
        db.delete(row)

    notify_user(
        db,
        current_user,
        NotificationType.order,
        "Order Placed",
        f"{order.order_uid} placed successfully. Total {order.total:.2f}",
    )
    db.commit()
    db.refresh(order)
    logger.info("Order %s placed by user #%s (total %.2f)", order.order_uid, current_user.id, order.total)
    run_in_background(send_order_email, current_user.email, order_snapshot(order))
    return order


@router.get("/", response_model=list[OrderOut])
def list_orders(
    status: str | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Own orders; staff see every order."""
    q = db.query(Order)
    if current_user.role not in STAFF_ROLES:
        q = q.filter(Order.user_id == current_user.id)
    if status:
        try:
            q = q.filter(Order.status == OrderStatus(status))
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid order status")
    return q.order_by(Order.created_at.desc(), Order.id.desc()).all()


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_order_for_user(db, order_id, current_user)


@router.put("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    data: OrderStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_staff(current_user)
    order = get_order_for_user(db, order_id, current_user)
    try:
        new_status = OrderStatus(data.status)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid order status")
    return apply_status(db, order, new_status, current_user)


@router.post("/{order_id}/cancel", response_model=OrderOut)
def cancel_order(
    order_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    order = get_order_for_user(db, order_id, current_user)
    if order.user_id != current_user.id and current_user.role not in STAFF_ROLES:
        raise HTTPException(status_code=403, detail="Access denied")
    return apply_status(db, order, OrderStatus.cancelled, current_user)
