import logging
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from dependencies import ensure_staff, get_current_user
from models.notification import NotificationType
from models.order import Order, OrderStatus, PaymentStatus
from models.payment import Payment, PaymentMethod, PaymentState
from models.revenue import RevenueAdjustment
from models.user import User, STAFF_ROLES
from routers.revenue_adjustments import refunded_total
from schemas.payment import PaymentCreate, PaymentOut
from services.notifications import notify_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["Payments"])


def _generate_transaction_id() -> str:
    return f"TXN-{datetime.utcnow().strftime('%Y%m%d%H%M%S')}-{uuid.uuid4().hex[:8].upper()}"


def _get_payment(db: Session, payment_id: int) -> Payment:
    payment = db.query(Payment).filter(Payment.id == payment_id).first()
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    return payment


@router.post("/", response_model=PaymentOut, status_code=201)
def create_payment(
    data: PaymentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Record a payment against one of the caller's orders."""
    order = db.query(Order).filter(Order.id == data.order_id, Order.user_id == current_user.id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    if order.status == OrderStatus.cancelled:
        raise HTTPException(status_code=400, detail="Cannot pay for a cancelled order")
    try:
        method = PaymentMethod(data.method)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid payment method")
    if round(data.amount, 2) != round(order.total or 0, 2):
        raise HTTPException(status_code=400, detail=f"Payment amount must equal order total {order.total:.2f}")
    existing = (
        db.query(Payment)
        .filter(Payment.order_id == order.id, Payment.status != PaymentState.failed)
        .first()
    )
    if existing:
        raise HTTPException(status_code=400, detail="A payment already exists for this order")

    payment = Payment(
        transaction_id=_generate_transaction_id(),
        order_id=order.id,
        user_id=current_user.id,
        amount=round(data.amount, 2),
        method=method,
        status=PaymentState.pending,
        reference=data.reference,
    )
    order.payment_method = method.value
    db.add(payment)
    db.commit()
    db.refresh(payment)
    logger.info("Payment %s recorded for order %s", payment.transaction_id, order.order_uid)
    return payment


@router.get("/", response_model=list[PaymentOut])
def list_payments(
    order_id: int | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    q = db.query(Payment)
    if current_user.role not in STAFF_ROLES:
        q = q.filter(Payment.user_id == current_user.id)
    if order_id is not None:
        q = q.filter(Payment.order_id == order_id)
    return q.order_by(Payment.created_at.desc(), Payment.id.desc()).all()


@router.put("/{payment_id}/confirm", response_model=PaymentOut)
def confirm_payment(
    payment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_staff(current_user)
    payment = _get_payment(db, payment_id)
    if payment.status != PaymentState.pending:
        raise HTTPException(status_code=400, detail=f"Payment is already {payment.status.value}")
    payment.status = PaymentState.completed
    order = db.query(Order).filter(Order.id == payment.order_id).first()
    if order:
        order.payment_status = PaymentStatus.paid
    payer = db.query(User).filter(User.id == payment.user_id).first()
    if payer:
        notify_user(
            db,
            payer,
            NotificationType.payment,
            "Payment Confirmed",
            f"Payment {payment.transaction_id} of {payment.amount:.2f} confirmed",
        )
    db.commit()
    db.refresh(payment)
    return payment


@router.put("/{payment_id}/refund", response_model=PaymentOut)
def refund_payment(
    payment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_staff(current_user)
    payment = _get_payment(db, payment_id)
    if payment.status != PaymentState.completed:
        raise HTTPException(status_code=400, detail="Only completed payments can be refunded")
    order = db.query(Order).filter(Order.id == payment.order_id).first()
    if order and round(refunded_total(db, order.id) + payment.amount, 2) > round(order.total or 0, 2):
        raise HTTPException(status_code=400, detail="Refund cannot exceed the order total")
    payment.status = PaymentState.refunded
    if order:
        order.payment_status = PaymentStatus.refunded
    db.add(
        RevenueAdjustment(
            amount=-payment.amount,
            reason=f"Refund for payment {payment.transaction_id}",
            order_id=payment.order_id,
            created_by_id=current_user.id,
        )
    )
    payer = db.query(User).filter(User.id == payment.user_id).first()
    if payer:
        notify_user(
            db,
            payer,
            NotificationType.payment,
            "Payment Refunded",
            f"{payment.amount:.2f} refunded for payment {payment.transaction_id}",
        )
    db.commit()
    db.refresh(payment)
    logger.info("Payment %s refunded by user #%s", payment.transaction_id, current_user.id)
    return payment
