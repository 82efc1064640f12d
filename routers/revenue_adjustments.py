from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from dependencies import ensure_admin, get_current_user
from models.order import Order, OrderStatus, PaymentStatus
from models.revenue import RevenueAdjustment
from models.user import User
from schemas.revenue import RevenueAdjustmentCreate, RevenueAdjustmentOut, RevenueSummary

router = APIRouter(prefix="/api/revenue-adjustments", tags=["Revenue Adjustments"])


def refunded_total(db: Session, order_id: int) -> float:
    """Money already given back on an order (as a positive number)."""
    total = (
        db.query(func.coalesce(func.sum(RevenueAdjustment.amount), 0.0))
        .filter(RevenueAdjustment.order_id == order_id, RevenueAdjustment.amount < 0)
        .scalar()
    )
    return round(-float(total or 0), 2)


@router.post("/", response_model=RevenueAdjustmentOut, status_code=201)
def create_adjustment(
    data: RevenueAdjustmentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_admin(current_user)
    if data.amount == 0:
        raise HTTPException(status_code=400, detail="Amount must be non-zero")
    if data.order_id is not None and not db.query(Order).filter(Order.id == data.order_id).first():
        raise HTTPException(status_code=404, detail="Order not found")
    adjustment = RevenueAdjustment(
        amount=round(data.amount, 2),
        reason=data.reason.strip(),
        order_id=data.order_id,
        created_by_id=current_user.id,
    )
    db.add(adjustment)
    db.commit()
    db.refresh(adjustment)
    return adjustment


@router.get("/", response_model=list[RevenueAdjustmentOut])
def list_adjustments(
    order_id: int | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_admin(current_user)
    q = db.query(RevenueAdjustment)
    if order_id is not None:
        q = q.filter(RevenueAdjustment.order_id == order_id)
    return q.order_by(RevenueAdjustment.created_at.desc(), RevenueAdjustment.id.desc()).all()


@router.get("/summary", response_model=RevenueSummary)
def revenue_summary(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Gross is every delivered order that was paid, refunded or not.

    Refunds live only in the adjustments, so net adds every adjustment.
    """
    ensure_admin(current_user)
    gross, delivered = (
        db.query(func.coalesce(func.sum(Order.total), 0.0), func.count(Order.id))
        .filter(
            Order.status == OrderStatus.delivered,
            Order.payment_status.in_([PaymentStatus.paid, PaymentStatus.refunded]),
        )
        .one()
    )
    adj_total, adj_count = db.query(
        func.coalesce(func.sum(RevenueAdjustment.amount), 0.0), func.count(RevenueAdjustment.id)
    ).one()
    gross = round(float(gross or 0), 2)
    adj_total = round(float(adj_total or 0), 2)
    return RevenueSummary(
        gross_revenue=gross,
        adjustments_total=adj_total,
        net_revenue=round(gross + adj_total, 2),
        delivered_orders=int(delivered or 0),
        adjustment_count=int(adj_count or 0),
    )
