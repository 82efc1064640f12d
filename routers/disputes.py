import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from database import get_db
from dependencies import ensure_staff, get_current_user
from models.dispute import Dispute, DisputeStatus
from models.notification import NotificationType
from models.order import Order
from models.revenue import RevenueAdjustment
from models.user import User, STAFF_ROLES
from routers.revenue_adjustments import refunded_total
from schemas.dispute import DisputeCreate, DisputeOut, DisputeResolve
from services.notifications import notify_user
from services.uploads import remove_upload, store_image_or_400

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/disputes", tags=["Disputes"])


def _get_dispute_for_user(db: Session, dispute_id: int, user: User) -> Dispute:
    q = db.query(Dispute).filter(Dispute.id == dispute_id)
    if user.role not in STAFF_ROLES:
        q = q.filter(Dispute.user_id == user.id)
    dispute = q.first()
    if not dispute:
        raise HTTPException(status_code=404, detail="Dispute not found")
    return dispute


@router.post("/", response_model=DisputeOut, status_code=201)
def open_dispute(
    data: DisputeCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    order = db.query(Order).filter(Order.id == data.order_id, Order.user_id == current_user.id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    already_open = (
        db.query(Dispute)
        .filter(Dispute.order_id == order.id, Dispute.status == DisputeStatus.open)
        .first()
    )
    if already_open:
        raise HTTPException(status_code=400, detail="An open dispute already exists for this order")
    dispute = Dispute(
        order_id=order.id,
        user_id=current_user.id,
        reason=data.reason.strip(),
        description=data.description,
    )
    db.add(dispute)
    db.commit()
    db.refresh(dispute)
    logger.info("Dispute #%s opened on order %s", dispute.id, order.order_uid)
    return dispute


@router.get("/", response_model=list[DisputeOut])
def list_disputes(
    status: str | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    q = db.query(Dispute)
    if current_user.role not in STAFF_ROLES:
        q = q.filter(Dispute.user_id == current_user.id)
    if status:
        try:
            q = q.filter(Dispute.status == DisputeStatus(status))
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid dispute status")
    return q.order_by(Dispute.created_at.desc(), Dispute.id.desc()).all()


@router.post("/{dispute_id}/evidence", response_model=DisputeOut)
async def upload_evidence(
    dispute_id: int,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    dispute = _get_dispute_for_user(db, dispute_id, current_user)
    if dispute.status != DisputeStatus.open:
        raise HTTPException(status_code=400, detail="Dispute is already closed")
    stored = await store_image_or_400(file, "disputes")
    previous = dispute.evidence_url
    dispute.evidence_url = stored.url
    db.commit()
    db.refresh(dispute)
    remove_upload(previous)
    return dispute


@router.put("/{dispute_id}/resolve", response_model=DisputeOut)
def resolve_dispute(
    dispute_id: int,
    data: DisputeResolve,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_staff(current_user)
    dispute = _get_dispute_for_user(db, dispute_id, current_user)
    if dispute.status != DisputeStatus.open:
        raise HTTPException(status_code=400, detail=f"Dispute is already {dispute.status.value}")
    try:
        new_status = DisputeStatus(data.status)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid dispute status")
    if new_status == DisputeStatus.open:
        raise HTTPException(status_code=400, detail="Status must be resolved or rejected")

    order = db.query(Order).filter(Order.id == dispute.order_id).first()
    refund = round(data.refund_amount or 0.0, 2) if new_status == DisputeStatus.resolved else 0.0
    if order and refund > 0 and round(refunded_total(db, order.id) + refund, 2) > round(order.total or 0, 2):
        raise HTTPException(status_code=400, detail="Refund cannot exceed the order total")

    dispute.status = new_status
    dispute.resolution = data.resolution.strip()
    dispute.refund_amount = refund
    dispute.resolved_by_id = current_user.id
    dispute.resolved_at = datetime.now(timezone.utc)
    if refund > 0:
        db.add(
            RevenueAdjustment(
                amount=-refund,
                reason=f"Dispute #{dispute.id} refund",
                order_id=dispute.order_id,
                created_by_id=current_user.id,
            )
        )

    customer = db.query(User).filter(User.id == dispute.user_id).first()
    if customer:
        body = f"Your dispute #{dispute.id} was {new_status.value}"
        if refund > 0:
            body += f". Refund: {refund:.2f}"
        notify_user(db, customer, NotificationType.dispute, "Dispute Update", body)
    db.commit()
    db.refresh(dispute)
    return dispute
