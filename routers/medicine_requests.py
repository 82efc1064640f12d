from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from dependencies import ensure_staff, get_current_user
from models.medicine_request import MedicineRequest, RequestStatus
from models.notification import NotificationType
from models.user import User, STAFF_ROLES
from schemas.medicine_request import (
    MedicineRequestCreate,
    MedicineRequestOut,
    MedicineRequestStatusUpdate,
)
from services.notifications import notify_user

router = APIRouter(prefix="/api/medicine-requests", tags=["Medicine Requests"])


@router.post("/", response_model=MedicineRequestOut, status_code=201)
def create_request(
    data: MedicineRequestCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Ask the pharmacy to stock a medicine that is not in the catalogue."""
    req = MedicineRequest(
        user_id=current_user.id,
        medicine_name=data.medicine_name.strip(),
        quantity=data.quantity,
        note=data.note,
    )
    db.add(req)
    db.commit()
    db.refresh(req)
    return req


@router.get("/", response_model=list[MedicineRequestOut])
def list_requests(
    status: str | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    q = db.query(MedicineRequest)
    if current_user.role not in STAFF_ROLES:
        q = q.filter(MedicineRequest.user_id == current_user.id)
    if status:
        try:
            q = q.filter(MedicineRequest.status == RequestStatus(status))
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid request status")
    return q.order_by(MedicineRequest.created_at.desc(), MedicineRequest.id.desc()).all()


@router.put("/{request_id}/status", response_model=MedicineRequestOut)
def update_request_status(
    request_id: int,
    data: MedicineRequestStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_staff(current_user)
    req = db.query(MedicineRequest).filter(MedicineRequest.id == request_id).first()
    if not req:
        raise HTTPException(status_code=404, detail="Request not found")
    try:
        new_status = RequestStatus(data.status)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid request status")
    if req.status != RequestStatus.pending and new_status != req.status:
        raise HTTPException(status_code=400, detail=f"Request already {req.status.value}")

    req.status = new_status
    if data.staff_note is not None:
        req.staff_note = data.staff_note.strip() or None
    requester = db.query(User).filter(User.id == req.user_id).first()
    if requester and new_status != RequestStatus.pending:
        notify_user(
            db,
            requester,
            NotificationType.system,
            "Medicine Request Update",
            f"Your request for {req.medicine_name} was {new_status.value}",
        )
    db.commit()
    db.refresh(req)
    return req
