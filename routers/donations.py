from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from dependencies import ensure_staff, get_current_user
from models.donation import Donation, DonationStatus
from models.notification import NotificationType
from models.user import User, STAFF_ROLES
from schemas.donation import DonationCreate, DonationOut, DonationStatusUpdate
from services.notifications import notify_user

router = APIRouter(prefix="/api/donations", tags=["Donations"])

DONATION_TRANSITIONS = {
    DonationStatus.pending: {DonationStatus.approved, DonationStatus.rejected},
    DonationStatus.approved: {DonationStatus.collected, DonationStatus.rejected},
    DonationStatus.collected: set(),
    DonationStatus.rejected: set(),
}


@router.post("/", response_model=DonationOut, status_code=201)
def create_donation(
    data: DonationCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if data.expiry_date <= date.today():
        raise HTTPException(status_code=400, detail="Expired medicines cannot be donated")
    donation = Donation(
        user_id=current_user.id,
        medicine_name=data.medicine_name.strip(),
        quantity=data.quantity,
        expiry_date=data.expiry_date,
        pickup_address=data.pickup_address or current_user.address,
        note=data.note,
    )
    db.add(donation)
    db.commit()
    db.refresh(donation)
    return donation


@router.get("/", response_model=list[DonationOut])
def list_donations(
    status: str | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    q = db.query(Donation)
    if current_user.role not in STAFF_ROLES:
        q = q.filter(Donation.user_id == current_user.id)
    if status:
        try:
            q = q.filter(Donation.status == DonationStatus(status))
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid donation status")
    return q.order_by(Donation.created_at.desc(), Donation.id.desc()).all()


@router.put("/{donation_id}/status", response_model=DonationOut)
def update_donation_status(
    donation_id: int,
    data: DonationStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_staff(current_user)
    donation = db.query(Donation).filter(Donation.id == donation_id).first()
    if not donation:
        raise HTTPException(status_code=404, detail="Donation not found")
    try:
        new_status = DonationStatus(data.status)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid donation status")
    if new_status not in DONATION_TRANSITIONS[donation.status]:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot change donation status from {donation.status.value} to {new_status.value}",
        )
    donation.status = new_status
    donation.reviewed_by_id = current_user.id
    donor = db.query(User).filter(User.id == donation.user_id).first()
    if donor:
        notify_user(
            db,
            donor,
            NotificationType.system,
            "Donation Update",
            f"Your donation of {donation.medicine_name} is now {new_status.value}",
        )
    db.commit()
    db.refresh(donation)
    return donation
