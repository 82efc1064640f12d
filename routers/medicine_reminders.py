import hmac

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from config import JOB_RUN_KEY
from database import get_db
from dependencies import get_current_user
from models.medicine import Medicine
from models.reminder import MedicineReminder
from models.user import User
from schemas.reminder import ReminderCreate, ReminderOut, ReminderUpdate
from services.reminders import (
    calculate_days_left,
    list_due_reminders,
    local_now,
    parse_times,
    run_reminder_cycle,
)

router = APIRouter(prefix="/api/medicine-reminders", tags=["Medicine Reminders"])


def _serialize(record: MedicineReminder) -> ReminderOut:
    return ReminderOut(
        id=record.id,
        medicine_id=record.medicine_id,
        medicine_name=record.medicine_name,
        dosage=record.dosage,
        times=parse_times(record.times),
        start_date=record.start_date,
        end_date=record.end_date,
        quantity_units=record.quantity_units or 0,
        units_per_dose=record.units_per_dose or 1,
        is_active=bool(record.is_active),
        days_left=calculate_days_left(record),
        created_at=record.created_at,
    )


def _get_own(db: Session, reminder_id: int, user: User) -> MedicineReminder:
    record = (
        db.query(MedicineReminder)
        .filter(MedicineReminder.id == reminder_id, MedicineReminder.user_id == user.id)
        .first()
    )
    if not record:
        raise HTTPException(status_code=404, detail="Reminder not found")
    return record


@router.post("/", response_model=ReminderOut, status_code=201)
def create_reminder(
    data: ReminderCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    name = (data.medicine_name or "").strip()
    if data.medicine_id is not None:
        med = db.query(Medicine).filter(Medicine.id == data.medicine_id).first()
        if not med:
            raise HTTPException(status_code=404, detail="Medicine not found")
        name = name or med.name
    start = data.start_date or local_now().date()
    if data.end_date and data.end_date < start:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")
    record = MedicineReminder(
        user_id=current_user.id,
        medicine_id=data.medicine_id,
        medicine_name=name,
        dosage=data.dosage.strip(),
        times=",".join(data.times),
        start_date=start,
        counted_from=start,
        end_date=data.end_date,
        quantity_units=data.quantity_units,
        units_per_dose=data.units_per_dose,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return _serialize(record)


@router.get("/", response_model=list[ReminderOut])
def list_reminders(
    active_only: bool = False,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    q = db.query(MedicineReminder).filter(MedicineReminder.user_id == current_user.id)
    if active_only:
        q = q.filter(MedicineReminder.is_active.is_(True))
    return [_serialize(r) for r in q.order_by(MedicineReminder.id.asc()).all()]


@router.get("/due")
def due_reminders(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Reminders whose slot is due right now for the caller."""
    return [
        {**_serialize(record).model_dump(mode="json"), "due_at": slot.strftime("%H:%M")}
        for record, slot in list_due_reminders(db, user_id=current_user.id)
    ]


@router.get("/run-due")
def run_due(key: str = "", db: Session = Depends(get_db)):
    """Hook for an external scheduler when no background loop is running."""
    if not JOB_RUN_KEY:
        raise HTTPException(status_code=503, detail="Job runner is not configured")
    if not hmac.compare_digest(key.encode(), JOB_RUN_KEY.encode()):
        raise HTTPException(status_code=401, detail="Invalid job key")
    return run_reminder_cycle(db)


@router.get("/{reminder_id}", response_model=ReminderOut)
def get_reminder(
    reminder_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _serialize(_get_own(db, reminder_id, current_user))


@router.put("/{reminder_id}", response_model=ReminderOut)
def update_reminder(
    reminder_id: int,
    data: ReminderUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = _get_own(db, reminder_id, current_user)
    changes = data.model_dump(exclude_unset=True)
    if "times" in changes and changes["times"] is not None:
        changes["times"] = ",".join(changes["times"])
    if changes.get("end_date") and changes["end_date"] < record.start_date:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")
    if changes.get("quantity_units") is not None:
        # A new quantity means a refill: count down from today.
        record.counted_from = local_now().date()
    for key, value in changes.items():
        if value is None and key != "end_date":
            continue
        setattr(record, key, value)
    db.commit()
    db.refresh(record)
    return _serialize(record)


@router.delete("/{reminder_id}")
def delete_reminder(
    reminder_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = _get_own(db, reminder_id, current_user)
    db.delete(record)
    db.commit()
    return {"message": "Reminder deleted"}
