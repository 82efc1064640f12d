from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from dependencies import ensure_admin, get_current_user
from models.daily_update import DailyUpdate
from models.user import User
from schemas.daily_update import DailyUpdateCreate, DailyUpdateOut

router = APIRouter(prefix="/api/daily-updates", tags=["Daily Updates"])


@router.get("/", response_model=list[DailyUpdateOut])
def list_updates(
    category: str | None = None,
    limit: int = 20,
    db: Session = Depends(get_db),
):
    q = db.query(DailyUpdate)
    if category:
        q = q.filter(DailyUpdate.category == category)
    limit = max(1, min(limit, 100))
    return q.order_by(DailyUpdate.created_at.desc(), DailyUpdate.id.desc()).limit(limit).all()


@router.post("/", response_model=DailyUpdateOut, status_code=201)
def create_update(
    data: DailyUpdateCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_admin(current_user)
    update = DailyUpdate(
        title=data.title.strip(),
        body=data.body.strip(),
        category=(data.category or "health_tip").strip().lower(),
        author_id=current_user.id,
    )
    db.add(update)
    db.commit()
    db.refresh(update)
    return update


@router.delete("/{update_id}")
def delete_update(
    update_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_admin(current_user)
    update = db.query(DailyUpdate).filter(DailyUpdate.id == update_id).first()
    if not update:
        raise HTTPException(status_code=404, detail="Update not found")
    db.delete(update)
    db.commit()
    return {"message": "Update deleted"}
