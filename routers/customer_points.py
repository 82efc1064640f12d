from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from dependencies import ensure_admin, get_current_user
from models.notification import NotificationType
from models.points import CustomerPoint
from models.user import User
from schemas.points import PointEntryOut, PointsAdjust, PointsBalanceOut, PointsRedeem
from services.notifications import notify_user
from services.points import add_entry, get_balance

router = APIRouter(prefix="/api/customer-points", tags=["Customer Points"])


def _history(db: Session, user_id: int, limit: int = 50) -> list[PointEntryOut]:
    rows = (
        db.query(CustomerPoint)
        .filter(CustomerPoint.user_id == user_id)
        .order_by(CustomerPoint.created_at.desc(), CustomerPoint.id.desc())
        .limit(limit)
        .all()
    )
    return [PointEntryOut.model_validate(row) for row in rows]


@router.get("/", response_model=PointsBalanceOut)
def my_points(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return PointsBalanceOut(
        user_id=current_user.id,
        balance=get_balance(db, current_user.id),
        history=_history(db, current_user.id),
    )


@router.get("/history", response_model=list[PointEntryOut])
def points_history(
    limit: int = 50,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _history(db, current_user.id, max(1, min(limit, 200)))


@router.post("/redeem", response_model=PointsBalanceOut)
def redeem_points(
    data: PointsRedeem,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    balance = get_balance(db, current_user.id)
    if data.points > balance:
        raise HTTPException(status_code=400, detail=f"Insufficient points (balance {balance})")
    add_entry(db, current_user.id, -data.points, data.reason.strip() or "Redeemed")
    db.commit()
    return PointsBalanceOut(
        user_id=current_user.id,
        balance=balance - data.points,
        history=_history(db, current_user.id),
    )


@router.post("/adjust", response_model=PointsBalanceOut)
def adjust_points(
    data: PointsAdjust,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_admin(current_user)
    target = db.query(User).filter(User.id == data.user_id).first()
    if not target:
        raise HTTPException(status_code=404, detail="User not found")
    if data.points == 0:
        raise HTTPException(status_code=400, detail="Adjustment must be non-zero")
    balance = get_balance(db, target.id)
    if balance + data.points < 0:
        raise HTTPException(status_code=400, detail="Adjustment would make the balance negative")
    add_entry(db, target.id, data.points, data.reason.strip())
    notify_user(
        db,
        target,
        NotificationType.system,
        "Points Updated",
        f"{data.points:+d} points: {data.reason.strip()}",
    )
    db.commit()
    return PointsBalanceOut(
        user_id=target.id,
        balance=balance + data.points,
        history=_history(db, target.id),
    )
