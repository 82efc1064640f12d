from sqlalchemy import func
from sqlalchemy.orm import Session

from models.order import Order
from models.points import CustomerPoint

POINTS_PER_CURRENCY_UNIT = 10


def get_balance(db: Session, user_id: int) -> int:
    total = (
        db.query(func.coalesce(func.sum(CustomerPoint.points), 0))
        .filter(CustomerPoint.user_id == user_id)
        .scalar()
    )
    return int(total or 0)


def add_entry(db: Session, user_id: int, points: int, reason: str, order_id: int | None = None) -> CustomerPoint:
    entry = CustomerPoint(user_id=user_id, points=points, reason=reason, order_id=order_id)
    db.add(entry)
    return entry


def award_order_points(db: Session, order: Order) -> int:
    """Award floor(total / 10) points once per delivered order."""
    if order.points_awarded:
        return 0
    points = int((order.total or 0) // POINTS_PER_CURRENCY_UNIT)
    if points <= 0:
        return 0
    add_entry(db, order.user_id, points, f"Order {order.order_uid} delivered", order_id=order.id)
    order.points_awarded = points
    return points
