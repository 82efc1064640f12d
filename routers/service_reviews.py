from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_current_user
from models.review import ServiceReview
from models.user import User
from schemas.review import ServiceReviewCreate, ServiceReviewOut, ServiceReviewSummary

router = APIRouter(prefix="/api/service-reviews", tags=["Service Reviews"])


@router.post("/", response_model=ServiceReviewOut, status_code=201)
def create_service_review(
    data: ServiceReviewCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    review = ServiceReview(
        user_id=current_user.id,
        rating=data.rating,
        comment=(data.comment or "").strip() or None,
    )
    db.add(review)
    db.commit()
    db.refresh(review)
    return review


@router.get("/", response_model=list[ServiceReviewOut])
def list_service_reviews(skip: int = 0, limit: int = 20, db: Session = Depends(get_db)):
    limit = max(1, min(limit, 100))
    return (
        db.query(ServiceReview)
        .order_by(ServiceReview.created_at.desc(), ServiceReview.id.desc())
        .offset(max(skip, 0))
        .limit(limit)
        .all()
    )


@router.get("/summary", response_model=ServiceReviewSummary)
def service_review_summary(db: Session = Depends(get_db)):
    rows = db.query(ServiceReview.rating, func.count(ServiceReview.id)).group_by(ServiceReview.rating).all()
    distribution = {star: 0 for star in range(1, 6)}
    for rating, count in rows:
        distribution[int(rating)] = int(count)
    total = sum(distribution.values())
    average = None
    if total:
        average = round(sum(star * n for star, n in distribution.items()) / total, 2)
    return ServiceReviewSummary(count=total, average_rating=average, distribution=distribution)
