from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_current_user
from models.medicine import Medicine
from models.review import Review
from models.user import User
from schemas.review import MedicineReviewsOut, ReviewCreate, ReviewOut

router = APIRouter(prefix="/api/reviews", tags=["Reviews"])


@router.post("/", response_model=ReviewOut, status_code=201)
def create_review(
    data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not db.query(Medicine).filter(Medicine.id == data.medicine_id).first():
        raise HTTPException(status_code=404, detail="Medicine not found")
    existing = (
        db.query(Review)
        .filter(Review.user_id == current_user.id, Review.medicine_id == data.medicine_id)
        .first()
    )
    if existing:
        raise HTTPException(status_code=400, detail="You have already reviewed this medicine")
    review = Review(
        user_id=current_user.id,
        medicine_id=data.medicine_id,
        rating=data.rating,
        comment=(data.comment or "").strip() or None,
    )
    db.add(review)
    db.commit()
    db.refresh(review)
    return review


@router.get("/medicine/{medicine_id}", response_model=MedicineReviewsOut)
def medicine_reviews(medicine_id: int, db: Session = Depends(get_db)):
    if not db.query(Medicine).filter(Medicine.id == medicine_id).first():
        raise HTTPException(status_code=404, detail="Medicine not found")
    reviews = (
        db.query(Review)
        .filter(Review.medicine_id == medicine_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .all()
    )
    avg = db.query(func.avg(Review.rating)).filter(Review.medicine_id == medicine_id).scalar()
    return MedicineReviewsOut(
        medicine_id=medicine_id,
        average_rating=round(float(avg), 2) if avg is not None else None,
        count=len(reviews),
        reviews=[ReviewOut.model_validate(r) for r in reviews],
    )


@router.delete("/{review_id}")
def delete_review(
    review_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")
    if review.user_id != current_user.id and current_user.role != "admin":
        raise HTTPException(status_code=403, detail="Access denied")
    db.delete(review)
    db.commit()
    return {"message": "Review deleted"}
