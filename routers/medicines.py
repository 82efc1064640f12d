from fastapi import APIRouter, Depends, HTTPException, Query, File, UploadFile
from sqlalchemy.orm import Session

from database import get_db
from dependencies import ensure_admin, ensure_staff, get_current_user
from models.cart import CartItem
from models.medicine import Medicine
from models.order import OrderItem
from models.user import User
from schemas.medicine import MedicineCreate, MedicineUpdate, MedicineOut
from services.uploads import remove_upload, store_image_or_400

router = APIRouter(prefix="/api/medicines", tags=["Medicines"])


def _get_or_404(db: Session, medicine_id: int) -> Medicine:
    med = db.query(Medicine).filter(Medicine.id == medicine_id).first()
    if not med:
        raise HTTPException(status_code=404, detail="Medicine not found")
    return med


def _ensure_can_edit(current_user: User, med: Medicine) -> None:
    ensure_staff(current_user)
    if current_user.role == "pharmacy" and med.seller_id not in (None, current_user.id):
        raise HTTPException(status_code=403, detail="Medicine belongs to another pharmacy")


@router.get("/", response_model=list[MedicineOut])
def list_medicines(
    search: str | None = Query(None, description="Search by name or generic name"),
    category: str | None = None,
    in_stock: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Public catalog listing."""
    q = db.query(Medicine)
    if search:
        pattern = f"%{search.strip()}%"
        q = q.filter(Medicine.name.ilike(pattern) | Medicine.generic_name.ilike(pattern))
    if category:
        q = q.filter(Medicine.category.ilike(category.strip()))
    if in_stock:
        q = q.filter(Medicine.stock > 0)
    return q.order_by(Medicine.name.asc()).offset(skip).limit(limit).all()


@router.get("/{medicine_id}", response_model=MedicineOut)
def get_medicine(medicine_id: int, db: Session = Depends(get_db)):
    return _get_or_404(db, medicine_id)


@router.post("/", response_model=MedicineOut, status_code=201)
def create_medicine(
    data: MedicineCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_staff(current_user)
    med = Medicine(**data.model_dump(), seller_id=current_user.id if current_user.role == "pharmacy" else None)
    db.add(med)
    db.commit()
    db.refresh(med)
    return med


@router.put("/{medicine_id}", response_model=MedicineOut)
def update_medicine(
    medicine_id: int,
    data: MedicineUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    med = _get_or_404(db, medicine_id)
    _ensure_can_edit(current_user, med)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(med, key, value)
    db.commit()
    db.refresh(med)
    return med


@router.post("/{medicine_id}/image", response_model=MedicineOut)
async def upload_medicine_image(
    medicine_id: int,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    med = _get_or_404(db, medicine_id)
    _ensure_can_edit(current_user, med)
    stored = await store_image_or_400(file, "medicines")
    previous = med.image_url
    med.image_url = stored.url
    db.commit()
    db.refresh(med)
    remove_upload(previous)
    return med


@router.delete("/{medicine_id}")
def delete_medicine(
    medicine_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete a medicine entry (admin only)."""
    ensure_admin(current_user)
    med = _get_or_404(db, medicine_id)
    if db.query(OrderItem).filter(OrderItem.medicine_id == med.id).first():
        raise HTTPException(status_code=400, detail="Medicine has orders; set its stock to 0 instead")
    db.query(CartItem).filter(CartItem.medicine_id == med.id).delete()
    image_url = med.image_url
    db.delete(med)
    db.commit()
    remove_upload(image_url)
    return {"message": "Medicine deleted"}
