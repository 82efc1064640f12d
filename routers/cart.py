from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_current_user
from models.cart import CartItem
from models.medicine import Medicine
from models.user import User
from schemas.cart import CartItemAdd, CartItemOut, CartItemUpdate, CartOut

router = APIRouter(prefix="/api/cart", tags=["Cart"])


def build_cart(db: Session, user_id: int) -> CartOut:
    rows = (
        db.query(CartItem)
        .filter(CartItem.user_id == user_id)
        .order_by(CartItem.created_at.asc(), CartItem.id.asc())
        .all()
    )
    items = []
    for row in rows:
        med = row.medicine
        items.append(
            CartItemOut(
                id=row.id,
                medicine_id=row.medicine_id,
                name=med.name,
                price=med.price,
                quantity=row.quantity,
                line_total=round(med.price * row.quantity, 2),
                rx_required=bool(med.rx_required),
                in_stock=med.stock or 0,
            )
        )
    return CartOut(
        items=items,
        item_count=sum(it.quantity for it in items),
        subtotal=round(sum(it.line_total for it in items), 2),
    )


def _check_stock(med: Medicine, quantity: int) -> None:
    if quantity > (med.stock or 0):
        raise HTTPException(
            status_code=400,
            detail=f"Insufficient stock for {med.name}. Available {med.stock or 0}",
        )


def _own_item_or_404(db: Session, user_id: int, item_id: int) -> CartItem:
    row = db.query(CartItem).filter(CartItem.id == item_id, CartItem.user_id == user_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Cart item not found")
    return row


@router.get("/", response_model=CartOut)
def get_cart(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return build_cart(db, current_user.id)


@router.post("/items", response_model=CartOut)
def add_item(
    data: CartItemAdd,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Add a medicine; an existing line is increased instead of duplicated."""
    med = db.query(Medicine).filter(Medicine.id == data.medicine_id).first()
    if not med:
        raise HTTPException(status_code=404, detail="Medicine not found")
    row = (
        db.query(CartItem)
        .filter(CartItem.user_id == current_user.id, CartItem.medicine_id == med.id)
        .first()
    )
    new_quantity = (row.quantity if row else 0) + data.quantity
    if new_quantity > 100:
        raise HTTPException(status_code=400, detail="Maximum 100 units per medicine")
    _check_stock(med, new_quantity)
    if row:
        row.quantity = new_quantity
    else:
        db.add(CartItem(user_id=current_user.id, medicine_id=med.id, quantity=new_quantity))
    db.commit()
    return build_cart(db, current_user.id)


@router.put("/items/{item_id}", response_model=CartOut)
def update_item(
    item_id: int,
    data: CartItemUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    row = _own_item_or_404(db, current_user.id, item_id)
    _check_stock(row.medicine, data.quantity)
    row.quantity = data.quantity
    db.commit()
    return build_cart(db, current_user.id)


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_item(
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    row = _own_item_or_404(db, current_user.id, item_id)
    db.delete(row)
    db.commit()
    return build_cart(db, current_user.id)


@router.delete("/", response_model=CartOut)
def clear_cart(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    db.query(CartItem).filter(CartItem.user_id == current_user.id).delete()
    db.commit()
    return CartOut()
