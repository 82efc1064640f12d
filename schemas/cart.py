from pydantic import BaseModel, Field


class CartItemAdd(BaseModel):
    medicine_id: int
    quantity: int = Field(default=1, ge=1, le=100)


class CartItemUpdate(BaseModel):
    quantity: int = Field(ge=1, le=100)


class CartItemOut(BaseModel):
    id: int
    medicine_id: int
    name: str
    price: float
    quantity: int
    line_total: float
    rx_required: bool
    in_stock: int


class CartOut(BaseModel):
    items: list[CartItemOut] = []
    item_count: int = 0
    subtotal: float = 0.0
