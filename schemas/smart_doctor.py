from pydantic import BaseModel, Field
from datetime import datetime


class ConsultRequest(BaseModel):
    symptoms: str = Field(min_length=3, max_length=1000)
    age: int | None = Field(default=None, ge=0, le=120)


class SuggestedMedicine(BaseModel):
    name: str
    medicine_id: int | None = None
    price: float | None = None
    in_stock: bool = False


class ConsultResponse(BaseModel):
    conditions: list[str] = []
    advice: list[str] = []
    suggested_medicines: list[SuggestedMedicine] = []
    urgent: bool = False
    disclaimer: str = "This is not a medical diagnosis. Consult a licensed doctor."
    source: str = "keyword"


class ConsultationOut(BaseModel):
    id: int
    symptoms: str
    urgent: bool
    source: str
    result: ConsultResponse
    created_at: datetime | None
