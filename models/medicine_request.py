from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
import enum

from database import Base


class RequestStatus(str, enum.Enum):
    pending = "pending"
    fulfilled = "fulfilled"
    rejected = "rejected"


class MedicineRequest(Base):
    __tablename__ = "medicine_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    medicine_name = Column(String(200), nullable=False)
    quantity = Column(Integer, default=1)
    note = Column(String(500), nullable=True)
    status = Column(SAEnum(RequestStatus), default=RequestStatus.pending)
    staff_note = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
