from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
import enum

from database import Base


class DonationStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    collected = "collected"
    rejected = "rejected"


class Donation(Base):
    __tablename__ = "donations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    medicine_name = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False)
    expiry_date = Column(Date, nullable=False)
    pickup_address = Column(String(255), nullable=True)
    note = Column(String(500), nullable=True)
    status = Column(SAEnum(DonationStatus), default=DonationStatus.pending)
    reviewed_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
