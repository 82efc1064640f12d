from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, ForeignKey
from sqlalchemy.sql import func

from database import Base


class MedicineReminder(Base):
    __tablename__ = "medicine_reminders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    medicine_id = Column(Integer, ForeignKey("medicines.id"), nullable=True)
    medicine_name = Column(String(200), nullable=False)
    dosage = Column(String(120), nullable=False)
    times = Column(String(120), nullable=False)  # comma-separated HH:MM
    start_date = Column(Date, nullable=False)
    counted_from = Column(Date, nullable=False)  # quantity_units was on hand on this day
    end_date = Column(Date, nullable=True)
    quantity_units = Column(Integer, default=30)
    units_per_dose = Column(Integer, default=1)
    is_active = Column(Boolean, default=True)
    last_notified_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
