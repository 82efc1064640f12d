from sqlalchemy import Column, Integer, String, Boolean, Text, DateTime, ForeignKey
from sqlalchemy.sql import func

from database import Base


class Consultation(Base):
    __tablename__ = "smart_doctor_consultations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    symptoms = Column(Text, nullable=False)
    result = Column(Text, nullable=False)  # JSON
    urgent = Column(Boolean, default=False)
    source = Column(String(20), default="keyword")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
