from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func

from database import Base


class Medicine(Base):
    __tablename__ = "medicines"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    generic_name = Column(String(200), nullable=True)
    category = Column(String(80), nullable=True, index=True)
    manufacturer = Column(String(150), nullable=True)
    price = Column(Float, nullable=False)
    stock = Column(Integer, default=0)
    rx_required = Column(Boolean, default=False)
    description = Column(String(1000), nullable=True)
    image_url = Column(String(300), nullable=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
