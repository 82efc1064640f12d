from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey
from sqlalchemy.sql import func

from database import Base


class RevenueAdjustment(Base):
    __tablename__ = "revenue_adjustments"

    id = Column(Integer, primary_key=True, index=True)
    amount = Column(Float, nullable=False)  # signed; refunds are negative
    reason = Column(String(300), nullable=False)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
