"""Physiotherapist model definitions."""

from sqlalchemy import Column, Integer, ForeignKey, String
from physiobook.database import Base


class Physiotherapist(Base):
    """Represents a bookable provider working for a business."""
    __tablename__ = "physiotherapists"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    business_id = Column(Integer, ForeignKey("business_entities.id"), nullable=False)
    specialization = Column(String(255))
