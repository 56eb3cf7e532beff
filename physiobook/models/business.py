"""Business entity model definitions."""

from sqlalchemy import Column, Integer, ForeignKey, String
from physiobook.database import Base


class BusinessEntity(Base):
    """Represents a physiotherapy practice."""
    __tablename__ = "business_entities"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    company_name = Column(String(255), nullable=False)
