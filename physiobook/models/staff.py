"""Staff model definitions."""

from sqlalchemy import Column, Integer, ForeignKey, String
from physiobook.database import Base


class Staff(Base):
    """Represents front-desk staff assigned to appointments."""
    __tablename__ = "staffs"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    business_id = Column(Integer, ForeignKey("business_entities.id"), nullable=False, index=True)
    role = Column(String(50))
