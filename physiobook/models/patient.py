"""Patient model definitions."""

from sqlalchemy import Column, Integer, ForeignKey, String
from physiobook.database import Base


class Patient(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    gender = Column(String(10))
