"""User model definitions."""

from sqlalchemy import Column, Integer, String
from physiobook.database import Base


ROLE_PATIENT = 'patient'
ROLE_THERAPIST = 'therapist'
ROLE_STAFF = 'staff'
ROLE_BUSINESS = 'business'


class User(Base):
    """Represents an authenticated account."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(100), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    hashed_password = Column(String(255))
    role = Column(String(50), nullable=False)  # patient/therapist/staff/business
