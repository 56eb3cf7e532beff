"""Availability model definitions."""

from sqlalchemy import Column, Integer, Boolean, Date, ForeignKey, Index, String
from physiobook.database import Base


class Availability(Base):
    """Represents a recurring weekly rule, or a one-off override when special_date is set."""
    __tablename__ = "availabilities"

    id = Column(Integer, primary_key=True)
    therapist_id = Column(Integer, ForeignKey("physiotherapists.id"), nullable=False)
    day_of_week = Column(String(10), nullable=False)
    start_time = Column(String(5))
    end_time = Column(String(5))
    is_available = Column(Boolean, default=True, nullable=False)
    special_date = Column(Date)

    __table_args__ = (
        Index('idx_availabilities_therapist_day', 'therapist_id', 'day_of_week'),
        Index('idx_availabilities_therapist_special', 'therapist_id', 'special_date'),
    )
