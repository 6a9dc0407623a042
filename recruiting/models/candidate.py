from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship
import uuid

from recruiting.core.date_filters import utc_now
from recruiting.db.session import Base

# Holidays a candidate currently observes. Written only by the holiday
# assignment functions in services.attendance_service.
candidate_holidays = Table(
    "candidate_holidays",
    Base.metadata,
    Column("candidate_id", String(36), ForeignKey("candidates.id", ondelete="CASCADE"), primary_key=True),
    Column("holiday_id", String(36), ForeignKey("holidays.id", ondelete="CASCADE"), primary_key=True),
)


class Candidate(Base):
    __tablename__ = "candidates"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    full_name = Column(String(255), nullable=False)
    email = Column(String(100), unique=True, nullable=False, index=True)
    employee_id = Column(String(50), nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    # Relationships
    holidays = relationship("Holiday", secondary=candidate_holidays, order_by="Holiday.date")
    attendance = relationship("Attendance", back_populates="candidate", passive_deletes=True)

    @property
    def holiday_ids(self):
        return {h.id for h in self.holidays}

    def __repr__(self):
        return f"<Candidate(email={self.email})>"
