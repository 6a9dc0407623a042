from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship
import uuid
import enum

from recruiting.core.date_filters import utc_now
from recruiting.db.session import Base


class AttendanceStatus(str, enum.Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    HOLIDAY = "Holiday"
    LEAVE = "Leave"


HOLIDAY_NOTE_PREFIX = "Holiday: "


class Attendance(Base):
    __tablename__ = "attendance"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    candidate_id = Column(String(36), ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False, index=True)
    candidate_email = Column(String(100), nullable=False, index=True)
    date = Column(DateTime, nullable=False, index=True)  # canonical midnight, naive UTC
    day = Column(String(10), nullable=True)
    punch_in = Column(DateTime, nullable=False)
    punch_out = Column(DateTime, nullable=True)
    duration = Column(Integer, nullable=False, default=0)  # milliseconds
    notes = Column(String, nullable=True)
    timezone = Column(String(64), nullable=False, default="UTC")
    status = Column(SQLEnum(AttendanceStatus, values_callable=lambda e: [m.value for m in e]),
                    nullable=False, default=AttendanceStatus.PRESENT, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    # Relationships
    candidate = relationship("Candidate", back_populates="attendance")

    # One row per candidate per calendar day
    __table_args__ = (
        UniqueConstraint("candidate_id", "date", name="uq_attendance_candidate_date"),
    )

    def __repr__(self):
        return f"<Attendance(candidate_id={self.candidate_id}, date={self.date}, status={self.status})>"
