"""
Holiday Model

A holiday is a calendar day in the reference timezone. Candidates observe
holidays either directly or through a candidate group's default holidays.
"""

from sqlalchemy import Column, String, Date, Boolean, DateTime, Index
import uuid

from recruiting.core.date_filters import utc_now
from recruiting.db.session import Base


class Holiday(Base):
    """Holiday definition"""

    __tablename__ = "holidays"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    __table_args__ = (
        Index("ix_holidays_title_date", "title", "date"),
    )

    def __repr__(self):
        return f"<Holiday(date={self.date}, title={self.title})>"
