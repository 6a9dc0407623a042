from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Table, Index
from sqlalchemy.orm import relationship
import uuid

from recruiting.core.date_filters import utc_now
from recruiting.db.session import Base

# Composite primary keys make membership and defaults storage-level sets:
# adding or removing a member touches only that member's row.
candidate_group_members = Table(
    "candidate_group_members",
    Base.metadata,
    Column("group_id", String(36), ForeignKey("candidate_groups.id", ondelete="CASCADE"), primary_key=True),
    Column("candidate_id", String(36), ForeignKey("candidates.id", ondelete="CASCADE"), primary_key=True),
    Column("added_at", DateTime, default=utc_now, nullable=False),
)

# Default holidays, applied to every candidate added to the group
candidate_group_holidays = Table(
    "candidate_group_holidays",
    Base.metadata,
    Column("group_id", String(36), ForeignKey("candidate_groups.id", ondelete="CASCADE"), primary_key=True),
    Column("holiday_id", String(36), ForeignKey("holidays.id", ondelete="CASCADE"), primary_key=True),
)


class CandidateGroup(Base):
    __tablename__ = "candidate_groups"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False, index=True)
    description = Column(String(1000), nullable=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    # Relationships
    candidates = relationship(
        "Candidate",
        secondary=candidate_group_members,
        order_by=candidate_group_members.c.added_at,
    )
    holidays = relationship("Holiday", secondary=candidate_group_holidays)
    creator = relationship("User", foreign_keys=[created_by])

    __table_args__ = (
        Index("ix_candidate_groups_name_active", "name", "is_active"),
        Index("ix_candidate_groups_creator_active", "created_by", "is_active"),
    )

    @property
    def candidate_ids(self):
        return [c.id for c in self.candidates]

    @property
    def holiday_ids(self):
        return [h.id for h in self.holidays]

    def __repr__(self):
        return f"<CandidateGroup(name={self.name}, members={len(self.candidates)})>"
