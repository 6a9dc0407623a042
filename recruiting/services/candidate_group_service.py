"""
Candidate Group Management

Groups carry a member set and a default holiday set. Membership and holiday
changes are propagated to Candidate.holidays and to the Holiday attendance
rows through the assignment helpers in attendance_service.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from recruiting.core.config import settings
from recruiting.core.exceptions import InvalidOperation, NotFound
from recruiting.core.permissions import AdminCapability, ensure_admin
from recruiting.models.attendance import Attendance
from recruiting.models.candidate import Candidate
from recruiting.models.candidate_group import CandidateGroup
from recruiting.models.holiday import Holiday
from recruiting.schemas import (
    AttendanceResponse,
    CandidateGroupCreate,
    CandidateGroupResponse,
    CandidateGroupUpdate,
    DeletedRecord,
    GroupMembershipResult,
    HolidayAssignmentData,
    HolidayAssignmentResult,
    HolidayRemovalData,
    HolidayRemovalResult,
    SkippedItem,
)
from recruiting.services.attendance_service import (
    assign_holidays_to_members,
    remove_holidays_from_members,
    skip_inactive,
)
from recruiting.services.candidate_service import get_candidates_by_ids, unique_ids
from recruiting.services.holiday_service import require_holidays

logger = logging.getLogger(__name__)


def create_candidate_group(db: Session, admin: AdminCapability, group_in: CandidateGroupCreate) -> CandidateGroup:
    ensure_admin(admin, "Only admin can create candidate groups")

    candidates = get_candidates_by_ids(db, group_in.candidate_ids)

    group = CandidateGroup(
        name=group_in.name,
        description=group_in.description,
        created_by=admin.user_id,
        is_active=True,
    )
    group.candidates = candidates

    db.add(group)
    db.commit()
    db.refresh(group)

    logger.info("Created candidate group %s with %d candidate(s)", group.id, len(candidates), extra={"group_id": group.id})
    return group


def query_candidate_groups(
    db: Session,
    name: Optional[str] = None,
    is_active: Optional[bool] = None,
    created_by: Optional[str] = None,
    skip: int = 0,
    limit: Optional[int] = None,
) -> Tuple[List[CandidateGroup], int]:
    """Returns (groups, total) with newest groups first."""
    query = db.query(CandidateGroup)

    if name:
        query = query.filter(CandidateGroup.name.icontains(name, autoescape=True))
    if is_active is not None:
        query = query.filter(CandidateGroup.is_active == is_active)
    if created_by:
        query = query.filter(CandidateGroup.created_by == str(created_by))

    total = query.count()
    groups = (
        query.order_by(CandidateGroup.created_at.desc())
        .offset(skip)
        .limit(limit or settings.DEFAULT_PAGE_SIZE)
        .all()
    )
    return groups, total


def get_candidate_group_by_id(db: Session, group_id: str) -> CandidateGroup:
    group = db.query(CandidateGroup).filter(CandidateGroup.id == str(group_id)).first()
    if not group:
        raise NotFound("Candidate group not found")
    return group


def update_candidate_group_by_id(
    db: Session,
    admin: AdminCapability,
    group_id: str,
    group_update: CandidateGroupUpdate,
) -> CandidateGroup:
    """
    Update name, description, active flag or the whole member list.

    When the group has default holidays, new members receive them and
    removed members lose them.
    """
    ensure_admin(admin, "Only admin can update candidate groups")

    group = get_candidate_group_by_id(db, group_id)

    new_candidates = None
    if group_update.candidate_ids is not None:
        new_candidates = get_candidates_by_ids(db, group_update.candidate_ids)

    if group_update.name is not None:
        group.name = group_update.name
    if "description" in group_update.model_fields_set:
        group.description = group_update.description
    if group_update.is_active is not None:
        group.is_active = group_update.is_active

    if new_candidates is not None:
        previous = list(group.candidates)
        group.candidates = new_candidates
        db.flush()

        added = [c for c in new_candidates if c not in previous]
        removed = [c for c in previous if c not in new_candidates]
        defaults = list(group.holidays)

        if defaults:
            created: List[Attendance] = []
            deleted: List[DeletedRecord] = []
            skipped: List[SkippedItem] = []
            active_defaults = [h for h in defaults if h.is_active]
            if added:
                assign_holidays_to_members(db, added, active_defaults, created, skipped)
            if removed:
                remove_holidays_from_members(db, removed, defaults, deleted, skipped)
            logger.info(
                "Group %s membership replaced: +%d/-%d candidate(s), %d record(s) created, %d deleted",
                group.id, len(added), len(removed), len(created), len(deleted),
                extra={"group_id": group.id},
            )

    db.commit()
    db.refresh(group)
    return group


def delete_candidate_group_by_id(db: Session, admin: AdminCapability, group_id: str) -> None:
    """Delete a group. Holidays already given to its candidates are kept."""
    ensure_admin(admin, "Only admin can delete candidate groups")

    group = get_candidate_group_by_id(db, group_id)
    db.delete(group)
    db.commit()

    logger.info("Deleted candidate group %s", group_id, extra={"group_id": group_id})


def add_candidates_to_group(
    db: Session,
    admin: AdminCapability,
    group_id: str,
    candidate_ids: List[str],
) -> GroupMembershipResult:
    """
    Add candidates to a group.

    Only candidates not already in the group are added; they inherit the
    group's active default holidays.
    """
    ensure_admin(admin, "Only admin can modify candidate groups")

    if not candidate_ids:
        raise InvalidOperation("At least one candidate ID is required")

    candidates = get_candidates_by_ids(db, candidate_ids)
    group = get_candidate_group_by_id(db, group_id)

    current_ids = set(group.candidate_ids)
    new_candidates = [c for c in candidates if c.id not in current_ids]

    if not new_candidates:
        raise InvalidOperation("All candidates are already in the group")

    group.candidates.extend(new_candidates)
    db.flush()

    created: List[Attendance] = []
    skipped: List[SkippedItem] = []
    defaults = list(group.holidays)
    if defaults:
        active_defaults = [h for h in defaults if h.is_active]
        inactive_defaults = [h for h in defaults if not h.is_active]
        assign_holidays_to_members(db, new_candidates, active_defaults, created, skipped)
        skipped.extend(skip_inactive(new_candidates, inactive_defaults))

    db.commit()
    db.refresh(group)

    logger.info(
        "Added %d candidate(s) to group %s: %d holiday record(s) created",
        len(new_candidates), group.id, len(created),
        extra={"group_id": group.id},
    )

    return GroupMembershipResult(
        message=(
            f"Added {len(new_candidates)} candidate(s) to group \"{group.name}\". "
            f"Created {len(created)} attendance record(s)."
        ),
        data=CandidateGroupResponse.model_validate(group),
        created_records=[AttendanceResponse.model_validate(a) for a in created],
        skipped=skipped,
    )


def resolve_holidays_to_remove(
    group: CandidateGroup,
    remaining: List[Candidate],
    removed: List[Candidate],
    legacy_inference: Optional[bool] = None,
) -> List[Holiday]:
    """
    Holidays to strip from candidates leaving the group.

    1. the group's default holidays, when it has any
    2. otherwise (legacy groups) the holidays every remaining member has
    3. otherwise, with no members left, every holiday the removed candidates have

    Steps 2 and 3 are a compatibility shim for groups created before default
    holidays were stored; LEGACY_HOLIDAY_INFERENCE switches them off.
    """
    if group.holidays:
        return list(group.holidays)

    if legacy_inference is None:
        legacy_inference = settings.LEGACY_HOLIDAY_INFERENCE
    if not legacy_inference:
        return []

    if remaining:
        common = list(remaining[0].holidays)
        for candidate in remaining[1:]:
            held = set(candidate.holiday_ids)
            common = [h for h in common if h.id in held]
        return common

    union = {}
    for candidate in removed:
        for holiday in candidate.holidays:
            union.setdefault(holiday.id, holiday)
    return list(union.values())


def remove_candidates_from_group(
    db: Session,
    admin: AdminCapability,
    group_id: str,
    candidate_ids: List[str],
) -> GroupMembershipResult:
    ensure_admin(admin, "Only admin can modify candidate groups")

    if not candidate_ids:
        raise InvalidOperation("At least one candidate ID is required")

    group = get_candidate_group_by_id(db, group_id)

    ids = set(unique_ids(candidate_ids))
    removed = [c for c in group.candidates if c.id in ids]

    if not removed:
        raise InvalidOperation("None of the specified candidates are in the group")

    for candidate in removed:
        group.candidates.remove(candidate)
    db.flush()

    remaining = list(group.candidates)
    holidays = resolve_holidays_to_remove(group, remaining, removed)

    deleted: List[DeletedRecord] = []
    skipped: List[SkippedItem] = []
    if holidays:
        remove_holidays_from_members(db, removed, holidays, deleted, skipped)

    db.commit()
    db.refresh(group)

    logger.info(
        "Removed %d candidate(s) from group %s: %d holiday(s) stripped, %d record(s) deleted",
        len(removed), group.id, len(holidays), len(deleted),
        extra={"group_id": group.id},
    )

    return GroupMembershipResult(
        message=(
            f"Removed {len(removed)} candidate(s) from group \"{group.name}\". "
            f"Deleted {len(deleted)} attendance record(s)."
        ),
        data=CandidateGroupResponse.model_validate(group),
        deleted_records=deleted,
        skipped=skipped,
    )


def assign_holidays_to_group(
    db: Session,
    admin: AdminCapability,
    group_id: str,
    holiday_ids: List[str],
) -> HolidayAssignmentResult:
    """
    Assign holidays to every candidate in a group.

    The given holidays also replace the group's defaults, so candidates added
    later receive exactly this set.
    """
    ensure_admin(admin, "Only admin can assign holidays to groups")

    group = get_candidate_group_by_id(db, group_id)

    if not group.candidates:
        raise InvalidOperation("Group has no candidates")
    if not holiday_ids:
        raise InvalidOperation("At least one holiday ID is required")

    holidays = require_holidays(db, holiday_ids, active_only=True)
    members = list(group.candidates)

    created: List[Attendance] = []
    skipped: List[SkippedItem] = []
    assign_holidays_to_members(db, members, holidays, created, skipped)

    group.holidays = holidays
    db.commit()

    logger.info(
        "Assigned %d holiday(s) to group %s: %d record(s) created, %d skipped",
        len(holidays), group.id, len(created), len(skipped),
        extra={"group_id": group.id},
    )

    return HolidayAssignmentResult(
        message=(
            f"Holidays assigned to group \"{group.name}\". Added to {len(members)} candidate(s). "
            f"Created {len(created)} attendance record(s)."
        ),
        data=HolidayAssignmentData(
            group_id=group.id,
            group_name=group.name,
            candidates_updated=len(members),
            holidays_added=len(holidays),
            attendance_records_created=len(created),
            created_records=[AttendanceResponse.model_validate(a) for a in created],
            skipped=skipped,
        ),
    )


def remove_holidays_from_group(
    db: Session,
    admin: AdminCapability,
    group_id: str,
    holiday_ids: List[str],
) -> HolidayRemovalResult:
    """
    Remove holidays from every candidate in a group.

    Only the given holidays are dropped from the group's defaults.
    """
    ensure_admin(admin, "Only admin can remove holidays from groups")

    group = get_candidate_group_by_id(db, group_id)

    if not group.candidates:
        raise InvalidOperation("Group has no candidates")
    if not holiday_ids:
        raise InvalidOperation("At least one holiday ID is required")

    holidays = require_holidays(db, holiday_ids)
    members = list(group.candidates)

    deleted: List[DeletedRecord] = []
    skipped: List[SkippedItem] = []
    remove_holidays_from_members(db, members, holidays, deleted, skipped)

    group.holidays = [h for h in group.holidays if h not in holidays]
    db.commit()

    logger.info(
        "Removed %d holiday(s) from group %s: %d record(s) deleted, %d skipped",
        len(holidays), group.id, len(deleted), len(skipped),
        extra={"group_id": group.id},
    )

    return HolidayRemovalResult(
        message=(
            f"Holidays removed from group \"{group.name}\". Removed from {len(members)} candidate(s). "
            f"Deleted {len(deleted)} attendance record(s)."
        ),
        data=HolidayRemovalData(
            group_id=group.id,
            group_name=group.name,
            candidates_updated=len(members),
            holidays_removed=len(holidays),
            attendance_records_deleted=len(deleted),
            deleted_records=deleted,
            skipped=skipped,
        ),
    )
