"""
Attendance Ledger and holiday assignment.

Holiday attendance rows are synthetic: one per candidate per holiday day,
tagged with the holiday title in `notes`. The assignment helpers here are the
only writers of Candidate.holidays.
"""

import logging
from datetime import date, datetime
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from recruiting.core.config import settings
from recruiting.core.date_filters import canonical_midnight, day_range, weekday_name
from recruiting.core.exceptions import Conflict, InvalidOperation
from recruiting.core.permissions import AdminCapability, ensure_admin
from recruiting.models.attendance import Attendance, AttendanceStatus, HOLIDAY_NOTE_PREFIX
from recruiting.models.candidate import Candidate
from recruiting.models.holiday import Holiday
from recruiting.schemas import (
    AttendanceResponse,
    DeletedRecord,
    HolidayAssignmentData,
    HolidayAssignmentResult,
    HolidayRemovalData,
    HolidayRemovalResult,
    SkippedItem,
)
from recruiting.services.candidate_service import get_candidates_by_ids
from recruiting.services.holiday_service import require_holidays

logger = logging.getLogger(__name__)

ATTENDANCE_EXISTS = "Attendance already exists for this date"
NO_HOLIDAY_RECORD = "No holiday attendance record found for this date"
HOLIDAY_INACTIVE = "Holiday is inactive"


def holiday_note(holiday: Holiday) -> str:
    return f"{HOLIDAY_NOTE_PREFIX}{holiday.title}"


def find_attendance_for_day(db: Session, candidate_id: str, day) -> Optional[Attendance]:
    """Any attendance row of the candidate within the day-range, whatever its status."""
    start, end = day_range(day)
    return db.query(Attendance).filter(
        Attendance.candidate_id == candidate_id,
        Attendance.date >= start,
        Attendance.date < end,
    ).first()


def create_holiday_attendance(db: Session, candidate: Candidate, holiday: Holiday) -> Attendance:
    """
    Insert the Holiday row for candidate/holiday inside a savepoint.

    Raises Conflict when (candidate, day) is already taken at storage level;
    only the savepoint is rolled back in that case.
    """
    normalized_date = canonical_midnight(holiday.date)
    attendance = Attendance(
        candidate_id=candidate.id,
        candidate_email=candidate.email,
        date=normalized_date,
        day=weekday_name(holiday.date),
        punch_in=normalized_date,
        punch_out=None,
        duration=0,
        notes=holiday_note(holiday),
        timezone=settings.ATTENDANCE_TIMEZONE,
        status=AttendanceStatus.HOLIDAY,
    )

    try:
        with db.begin_nested():
            db.add(attendance)
    except IntegrityError:
        raise Conflict(ATTENDANCE_EXISTS)

    return attendance


def delete_holiday_attendance(db: Session, candidate_id: str, holiday: Holiday) -> Optional[Attendance]:
    """
    Delete the Holiday row generated for this holiday, if any.

    The whole note must match (case-insensitive); another holiday's row on the
    same day is left untouched, even when its title extends this one.
    """
    start, end = day_range(holiday.date)
    attendance = db.query(Attendance).filter(
        Attendance.candidate_id == candidate_id,
        Attendance.date >= start,
        Attendance.date < end,
        Attendance.status == AttendanceStatus.HOLIDAY,
        func.lower(Attendance.notes) == holiday_note(holiday).lower(),
    ).first()

    if attendance:
        db.delete(attendance)
        db.flush()

    return attendance


def list_attendance(
    db: Session,
    candidate_id: Optional[str] = None,
    status: Optional[AttendanceStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Attendance]:
    query = db.query(Attendance)

    if candidate_id:
        query = query.filter(Attendance.candidate_id == str(candidate_id))
    if status:
        query = query.filter(Attendance.status == status)
    if start_date:
        query = query.filter(Attendance.date >= day_range(start_date)[0])
    if end_date:
        query = query.filter(Attendance.date < day_range(end_date)[1])

    return query.order_by(Attendance.date.desc()).offset(skip).limit(limit).all()


def _skip(candidate: Candidate, holiday: Holiday, reason: str, on_date: Optional[datetime] = None) -> SkippedItem:
    return SkippedItem(
        candidate_id=candidate.id,
        candidate_name=candidate.full_name,
        holiday_id=holiday.id,
        holiday_title=holiday.title,
        date=on_date if on_date is not None else canonical_midnight(holiday.date),
        reason=reason,
    )


def skip_inactive(candidates: Iterable[Candidate], holidays: Iterable[Holiday]) -> List[SkippedItem]:
    return [_skip(c, h, HOLIDAY_INACTIVE) for c in candidates for h in holidays]


def assign_holidays_to_members(
    db: Session,
    candidates: Iterable[Candidate],
    holidays: List[Holiday],
    created_records: List[Attendance],
    skipped: List[SkippedItem],
) -> None:
    """
    Add each holiday to each candidate and create the Holiday rows.

    No validation and no commit: callers validate up front and commit once.
    Creation is idempotent per day, so two holidays on the same day produce a
    single row and the second one lands in `skipped`.
    """
    for candidate in candidates:
        current = candidate.holiday_ids
        for holiday in holidays:
            if holiday.id not in current:
                candidate.holidays.append(holiday)
                current.add(holiday.id)
        # Flush outside the savepoints below so a rolled back insert keeps these
        db.flush()

        for holiday in holidays:
            normalized_date = canonical_midnight(holiday.date)

            if find_attendance_for_day(db, candidate.id, holiday.date) is not None:
                skipped.append(_skip(candidate, holiday, ATTENDANCE_EXISTS, normalized_date))
                continue

            try:
                attendance = create_holiday_attendance(db, candidate, holiday)
            except Conflict as exc:
                logger.warning(
                    "Lost insert race for candidate %s on %s", candidate.id, normalized_date,
                    extra={"candidate_id": candidate.id, "holiday_id": holiday.id},
                )
                skipped.append(_skip(candidate, holiday, exc.message, normalized_date))
                continue

            created_records.append(attendance)


def remove_holidays_from_members(
    db: Session,
    candidates: Iterable[Candidate],
    holidays: List[Holiday],
    deleted_records: List[DeletedRecord],
    skipped: List[SkippedItem],
) -> None:
    """Reverse of assign_holidays_to_members; missing rows become skip entries."""
    for candidate in candidates:
        for holiday in [h for h in candidate.holidays if h in holidays]:
            candidate.holidays.remove(holiday)
        db.flush()

        for holiday in holidays:
            normalized_date = canonical_midnight(holiday.date)
            attendance = delete_holiday_attendance(db, candidate.id, holiday)

            if attendance is None:
                logger.debug(
                    "No holiday row for candidate %s on %s", candidate.id, normalized_date,
                    extra={"candidate_id": candidate.id, "holiday_id": holiday.id},
                )
                skipped.append(_skip(candidate, holiday, NO_HOLIDAY_RECORD, normalized_date))
                continue

            deleted_records.append(DeletedRecord(
                candidate_id=candidate.id,
                candidate_name=candidate.full_name,
                holiday_id=holiday.id,
                holiday_title=holiday.title,
                date=normalized_date,
                attendance_id=attendance.id,
            ))


def add_holidays_to_candidates(
    db: Session,
    admin: AdminCapability,
    candidate_ids: List[str],
    holiday_ids: List[str],
) -> HolidayAssignmentResult:
    """
    Add holidays to candidate calendars.

    Admin can add multiple holidays to multiple candidates at once. Every
    candidate must exist and every holiday must be active.
    """
    ensure_admin(admin, "Only admin can add holidays to candidate calendar")

    if not candidate_ids:
        raise InvalidOperation("At least one candidate ID is required")
    if not holiday_ids:
        raise InvalidOperation("At least one holiday ID is required")

    candidates = get_candidates_by_ids(db, candidate_ids)
    holidays = require_holidays(db, holiday_ids, active_only=True)

    created_records: List[Attendance] = []
    skipped: List[SkippedItem] = []
    assign_holidays_to_members(db, candidates, holidays, created_records, skipped)
    db.commit()

    logger.info(
        "Added %d holiday(s) to %d candidate(s): %d record(s) created, %d skipped",
        len(holidays), len(candidates), len(created_records), len(skipped),
    )

    return HolidayAssignmentResult(
        message=(
            f"Holidays added to {len(candidates)} candidate(s). "
            f"Created {len(created_records)} attendance record(s)."
        ),
        data=HolidayAssignmentData(
            candidates_updated=len(candidates),
            holidays_added=len(holidays),
            attendance_records_created=len(created_records),
            created_records=[AttendanceResponse.model_validate(a) for a in created_records],
            skipped=skipped,
        ),
    )


def remove_holidays_from_candidates(
    db: Session,
    admin: AdminCapability,
    candidate_ids: List[str],
    holiday_ids: List[str],
) -> HolidayRemovalResult:
    """Remove holidays from candidate calendars (inactive holidays included)."""
    ensure_admin(admin, "Only admin can remove holidays from candidate calendar")

    if not candidate_ids:
        raise InvalidOperation("At least one candidate ID is required")
    if not holiday_ids:
        raise InvalidOperation("At least one holiday ID is required")

    candidates = get_candidates_by_ids(db, candidate_ids)
    holidays = require_holidays(db, holiday_ids)

    deleted_records: List[DeletedRecord] = []
    skipped: List[SkippedItem] = []
    remove_holidays_from_members(db, candidates, holidays, deleted_records, skipped)
    db.commit()

    logger.info(
        "Removed %d holiday(s) from %d candidate(s): %d record(s) deleted, %d skipped",
        len(holidays), len(candidates), len(deleted_records), len(skipped),
    )

    return HolidayRemovalResult(
        message=(
            f"Holidays removed from {len(candidates)} candidate(s). "
            f"Deleted {len(deleted_records)} attendance record(s)."
        ),
        data=HolidayRemovalData(
            candidates_updated=len(candidates),
            holidays_removed=len(holidays),
            attendance_records_deleted=len(deleted_records),
            deleted_records=deleted_records,
            skipped=skipped,
        ),
    )
