"""
Holiday Registry

Admin-only management of holiday definitions. Dates are calendar days in the
reference timezone; datetimes are reduced to their day on the way in.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from recruiting.core.exceptions import NotFound
from recruiting.core.permissions import AdminCapability, ensure_admin
from recruiting.models.holiday import Holiday
from recruiting.schemas import HolidayCreate, HolidayUpdate
from recruiting.services.candidate_service import unique_ids

logger = logging.getLogger(__name__)


def create_holiday(db: Session, admin: AdminCapability, holiday_in: HolidayCreate) -> Holiday:
    """
    Create a new holiday.

    - **title**: Name of the holiday (e.g., "Independence Day")
    - **date**: Calendar day of the holiday
    - **is_active**: Inactive holidays cannot be assigned (default: True)
    """
    ensure_admin(admin, "Only admin can create holidays")

    holiday = Holiday(
        title=holiday_in.title,
        date=holiday_in.date,
        is_active=holiday_in.is_active,
    )

    db.add(holiday)
    db.commit()
    db.refresh(holiday)

    logger.info("Created holiday %s (%s) on %s", holiday.id, holiday.title, holiday.date)
    return holiday


def query_holidays(
    db: Session,
    title: Optional[str] = None,
    is_active: Optional[bool] = None,
    on_date: Optional[date] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Holiday]:
    """
    List holidays with optional filtering.

    - **title**: Case-insensitive substring match
    - **on_date**: Exact calendar day; ignored when a start/end bound is given
    - **start_date** / **end_date**: Inclusive bounds
    """
    query = db.query(Holiday)

    if title:
        query = query.filter(Holiday.title.icontains(title, autoescape=True))

    if is_active is not None:
        query = query.filter(Holiday.is_active == is_active)

    if start_date is not None or end_date is not None:
        if start_date is not None:
            query = query.filter(Holiday.date >= start_date)
        if end_date is not None:
            query = query.filter(Holiday.date <= end_date)
    elif on_date is not None:
        query = query.filter(Holiday.date == on_date)

    query = query.order_by(Holiday.date.desc())

    return query.offset(skip).limit(limit).all()


def get_holiday_by_id(db: Session, holiday_id: str) -> Holiday:
    """Get a specific holiday by ID"""
    holiday = db.query(Holiday).filter(Holiday.id == str(holiday_id)).first()
    if not holiday:
        raise NotFound("Holiday not found")
    return holiday


def find_holidays_by_ids(db: Session, holiday_ids: Iterable, active_only: bool = False) -> List[Holiday]:
    query = db.query(Holiday).filter(Holiday.id.in_(unique_ids(holiday_ids)))
    if active_only:
        query = query.filter(Holiday.is_active.is_(True))
    return query.all()


def require_holidays(db: Session, holiday_ids: Iterable, active_only: bool = False) -> List[Holiday]:
    """Like find_holidays_by_ids, but every id must resolve (request order kept)."""
    ids = unique_ids(holiday_ids)
    found = {h.id: h for h in find_holidays_by_ids(db, ids, active_only=active_only)}
    missing = [i for i in ids if i not in found]
    if missing:
        label = "Some holidays not found or inactive" if active_only else "Some holidays not found"
        raise NotFound.missing(label, missing)
    return [found[i] for i in ids]


def update_holiday_by_id(db: Session, admin: AdminCapability, holiday_id: str, holiday_data: HolidayUpdate) -> Holiday:
    """
    Update a holiday.

    Note: attendance rows already generated for the old date are not moved.
    """
    ensure_admin(admin, "Only admin can update holidays")

    holiday = get_holiday_by_id(db, holiday_id)

    if holiday_data.title is not None:
        holiday.title = holiday_data.title
    if holiday_data.date is not None:
        holiday.date = holiday_data.date
    if holiday_data.is_active is not None:
        holiday.is_active = holiday_data.is_active

    db.commit()
    db.refresh(holiday)

    logger.info("Updated holiday %s", holiday.id)
    return holiday


def delete_holiday_by_id(db: Session, admin: AdminCapability, holiday_id: str) -> None:
    """
    Delete a holiday.

    Candidate and group references are removed by the database (ON DELETE
    CASCADE). Holiday attendance rows already generated are kept.
    """
    ensure_admin(admin, "Only admin can delete holidays")

    holiday = get_holiday_by_id(db, holiday_id)
    db.delete(holiday)
    db.commit()

    logger.info("Deleted holiday %s", holiday_id)
    return None
