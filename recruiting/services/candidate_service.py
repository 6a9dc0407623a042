import logging
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from recruiting.core.exceptions import InvalidOperation, NotFound
from recruiting.core.permissions import AdminCapability, ensure_admin
from recruiting.models.candidate import Candidate
from recruiting.schemas import CandidateCreate

logger = logging.getLogger(__name__)


def unique_ids(ids: Iterable) -> List[str]:
    """Stringify ids and drop repeats, keeping first-seen order."""
    return list(dict.fromkeys(str(i) for i in ids))


def create_candidate(db: Session, admin: AdminCapability, candidate_in: CandidateCreate) -> Candidate:
    ensure_admin(admin, "Only admin can create candidates")

    existing = db.query(Candidate).filter(Candidate.email == candidate_in.email).first()
    if existing:
        raise InvalidOperation(f"A candidate already exists with email {candidate_in.email}")

    candidate = Candidate(
        full_name=candidate_in.full_name,
        email=candidate_in.email,
        employee_id=candidate_in.employee_id,
        is_active=True,
    )
    db.add(candidate)
    db.commit()
    db.refresh(candidate)

    logger.info("Created candidate %s", candidate.id)
    return candidate


def get_candidate_by_id(db: Session, candidate_id: str) -> Candidate:
    candidate = db.query(Candidate).filter(Candidate.id == str(candidate_id)).first()
    if not candidate:
        raise NotFound("Candidate not found")
    return candidate


def get_candidates_by_ids(db: Session, candidate_ids: Iterable) -> List[Candidate]:
    """
    Resolve every id to a candidate, in request order.

    Raises NotFound naming exactly the ids that do not exist.
    """
    ids = unique_ids(candidate_ids)
    if not ids:
        return []

    found = {c.id: c for c in db.query(Candidate).filter(Candidate.id.in_(ids)).all()}
    missing = [i for i in ids if i not in found]
    if missing:
        raise NotFound.missing("Some candidates not found", missing)

    return [found[i] for i in ids]


def list_candidates(
    db: Session,
    is_active: Optional[bool] = None,
    skip: int = 0,
    limit: int = 100,
) -> Tuple[List[Candidate], int]:
    query = db.query(Candidate)

    if is_active is not None:
        query = query.filter(Candidate.is_active == is_active)

    total = query.count()
    candidates = query.order_by(Candidate.full_name.asc()).offset(skip).limit(limit).all()
    return candidates, total
