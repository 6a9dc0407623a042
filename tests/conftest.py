import itertools
from datetime import date

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from recruiting.core.config import settings
from recruiting.core.permissions import require_admin
from recruiting.db.session import init_db, make_engine
from recruiting.models import Candidate, CandidateGroup, Holiday, User, UserRole

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False)


@pytest.fixture(autouse=True)
def reference_timezone(monkeypatch):
    """Run every test with UTC as the reference timezone unless it says otherwise"""
    monkeypatch.setattr(settings, "ATTENDANCE_TIMEZONE", "UTC")
    monkeypatch.setattr(settings, "LEGACY_HOLIDAY_INFERENCE", True)


@pytest.fixture
def engine():
    """Fresh in-memory database per test"""
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = TestingSessionLocal(bind=engine)

    yield session

    session.close()


@pytest.fixture
def admin_user(db_session):
    """Create admin user for testing"""
    user = User(
        name="Admin Test",
        email="admin_test@test.com",
        role=UserRole.ADMIN,
        is_active=True
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def recruiter_user(db_session):
    """Create a non-admin user for testing"""
    user = User(
        name="Recruiter Test",
        email="recruiter_test@test.com",
        role=UserRole.RECRUITER,
        is_active=True
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin(admin_user):
    """Admin capability issued by the guard"""
    return require_admin(admin_user)


@pytest.fixture
def make_candidate(db_session):
    counter = itertools.count(1)

    def _make(full_name=None, email=None):
        n = next(counter)
        candidate = Candidate(
            full_name=full_name or f"Candidate {n}",
            email=email or f"candidate{n}@test.com",
            employee_id=f"EMP-{n:03d}",
            is_active=True
        )
        db_session.add(candidate)
        db_session.commit()
        db_session.refresh(candidate)
        return candidate

    return _make


@pytest.fixture
def make_holiday(db_session):
    def _make(title, on=date(2025, 1, 1), is_active=True):
        holiday = Holiday(title=title, date=on, is_active=is_active)
        db_session.add(holiday)
        db_session.commit()
        db_session.refresh(holiday)
        return holiday

    return _make


@pytest.fixture
def make_group(db_session, admin_user):
    """Build a group directly, bypassing the services (e.g. legacy groups without defaults)"""
    def _make(name="Test Group", candidates=(), holidays=()):
        group = CandidateGroup(name=name, created_by=admin_user.id, is_active=True)
        group.candidates = list(candidates)
        group.holidays = list(holidays)
        db_session.add(group)
        db_session.commit()
        db_session.refresh(group)
        return group

    return _make
