# Import all models here so Base.metadata knows every table
from recruiting.models.user import User, UserRole
from recruiting.models.holiday import Holiday
from recruiting.models.candidate import Candidate, candidate_holidays
from recruiting.models.attendance import Attendance, AttendanceStatus, HOLIDAY_NOTE_PREFIX
from recruiting.models.candidate_group import CandidateGroup, candidate_group_members, candidate_group_holidays

__all__ = [
    "User",
    "UserRole",
    "Holiday",
    "Candidate",
    "candidate_holidays",
    "Attendance",
    "AttendanceStatus",
    "HOLIDAY_NOTE_PREFIX",
    "CandidateGroup",
    "candidate_group_members",
    "candidate_group_holidays",
]
