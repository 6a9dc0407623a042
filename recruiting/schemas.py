from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional, List
from datetime import date as calendar_day, datetime
from recruiting.core.date_filters import to_calendar_day
from recruiting.models.attendance import AttendanceStatus


# ============= Candidate Schemas =============
class CandidateBase(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    employee_id: Optional[str] = None

    @field_validator('full_name')
    @classmethod
    def strip_name(cls, v):
        if not v.strip():
            raise ValueError('Candidate name cannot be empty')
        return v.strip()


class CandidateCreate(CandidateBase):
    pass


class CandidateSummary(BaseModel):
    id: str
    full_name: str
    email: str
    employee_id: Optional[str] = None

    class Config:
        from_attributes = True


class CandidateResponse(CandidateSummary):
    is_active: bool
    holiday_ids: List[str] = []
    created_at: datetime

    @field_validator('holiday_ids', mode='before')
    @classmethod
    def sort_ids(cls, v):
        return sorted(v or [])


# ============= Holiday Schemas =============
def _coerce_calendar_day(v):
    """Accept dates, datetimes and ISO strings; keep only the calendar day."""
    if isinstance(v, str) and 'T' in v:
        v = datetime.fromisoformat(v.replace('Z', '+00:00'))
    if isinstance(v, datetime):
        return to_calendar_day(v)
    return v


class HolidayBase(BaseModel):
    title: str
    date: calendar_day
    is_active: bool = True

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        """Ensure title is not empty"""
        if not v or not v.strip():
            raise ValueError('Holiday title cannot be empty')
        return v.strip()

    @field_validator('date', mode='before')
    @classmethod
    def normalize_date(cls, v):
        return _coerce_calendar_day(v)


class HolidayCreate(HolidayBase):
    pass


class HolidayUpdate(BaseModel):
    title: Optional[str] = None
    date: Optional[calendar_day] = None
    is_active: Optional[bool] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Holiday title cannot be empty')
        return v.strip() if v is not None else v

    @field_validator('date', mode='before')
    @classmethod
    def normalize_date(cls, v):
        return _coerce_calendar_day(v)


class HolidayResponse(HolidayBase):
    id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ============= Candidate Group Schemas =============
class CandidateGroupCreate(BaseModel):
    name: str = Field(..., max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    candidate_ids: List[str] = []

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError('Group name cannot be empty')
        return v.strip()


class CandidateGroupUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    candidate_ids: Optional[List[str]] = None
    is_active: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Group name cannot be empty')
        return v.strip() if v is not None else v

    @model_validator(mode='after')
    def at_least_one_field(self):
        if not self.model_fields_set:
            raise ValueError('At least one field must be provided for update')
        return self


class CreatorSummary(BaseModel):
    id: str
    name: str
    email: str

    class Config:
        from_attributes = True


class CandidateGroupResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    candidates: List[CandidateSummary] = []
    holiday_ids: List[str] = []
    created_by: str
    creator: Optional[CreatorSummary] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ============= Attendance Schemas =============
class AttendanceResponse(BaseModel):
    id: str
    candidate_id: str
    candidate_email: str
    date: datetime
    day: Optional[str] = None
    punch_in: datetime
    punch_out: Optional[datetime] = None
    duration: int
    notes: Optional[str] = None
    timezone: str
    status: AttendanceStatus

    class Config:
        from_attributes = True


# ============= Holiday Propagation Results =============
class SkippedItem(BaseModel):
    candidate_id: str
    candidate_name: Optional[str] = None
    holiday_id: Optional[str] = None
    holiday_title: Optional[str] = None
    date: Optional[datetime] = None
    reason: str


class DeletedRecord(BaseModel):
    candidate_id: str
    candidate_name: Optional[str] = None
    holiday_id: str
    holiday_title: str
    date: datetime
    attendance_id: str


class HolidayAssignmentData(BaseModel):
    group_id: Optional[str] = None
    group_name: Optional[str] = None
    candidates_updated: int
    holidays_added: int
    attendance_records_created: int
    created_records: List[AttendanceResponse] = []
    skipped: List[SkippedItem] = []


class HolidayAssignmentResult(BaseModel):
    success: bool = True
    message: str
    data: HolidayAssignmentData


class HolidayRemovalData(BaseModel):
    group_id: Optional[str] = None
    group_name: Optional[str] = None
    candidates_updated: int
    holidays_removed: int
    attendance_records_deleted: int
    deleted_records: List[DeletedRecord] = []
    skipped: List[SkippedItem] = []


class HolidayRemovalResult(BaseModel):
    success: bool = True
    message: str
    data: HolidayRemovalData


class GroupMembershipResult(BaseModel):
    success: bool = True
    message: str
    data: CandidateGroupResponse
    created_records: List[AttendanceResponse] = []
    deleted_records: List[DeletedRecord] = []
    skipped: List[SkippedItem] = []
