import pytest
from datetime import date, datetime

from recruiting.core.exceptions import InvalidOperation, NotFound, PermissionDenied
from recruiting.core.permissions import require_admin
from recruiting.models import Attendance, AttendanceStatus
from recruiting.services.attendance_service import ATTENDANCE_EXISTS, HOLIDAY_INACTIVE, NO_HOLIDAY_RECORD
from recruiting.services.candidate_group_service import (
    add_candidates_to_group,
    assign_holidays_to_group,
    remove_candidates_from_group,
    remove_holidays_from_group,
)


def holiday_rows(db_session, candidate):
    return db_session.query(Attendance).filter(
        Attendance.candidate_id == candidate.id,
        Attendance.status == AttendanceStatus.HOLIDAY
    ).all()


class TestAddCandidatesToGroup:
    """Adding members and propagating default holidays"""

    def test_add_candidates(self, db_session, admin, make_candidate, make_group):
        """Test adding new candidates to an empty group"""
        c1, c2 = make_candidate(), make_candidate()
        group = make_group()

        result = add_candidates_to_group(db_session, admin, group.id, [c1.id, c2.id])

        assert result.success is True
        assert {c.id for c in result.data.candidates} == {c1.id, c2.id}
        assert result.created_records == []
        assert "Added 2 candidate(s)" in result.message
        assert result.data.creator.email == "admin_test@test.com"

    def test_add_same_candidate_twice_fails(self, db_session, admin, make_candidate, make_group):
        """Test that re-adding an existing member is rejected"""
        c1 = make_candidate()
        group = make_group()

        add_candidates_to_group(db_session, admin, group.id, [c1.id])

        with pytest.raises(InvalidOperation) as exc_info:
            add_candidates_to_group(db_session, admin, group.id, [c1.id])
        assert str(exc_info.value) == "All candidates are already in the group"

    def test_empty_candidate_list(self, db_session, admin, make_group):
        """Test that adding nobody is rejected before the diff"""
        group = make_group()

        with pytest.raises(InvalidOperation) as exc_info:
            add_candidates_to_group(db_session, admin, group.id, [])
        assert str(exc_info.value) == "At least one candidate ID is required"

    def test_add_mixed_existing_and_new(self, db_session, admin, make_candidate, make_group):
        """Test that only candidates not yet in the group are added"""
        c1, c2 = make_candidate(), make_candidate()
        group = make_group(candidates=[c1])

        result = add_candidates_to_group(db_session, admin, group.id, [c1.id, c2.id, c2.id])

        assert sorted(c.id for c in result.data.candidates) == sorted([c1.id, c2.id])
        assert "Added 1 candidate(s)" in result.message

    def test_missing_candidate_ids_are_listed(self, db_session, admin, make_candidate, make_group):
        """Test that NotFound names exactly the unknown ids"""
        c1 = make_candidate()
        group = make_group()

        with pytest.raises(NotFound) as exc_info:
            add_candidates_to_group(db_session, admin, group.id, [c1.id, "bogus-id"])

        assert str(exc_info.value) == "Some candidates not found: bogus-id"
        db_session.refresh(group)
        assert group.candidates == []

    def test_unknown_group(self, db_session, admin, make_candidate):
        """Test adding to a group that does not exist"""
        c1 = make_candidate()

        with pytest.raises(NotFound):
            add_candidates_to_group(db_session, admin, "missing-group", [c1.id])

    def test_new_member_inherits_default_holidays(self, db_session, admin, make_candidate, make_holiday, make_group):
        """Test that a candidate added after an assignment receives the group defaults"""
        c1, c2 = make_candidate(), make_candidate()
        h1 = make_holiday("New Year", date(2025, 1, 1))
        group = make_group(candidates=[c1])
        assign_holidays_to_group(db_session, admin, group.id, [h1.id])

        result = add_candidates_to_group(db_session, admin, group.id, [c2.id])

        db_session.refresh(c2)
        assert h1.id in c2.holiday_ids
        rows = holiday_rows(db_session, c2)
        assert len(rows) == 1
        assert rows[0].date == datetime(2025, 1, 1)
        assert rows[0].notes == "Holiday: New Year"
        assert len(result.created_records) == 1
        assert result.created_records[0].candidate_id == c2.id

    def test_inactive_default_is_skipped(self, db_session, admin, make_candidate, make_holiday, make_group):
        """Test that defaults deactivated since assignment are reported, not applied"""
        c1, c2 = make_candidate(), make_candidate()
        h1 = make_holiday("Closed Day", date(2025, 3, 3))
        group = make_group(candidates=[c1])
        assign_holidays_to_group(db_session, admin, group.id, [h1.id])
        h1.is_active = False
        db_session.commit()

        result = add_candidates_to_group(db_session, admin, group.id, [c2.id])

        db_session.refresh(c2)
        assert c2.holiday_ids == set()
        assert holiday_rows(db_session, c2) == []
        assert [s.reason for s in result.skipped] == [HOLIDAY_INACTIVE]


class TestRemoveCandidatesFromGroup:
    """Removing members and stripping group holidays"""

    def test_remove_last_member_strips_holiday(self, db_session, admin, make_candidate, make_holiday, make_group):
        """Test symmetric removal: holiday and its attendance row go away"""
        c1 = make_candidate()
        h1 = make_holiday("New Year", date(2025, 1, 1))
        group = make_group(candidates=[c1])
        assign_holidays_to_group(db_session, admin, group.id, [h1.id])
        assert len(holiday_rows(db_session, c1)) == 1

        result = remove_candidates_from_group(db_session, admin, group.id, [c1.id])

        db_session.refresh(c1)
        assert h1.id not in c1.holiday_ids
        assert holiday_rows(db_session, c1) == []
        assert result.data.candidates == []
        assert len(result.deleted_records) == 1
        assert result.deleted_records[0].holiday_id == h1.id
        assert result.skipped == []

    def test_remaining_members_keep_holidays(self, db_session, admin, make_candidate, make_holiday, make_group):
        """Test that only the removed candidates lose the defaults"""
        c1, c2 = make_candidate(), make_candidate()
        h1 = make_holiday("New Year", date(2025, 1, 1))
        group = make_group(candidates=[c1, c2])
        assign_holidays_to_group(db_session, admin, group.id, [h1.id])

        remove_candidates_from_group(db_session, admin, group.id, [c1.id])

        db_session.refresh(c2)
        assert h1.id in c2.holiday_ids
        assert len(holiday_rows(db_session, c2)) == 1

    def test_missing_attendance_is_skipped(self, db_session, admin, make_candidate, make_holiday, make_group):
        """Test that an already deleted row is reported as skipped"""
        c1 = make_candidate()
        h1 = make_holiday("New Year", date(2025, 1, 1))
        group = make_group(candidates=[c1])
        assign_holidays_to_group(db_session, admin, group.id, [h1.id])
        for row in holiday_rows(db_session, c1):
            db_session.delete(row)
        db_session.commit()

        result = remove_candidates_from_group(db_session, admin, group.id, [c1.id])

        assert result.deleted_records == []
        assert [s.reason for s in result.skipped] == [NO_HOLIDAY_RECORD]

    def test_empty_candidate_list(self, db_session, admin, make_candidate, make_group):
        """Test that removing an empty list is rejected and membership is kept"""
        c1 = make_candidate()
        group = make_group(candidates=[c1])

        with pytest.raises(InvalidOperation) as exc_info:
            remove_candidates_from_group(db_session, admin, group.id, [])
        assert str(exc_info.value) == "At least one candidate ID is required"
        db_session.refresh(group)
        assert group.candidate_ids == [c1.id]

    def test_remove_non_member_fails(self, db_session, admin, make_candidate, make_group):
        """Test that removing nobody is rejected"""
        c1, outsider = make_candidate(), make_candidate()
        group = make_group(candidates=[c1])

        with pytest.raises(InvalidOperation) as exc_info:
            remove_candidates_from_group(db_session, admin, group.id, [outsider.id])
        assert str(exc_info.value) == "None of the specified candidates are in the group"

    def test_legacy_group_without_defaults(self, db_session, admin, make_candidate, make_holiday, make_group):
        """Test that a legacy group strips the holidays shared by the remaining members"""
        c1, c2 = make_candidate(), make_candidate()
        shared = make_holiday("Shared", date(2025, 5, 1))
        own = make_holiday("Own", date(2025, 6, 1))
        c1.holidays = [shared, own]
        c2.holidays = [shared]
        db_session.commit()
        group = make_group(candidates=[c1, c2])

        result = remove_candidates_from_group(db_session, admin, group.id, [c1.id])

        db_session.refresh(c1)
        assert c1.holiday_ids == {own.id}
        assert {s.holiday_id for s in result.skipped} == {shared.id}


class TestAssignHolidaysToGroup:
    """Assigning holidays to every member"""

    def test_assign_holidays(self, db_session, admin, make_candidate, make_holiday, make_group):
        """Test the assignment summary"""
        c1, c2 = make_candidate(), make_candidate()
        h1 = make_holiday("New Year", date(2025, 1, 1))
        h2 = make_holiday("Labour Day", date(2025, 5, 1))
        group = make_group(candidates=[c1, c2])

        result = assign_holidays_to_group(db_session, admin, group.id, [h1.id, h2.id])

        assert result.success is True
        assert result.data.group_id == group.id
        assert result.data.candidates_updated == 2
        assert result.data.holidays_added == 2
        assert result.data.attendance_records_created == 4
        assert len(result.data.created_records) == 4
        assert result.data.skipped == []
        assert "Created 4 attendance record(s)" in result.message

        row = holiday_rows(db_session, c1)[0]
        assert row.punch_out is None
        assert row.duration == 0
        assert row.punch_in == row.date
        assert row.timezone == "UTC"

    def test_same_day_holidays_create_one_record(self, db_session, admin, make_candidate, make_holiday, make_group):
        """Test that two holidays on one day yield one row and one skip"""
        c1 = make_candidate()
        h1 = make_holiday("New Year", date(2025, 1, 1))
        h2 = make_holiday("Founders Day", date(2025, 1, 1))
        group = make_group(candidates=[c1])

        result = assign_holidays_to_group(db_session, admin, group.id, [h1.id, h2.id])

        assert result.data.attendance_records_created == 1
        assert len(holiday_rows(db_session, c1)) == 1
        assert len(result.data.skipped) == 1
        skipped = result.data.skipped[0]
        assert skipped.holiday_id == h2.id
        assert skipped.reason == ATTENDANCE_EXISTS
        db_session.refresh(c1)
        assert c1.holiday_ids == {h1.id, h2.id}

    def test_existing_attendance_is_not_overwritten(self, db_session, admin, make_candidate, make_holiday, make_group):
        """Test that a worked day is reported instead of replaced"""
        c1 = make_candidate()
        h1 = make_holiday("New Year", date(2025, 1, 1))
        db_session.add(Attendance(
            candidate_id=c1.id,
            candidate_email=c1.email,
            date=datetime(2025, 1, 1),
            punch_in=datetime(2025, 1, 1, 9, 0),
            status=AttendanceStatus.PRESENT
        ))
        db_session.commit()
        group = make_group(candidates=[c1])

        result = assign_holidays_to_group(db_session, admin, group.id, [h1.id])

        assert result.data.attendance_records_created == 0
        assert result.data.skipped[0].reason == ATTENDANCE_EXISTS

    def test_defaults_are_replaced(self, db_session, admin, make_candidate, make_holiday, make_group):
        """Test that a second assignment replaces the group defaults"""
        c1 = make_candidate()
        h1 = make_holiday("New Year", date(2025, 1, 1))
        h2 = make_holiday("Labour Day", date(2025, 5, 1))
        group = make_group(candidates=[c1])

        assign_holidays_to_group(db_session, admin, group.id, [h1.id])
        assign_holidays_to_group(db_session, admin, group.id, [h2.id])

        db_session.refresh(group)
        assert group.holiday_ids == [h2.id]

    def test_reassign_is_skipped_per_day(self, db_session, admin, make_candidate, make_holiday, make_group):
        """Test that assigning the same holiday again creates nothing"""
        c1 = make_candidate()
        h1 = make_holiday("New Year", date(2025, 1, 1))
        group = make_group(candidates=[c1])
        assign_holidays_to_group(db_session, admin, group.id, [h1.id])

        result = assign_holidays_to_group(db_session, admin, group.id, [h1.id])

        assert result.data.attendance_records_created == 0
        assert len(result.data.skipped) == 1
        assert len(holiday_rows(db_session, c1)) == 1

    def test_empty_group_fails(self, db_session, admin, make_holiday, make_group):
        """Test that a group without members cannot receive holidays"""
        h1 = make_holiday("New Year")
        group = make_group()

        with pytest.raises(InvalidOperation) as exc_info:
            assign_holidays_to_group(db_session, admin, group.id, [h1.id])
        assert str(exc_info.value) == "Group has no candidates"

    def test_inactive_or_missing_holidays(self, db_session, admin, make_candidate, make_holiday, make_group):
        """Test that inactive and unknown holidays are both listed"""
        c1 = make_candidate()
        active = make_holiday("Active", date(2025, 1, 1))
        inactive = make_holiday("Inactive", date(2025, 2, 1), is_active=False)
        group = make_group(candidates=[c1])

        with pytest.raises(NotFound) as exc_info:
            assign_holidays_to_group(db_session, admin, group.id, [active.id, inactive.id, "nope"])

        assert str(exc_info.value) == f"Some holidays not found or inactive: {inactive.id}, nope"
        db_session.refresh(c1)
        assert c1.holiday_ids == set()
        assert holiday_rows(db_session, c1) == []


class TestRemoveHolidaysFromGroup:
    """Removing holidays from every member"""

    def test_remove_holidays(self, db_session, admin, make_candidate, make_holiday, make_group):
        """Test removal summary and default set difference"""
        c1, c2 = make_candidate(), make_candidate()
        h1 = make_holiday("New Year", date(2025, 1, 1))
        h2 = make_holiday("Labour Day", date(2025, 5, 1))
        group = make_group(candidates=[c1, c2])
        assign_holidays_to_group(db_session, admin, group.id, [h1.id, h2.id])

        result = remove_holidays_from_group(db_session, admin, group.id, [h1.id])

        assert result.data.holidays_removed == 1
        assert result.data.attendance_records_deleted == 2
        assert result.data.skipped == []
        db_session.refresh(group)
        assert group.holiday_ids == [h2.id]
        for candidate in (c1, c2):
            db_session.refresh(candidate)
            assert candidate.holiday_ids == {h2.id}
            assert [r.notes for r in holiday_rows(db_session, candidate)] == ["Holiday: Labour Day"]

    def test_title_match_protects_same_day_holiday(self, db_session, admin, make_candidate, make_holiday, make_group):
        """Test that another holiday's row on the same day is not deleted"""
        c1 = make_candidate()
        h1 = make_holiday("New Year", date(2025, 1, 1))
        h2 = make_holiday("Founders Day", date(2025, 1, 1))
        group = make_group(candidates=[c1])
        assign_holidays_to_group(db_session, admin, group.id, [h1.id, h2.id])

        result = remove_holidays_from_group(db_session, admin, group.id, [h2.id])

        assert result.data.attendance_records_deleted == 0
        assert result.data.skipped[0].reason == NO_HOLIDAY_RECORD
        rows = holiday_rows(db_session, c1)
        assert [r.notes for r in rows] == ["Holiday: New Year"]

    def test_prefix_title_does_not_match_longer_title(self, db_session, admin, make_candidate, make_holiday, make_group):
        """Test that removing "Diwali" keeps the same-day "Diwali Holiday" row"""
        c1 = make_candidate()
        longer = make_holiday("Diwali Holiday", date(2025, 10, 20))
        shorter = make_holiday("Diwali", date(2025, 10, 20))
        group = make_group(candidates=[c1])
        assign_holidays_to_group(db_session, admin, group.id, [longer.id, shorter.id])

        result = remove_holidays_from_group(db_session, admin, group.id, [shorter.id])

        assert result.data.attendance_records_deleted == 0
        assert [s.reason for s in result.data.skipped] == [NO_HOLIDAY_RECORD]
        assert [r.notes for r in holiday_rows(db_session, c1)] == ["Holiday: Diwali Holiday"]

    def test_inactive_holiday_can_be_removed(self, db_session, admin, make_candidate, make_holiday, make_group):
        """Test that removal does not require the holiday to be active"""
        c1 = make_candidate()
        h1 = make_holiday("New Year", date(2025, 1, 1))
        group = make_group(candidates=[c1])
        assign_holidays_to_group(db_session, admin, group.id, [h1.id])
        h1.is_active = False
        db_session.commit()

        result = remove_holidays_from_group(db_session, admin, group.id, [h1.id])

        assert result.data.attendance_records_deleted == 1

    def test_unknown_holiday(self, db_session, admin, make_candidate, make_group):
        """Test that unknown holiday ids are listed"""
        c1 = make_candidate()
        group = make_group(candidates=[c1])

        with pytest.raises(NotFound) as exc_info:
            remove_holidays_from_group(db_session, admin, group.id, ["nope"])
        assert str(exc_info.value) == "Some holidays not found: nope"


class TestPermissionGate:
    """Every synchronization operation requires the admin capability"""

    @pytest.fixture
    def populated(self, db_session, admin, make_candidate, make_holiday, make_group):
        c1, c2 = make_candidate(), make_candidate()
        h1 = make_holiday("New Year", date(2025, 1, 1))
        h2 = make_holiday("Labour Day", date(2025, 5, 1))
        group = make_group(candidates=[c1])
        assign_holidays_to_group(db_session, admin, group.id, [h1.id])
        return group, c1, c2, h1, h2

    def snapshot(self, db_session, group, *candidates):
        db_session.expire_all()
        return (
            sorted(group.candidate_ids),
            sorted(group.holiday_ids),
            [sorted(c.holiday_ids) for c in candidates],
            db_session.query(Attendance).count(),
        )

    def test_guard_rejects_non_admin(self, recruiter_user):
        """Test that the guard never issues a capability to a non-admin"""
        with pytest.raises(PermissionDenied):
            require_admin(recruiter_user)

    def test_guard_rejects_inactive_admin(self, db_session, admin_user):
        """Test that a deactivated admin is refused"""
        admin_user.is_active = False
        db_session.commit()

        with pytest.raises(PermissionDenied):
            require_admin(admin_user)

    @pytest.mark.parametrize("operation", ["add", "remove", "assign", "unassign"])
    def test_operations_reject_non_admin(self, db_session, recruiter_user, populated, operation):
        """Test that a non-admin caller is refused with no mutation"""
        group, c1, c2, h1, h2 = populated
        before = self.snapshot(db_session, group, c1, c2)

        calls = {
            "add": lambda: add_candidates_to_group(db_session, recruiter_user, group.id, [c2.id]),
            "remove": lambda: remove_candidates_from_group(db_session, recruiter_user, group.id, [c1.id]),
            "assign": lambda: assign_holidays_to_group(db_session, recruiter_user, group.id, [h2.id]),
            "unassign": lambda: remove_holidays_from_group(db_session, recruiter_user, group.id, [h1.id]),
        }

        with pytest.raises(PermissionDenied) as exc_info:
            calls[operation]()

        assert exc_info.value.status_code == 403
        assert self.snapshot(db_session, group, c1, c2) == before
