from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.hr_portal.hr_portal.attendance.service import AttendanceService, elapsed_hours
from src.hr_portal.hr_portal.attendance.timesheet import TimesheetEntryInput, blank_slots
from src.hr_portal.hr_portal.core.exceptions import ConflictError, ValidationError


def _one_entry():
    slots = blank_slots()
    slots[0] = TimesheetEntryInput("09:00", "17:30", "Sprint work")
    return slots


def test_check_in_creates_today_record(attendance_repo, employee, fixed_now):
    svc = AttendanceService(attendance_repo, clock=lambda: fixed_now)

    record = svc.check_in(employee, address="10.0.0.5")

    assert record.work_date == fixed_now.date()
    assert record.check_in_time == fixed_now
    assert record.check_in_address == "10.0.0.5"
    assert record.is_open


def test_second_check_in_same_day_conflicts(attendance_repo, employee, fixed_now):
    svc = AttendanceService(attendance_repo, clock=lambda: fixed_now)
    svc.check_in(employee)

    with pytest.raises(ConflictError):
        svc.check_in(employee, now=fixed_now + timedelta(hours=1))

    assert len(attendance_repo.records) == 1


def test_concurrent_check_in_surfaces_the_unique_key_conflict(attendance_repo, employee, fixed_now):
    svc = AttendanceService(attendance_repo, clock=lambda: fixed_now)
    svc.check_in(employee)
    # Another session's insert lands between this session's read and write.
    attendance_repo.get_for_profile_and_date = lambda profile_id, work_date: None

    with pytest.raises(ConflictError, match="You have already checked in today"):
        svc.check_in(employee)

    assert len(attendance_repo.records) == 1


def test_check_out_computes_hours_and_records_timesheet(attendance_repo, employee, fixed_now):
    svc = AttendanceService(attendance_repo, clock=lambda: fixed_now)
    svc.check_in(employee)
    out_time = fixed_now.replace(hour=17, minute=30)

    result = svc.check_out(employee, _one_entry(), address="10.0.0.6", now=out_time)

    assert result.total_hours == 8.5
    assert result.entry_count == 1
    record = attendance_repo.records[(employee.profile_id, fixed_now.date())]
    assert record.check_out_time == out_time
    assert record.check_out_address == "10.0.0.6"
    assert record.timesheet_completed
    timesheet = attendance_repo.timesheets[result.timesheet_id]
    assert timesheet["attendance_id"] == record.attendance_id
    assert [e.hours for e in timesheet["entries"]] == [8.5]


def test_check_in_after_completed_day_is_rejected(attendance_repo, employee, fixed_now):
    svc = AttendanceService(attendance_repo, clock=lambda: fixed_now)
    svc.check_in(employee)
    svc.check_out(employee, _one_entry(), now=fixed_now.replace(hour=18))

    with pytest.raises(ValidationError, match="already completed"):
        svc.check_in(employee, now=fixed_now.replace(hour=19))


def test_check_out_without_entries_never_touches_repository(attendance_repo, employee, fixed_now):
    svc = AttendanceService(attendance_repo, clock=lambda: fixed_now)
    svc.check_in(employee)
    attendance_repo.calls.clear()

    with pytest.raises(ValidationError, match="at least one timesheet entry"):
        svc.check_out(employee, blank_slots(), now=fixed_now.replace(hour=17))

    assert attendance_repo.calls == []
    assert attendance_repo.records[(employee.profile_id, fixed_now.date())].is_open


def test_check_out_without_check_in(attendance_repo, employee, fixed_now):
    svc = AttendanceService(attendance_repo, clock=lambda: fixed_now)

    with pytest.raises(ValidationError, match="not checked in"):
        svc.check_out(employee, _one_entry())


def test_second_check_out_is_rejected(attendance_repo, employee, fixed_now):
    svc = AttendanceService(attendance_repo, clock=lambda: fixed_now)
    svc.check_in(employee)
    svc.check_out(employee, _one_entry(), now=fixed_now.replace(hour=17))

    with pytest.raises(ValidationError, match="already checked out"):
        svc.check_out(employee, _one_entry(), now=fixed_now.replace(hour=18))
    assert len(attendance_repo.timesheets) == 1


def test_failed_checkout_write_leaves_record_open(attendance_repo, employee, fixed_now):
    svc = AttendanceService(attendance_repo, clock=lambda: fixed_now)
    svc.check_in(employee)
    attendance_repo.fail_checkout = True

    with pytest.raises(RuntimeError):
        svc.check_out(employee, _one_entry(), now=fixed_now.replace(hour=17))

    assert attendance_repo.records[(employee.profile_id, fixed_now.date())].is_open
    assert attendance_repo.timesheets == {}


def test_history_ui_formats_rows(attendance_repo, employee, fixed_now):
    svc = AttendanceService(attendance_repo, clock=lambda: fixed_now)
    svc.check_in(employee, address="10.0.0.5")
    svc.check_out(employee, _one_entry(), now=fixed_now.replace(hour=17, minute=15))

    [row] = svc.get_history_ui(employee)

    assert row["date"] == "2026-03-02"
    assert row["check_in"] == "09:00:00"
    assert row["check_out"] == "17:15:00"
    assert row["total_hours"] == "08:15"
    assert row["check_out_address"] == "-"
    assert row["timesheet_completed"] is True


def test_elapsed_hours_never_negative():
    start = datetime(2026, 3, 2, 9, 0)
    assert elapsed_hours(start, start - timedelta(minutes=5)) == 0.0
    assert elapsed_hours(start, start + timedelta(minutes=20)) == 0.33
