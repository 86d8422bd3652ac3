"""
Tests for the attendance state machine (mark check-in/check-out)
"""
from datetime import date, datetime

import pytest

from hrms_attendance.constants import WFHStage, WFHStatus
from hrms_attendance.core.deps import (
    get_attendance_service,
    get_directory,
    get_geofence_service,
    get_wfh_service,
)
from hrms_attendance.core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    AttendanceRecordNotFound,
    ConcurrentModification,
    EmployeeNotFound,
    InvalidRequest,
    NoPriorCheckIn,
    OutsideGeofence,
)
from hrms_attendance.services.attendance_repository import (
    AttendanceRepository,
    WorkFromHomeRepository,
    daily_key,
)
from hrms_attendance.services.attendance_service import AttendanceService
from hrms_attendance.services.directory_service import DirectoryService
from hrms_attendance.services.geofence_service import GeofenceService
from hrms_attendance.services.wfh_service import WorkFromHomeService
from hrms_attendance.utils.datetime_utils import UTC

from conftest import BRANCH_ID, BRANCH_LAT, BRANCH_LON, COMPANY_ID, EMPLOYEE_ID, OFFICE_LAT, OFFICE_LON, seed_employee

# Monday 2024-05-06, 09:00 UTC
FIXED_NOW = datetime(2024, 5, 6, 9, 0, tzinfo=UTC)
TODAY = date(2024, 5, 6)


@pytest.fixture
def wfh_service(store):
    directory = DirectoryService(store)
    return WorkFromHomeService(WorkFromHomeRepository(store), directory, "Asia/Kolkata")


def build_service(store, wfh_service=None, enforce_geofence=False, now=FIXED_NOW):
    directory = DirectoryService(store)
    return AttendanceService(
        AttendanceRepository(store),
        directory,
        geofence=GeofenceService(directory),
        wfh=wfh_service,
        clock=lambda: now,
        default_tz="UTC",
        enforce_geofence=enforce_geofence,
    )


@pytest.fixture
def service(store, employee, wfh_service):
    return build_service(store, wfh_service)


def check_in(service, time="09:00", **kwargs):
    params = dict(is_checked_in=True, is_checked_out=False, is_work_from_home=False)
    params.update(kwargs)
    return service.mark_attendance(
        EMPLOYEE_ID, COMPANY_ID, time,
        params.pop("is_checked_in"), params.pop("is_checked_out"), params.pop("is_work_from_home"),
        **params,
    )


def check_out(service, time="18:00", **kwargs):
    params = dict(is_checked_in=False, is_checked_out=True, is_work_from_home=False)
    params.update(kwargs)
    return service.mark_attendance(
        EMPLOYEE_ID, COMPANY_ID, time,
        params.pop("is_checked_in"), params.pop("is_checked_out"), params.pop("is_work_from_home"),
        **params,
    )


def test_check_in_on_fresh_day(service):
    result = check_in(service)
    assert result.code == "CheckInMarked"
    assert result.message == "Check-in marked successfully"
    assert result.record.attendance_id == f"{EMPLOYEE_ID}2024-05-06"
    assert result.record.is_checked_in is True
    assert result.record.is_checked_out is False
    assert result.record.check_in_time == "09:00"


def test_second_check_in_rejected_and_time_kept(service):
    check_in(service, time="09:00")
    with pytest.raises(AlreadyCheckedIn) as exc_info:
        check_in(service, time="09:30")
    assert exc_info.value.status_code == 400
    assert service.get_today_attendance(EMPLOYEE_ID).time == "09:00"


def test_check_out_without_check_in(service):
    with pytest.raises(NoPriorCheckIn):
        check_out(service)
    with pytest.raises(AttendanceRecordNotFound):
        service.get_today_attendance(EMPLOYEE_ID)


def test_check_in_then_check_out_round_trip(service):
    check_in(service)
    today = service.get_today_attendance(EMPLOYEE_ID)
    assert today.is_checked_in is True
    assert today.is_checked_out is False

    result = check_out(service, time="18:00")
    assert result.code == "CheckOutMarked"
    after = service.get_today_attendance(EMPLOYEE_ID)
    assert after.is_checked_out is True
    assert after.attendance_id == today.attendance_id
    assert after.check_in_time == "09:00"
    assert after.check_out_time == "18:00"
    assert after.time == "18:00"


def test_second_check_out_rejected(service):
    check_in(service)
    check_out(service)
    with pytest.raises(AlreadyCheckedOut):
        check_out(service, time="19:00")


def test_check_in_after_completed_day_reopens_record(service):
    check_in(service, time="09:00")
    check_out(service, time="13:00")
    result = check_in(service, time="14:00")
    assert result.code == "CheckInMarked"
    record = service.get_today_attendance(EMPLOYEE_ID)
    assert record.attendance_id == daily_key(EMPLOYEE_ID, TODAY)
    assert record.is_checked_out is False
    assert record.check_in_time == "14:00"
    assert record.check_out_time is None


def test_rejection_messages_are_distinct(service):
    messages = set()
    for exc in (AlreadyCheckedIn, AlreadyCheckedOut, NoPriorCheckIn, InvalidRequest, EmployeeNotFound):
        messages.add(exc().detail)
    assert len(messages) == 5


def test_no_intent_is_invalid(service):
    with pytest.raises(InvalidRequest):
        service.mark_attendance(EMPLOYEE_ID, COMPANY_ID, "09:00", False, False, False)


@pytest.mark.parametrize(
    "args",
    [
        (None, COMPANY_ID, "09:00", True, False, False),
        (EMPLOYEE_ID, None, "09:00", True, False, False),
        (EMPLOYEE_ID, COMPANY_ID, "", True, False, False),
        (EMPLOYEE_ID, COMPANY_ID, "09:00", None, False, False),
        (EMPLOYEE_ID, COMPANY_ID, "09:00", True, None, False),
        (EMPLOYEE_ID, COMPANY_ID, "09:00", True, False, None),
    ],
)
def test_missing_fields_are_invalid(service, args):
    with pytest.raises(InvalidRequest):
        service.mark_attendance(*args)


def test_unknown_employee(service):
    with pytest.raises(EmployeeNotFound):
        service.mark_attendance("ghost", COMPANY_ID, "09:00", True, False, False)


def test_employee_of_another_company(service, store):
    seed_employee(store, user_id="emp2", company_id="company-B")
    with pytest.raises(EmployeeNotFound):
        service.mark_attendance("emp2", COMPANY_ID, "09:00", True, False, False)


def test_invalid_timezone(service):
    with pytest.raises(InvalidRequest):
        check_in(service, tz="Not/AZone")


def test_request_timezone_decides_the_date(store, employee):
    # 2024-05-06 23:30 UTC is already 2024-05-07 in Kolkata
    late = datetime(2024, 5, 6, 23, 30, tzinfo=UTC)
    service = build_service(store, now=late)
    result = check_in(service, tz="Asia/Kolkata")
    assert result.record.date == "2024-05-07"
    assert check_in(service, tz="UTC").record.date == "2024-05-06"


def test_lost_race_on_check_in(store, employee):
    repository = AttendanceRepository(store)
    repository.create_check_in(
        employee_id=EMPLOYEE_ID, company_id=COMPANY_ID, day=TODAY, time="09:00", is_work_from_home=False,
    )
    with pytest.raises(ConcurrentModification):
        repository.create_check_in(
            employee_id=EMPLOYEE_ID, company_id=COMPANY_ID, day=TODAY, time="09:01", is_work_from_home=False,
        )


def test_lost_race_on_reopen(service, store):
    check_in(service, time="09:00")
    check_out(service, time="13:00")
    repository = AttendanceRepository(store)
    completed = repository.fetch_day(EMPLOYEE_ID, TODAY)
    repository.create_check_in(
        employee_id=EMPLOYEE_ID, company_id=COMPANY_ID, day=TODAY, time="14:00",
        is_work_from_home=False, replaces=completed,
    )
    with pytest.raises(ConcurrentModification):
        repository.create_check_in(
            employee_id=EMPLOYEE_ID, company_id=COMPANY_ID, day=TODAY, time="14:01",
            is_work_from_home=False, replaces=completed,
        )
    assert repository.fetch_day(EMPLOYEE_ID, TODAY).check_in_time == "14:00"


def test_lost_race_on_check_out(service, store):
    check_in(service)
    repository = AttendanceRepository(store)
    stale = repository.fetch_day(EMPLOYEE_ID, TODAY)
    repository.complete_check_out(stale, "17:00")
    with pytest.raises(ConcurrentModification):
        repository.complete_check_out(stale, "17:05")
    assert repository.fetch_day(EMPLOYEE_ID, TODAY).check_out_time == "17:00"


class TestGeofenceEnforcement:
    @pytest.fixture
    def enforced(self, store, company):
        seed_employee(store, user_id=EMPLOYEE_ID, branch_id=BRANCH_ID)
        return build_service(store, enforce_geofence=True)

    def test_inside_branch_zone(self, enforced):
        result = check_in(enforced, latitude=BRANCH_LAT, longitude=BRANCH_LON)
        assert result.code == "CheckInMarked"

    def test_outside_branch_zone(self, enforced):
        with pytest.raises(OutsideGeofence) as exc_info:
            check_in(enforced, latitude=OFFICE_LAT, longitude=OFFICE_LON)
        assert exc_info.value.status_code == 403

    def test_missing_coordinates(self, enforced):
        with pytest.raises(InvalidRequest):
            check_in(enforced)

    def test_work_from_home_skips_geofence(self, enforced):
        assert check_in(enforced, is_work_from_home=True).code == "CheckInMarked"

    def test_check_out_is_not_gated(self, enforced):
        check_in(enforced, latitude=BRANCH_LAT, longitude=BRANCH_LON)
        assert check_out(enforced).code == "CheckOutMarked"


def test_not_enforced_by_default(service):
    assert check_in(service, latitude=0.0, longitude=0.0).code == "CheckInMarked"


class TestWorkFromHomeStage:
    def test_accepted_request_advances_through_stages(self, service, wfh_service):
        request = wfh_service.request_work_from_home(EMPLOYEE_ID, COMPANY_ID, TODAY.isoformat())
        wfh_service.resolve_work_from_home(request.attendance_id, "accepted")

        check_in(service, is_work_from_home=True)
        assert wfh_service.repository.get(request.attendance_id).stage == WFHStage.CHECK_IN

        check_out(service, is_work_from_home=True)
        stored = wfh_service.repository.get(request.attendance_id)
        assert stored.stage == WFHStage.COMPLETED
        assert stored.whf == WFHStatus.ACCEPTED

    def test_pending_request_is_not_advanced(self, service, wfh_service):
        request = wfh_service.request_work_from_home(EMPLOYEE_ID, COMPANY_ID, TODAY.isoformat())
        check_in(service, is_work_from_home=True)
        assert wfh_service.repository.get(request.attendance_id).stage == WFHStage.REQUEST

    def test_without_request_check_in_still_succeeds(self, service):
        assert check_in(service, is_work_from_home=True).record.is_work_from_home is True

    def test_reopened_day_keeps_completed_stage(self, service, wfh_service):
        request = wfh_service.request_work_from_home(EMPLOYEE_ID, COMPANY_ID, TODAY.isoformat())
        wfh_service.resolve_work_from_home(request.attendance_id, "accepted")
        check_in(service, time="09:00", is_work_from_home=True)
        check_out(service, time="13:00", is_work_from_home=True)

        check_in(service, time="14:00", is_work_from_home=True)
        assert wfh_service.repository.get(request.attendance_id).stage == WFHStage.COMPLETED


def test_wfh_stage_follows_wfh_timezone_with_default_wiring(store, employee):
    directory = get_directory(store)
    wfh = get_wfh_service(store, directory)
    service = get_attendance_service(store, directory, get_geofence_service(directory), wfh)
    # 22:30 UTC on the 6th is 04:00 on the 7th in Kolkata
    service.clock = lambda: datetime(2024, 5, 6, 22, 30, tzinfo=UTC)

    request = wfh.request_work_from_home(EMPLOYEE_ID, COMPANY_ID, "2024-05-07T04:00:00+05:30")
    wfh.resolve_work_from_home(request.attendance_id, "accepted")
    result = service.mark_attendance(EMPLOYEE_ID, COMPANY_ID, "04:00", True, False, True)

    assert result.record.date == "2024-05-06"
    assert request.whf_date == "2024-05-07"
    assert wfh.repository.get(request.attendance_id).stage == WFHStage.CHECK_IN
