"""
Attendance service - daily check-in/check-out state machine

State per (employee, date): absent (no record), checkedIn, completed.
Each call does one read of today's record and at most one conditional write;
a lost race surfaces as ConcurrentModification instead of a silent overwrite.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from hrms_attendance.constants import (
    CHECK_IN_MARKED,
    CHECK_OUT_MARKED,
    AttendanceState,
    WFHStage,
)
from hrms_attendance.core.config import settings
from hrms_attendance.core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    AttendanceRecordNotFound,
    ConcurrentModification,
    EmployeeNotFound,
    InvalidRequest,
    NoPriorCheckIn,
    OutsideGeofence,
    StoreUnavailable,
)
from hrms_attendance.schemas.attendance import AttendanceRecord, WorkedHoursSummary
from hrms_attendance.schemas.directory import EmployeeProfile
from hrms_attendance.services.attendance_repository import AttendanceRepository
from hrms_attendance.services.directory_service import DirectoryService
from hrms_attendance.services.geofence_service import GeofenceService
from hrms_attendance.services.wfh_service import WorkFromHomeService
from hrms_attendance.utils.datetime_utils import local_date, now_utc, parse_event_time

logger = logging.getLogger(__name__)

_WEEKDAY_KEYS = {0: "mon", 1: "tue", 2: "wed", 3: "thu", 4: "fri"}


@dataclass
class MarkResult:
    code: str
    message: str
    record: AttendanceRecord


def attendance_state(record: Optional[AttendanceRecord]) -> AttendanceState:
    if record is None or not record.is_checked_in:
        return AttendanceState.ABSENT
    if record.is_checked_out:
        return AttendanceState.COMPLETED
    return AttendanceState.CHECKED_IN


class AttendanceService:
    def __init__(
        self,
        repository: AttendanceRepository,
        directory: DirectoryService,
        *,
        geofence: Optional[GeofenceService] = None,
        wfh: Optional[WorkFromHomeService] = None,
        clock: Callable[[], datetime] = now_utc,
        default_tz: Optional[str] = None,
        enforce_geofence: Optional[bool] = None,
    ):
        self.repository = repository
        self.directory = directory
        self.geofence = geofence
        self.wfh = wfh
        self.clock = clock
        self.default_tz = default_tz or settings.ATTENDANCE_TIMEZONE
        self.enforce_geofence = (
            settings.ENFORCE_GEOFENCE_ON_MARK if enforce_geofence is None else enforce_geofence
        )

    def today(self, tz: Optional[str] = None, now: Optional[datetime] = None) -> date:
        """Attendance date for now (default: the clock) in tz (request) or the configured default zone."""
        try:
            return local_date(tz or self.default_tz, now or self.clock())
        except ValueError as e:
            raise InvalidRequest(str(e))

    def mark_attendance(
        self,
        employee_id: Optional[str],
        company_id: Optional[str],
        time: Optional[str],
        is_checked_in: Optional[bool],
        is_checked_out: Optional[bool],
        is_work_from_home: Optional[bool],
        *,
        tz: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> MarkResult:
        """
        Apply a check-in or check-out for today.

        Transitions, checked in order:
            check-in,  checkedIn          -> AlreadyCheckedIn
            check-in,  absent|completed   -> new checked-in record (CheckInMarked)
            check-out, absent             -> NoPriorCheckIn
            check-out, completed          -> AlreadyCheckedOut
            check-out, checkedIn          -> record checked out (CheckOutMarked)
            neither flag                  -> InvalidRequest

        Raises:
            InvalidRequest: missing input or no intent
            EmployeeNotFound: employee unknown or not in company_id
            OutsideGeofence: check-in outside the zone while enforcement is on
            ConcurrentModification: the record changed between read and write
            StoreUnavailable: the record store failed
        """
        if (
            not employee_id
            or not company_id
            or not time
            or is_checked_in is None
            or is_checked_out is None
            or is_work_from_home is None
        ):
            raise InvalidRequest()

        employee = self.directory.get_employee(employee_id)
        if employee is None or employee.company_id != company_id:
            logger.info("Mark attendance rejected: employee %s not found in company %s", employee_id, company_id)
            raise EmployeeNotFound()

        now = self.clock()
        day = self.today(tz, now)

        if is_checked_in:
            if not is_work_from_home:
                self._enforce_geofence(employee, latitude, longitude)
            existing = self.repository.fetch_day(employee_id, day)
            state = attendance_state(existing)
            if state == AttendanceState.CHECKED_IN:
                logger.info("Check-in rejected: employee=%s date=%s already checked in", employee_id, day)
                raise AlreadyCheckedIn()

            record = self.repository.create_check_in(
                employee_id=employee_id,
                company_id=company_id,
                day=day,
                time=time,
                is_work_from_home=bool(is_work_from_home),
                replaces=existing if state == AttendanceState.COMPLETED else None,
            )
            logger.info(
                "Check-in marked: employee=%s date=%s wfh=%s reopened=%s",
                employee_id, day, is_work_from_home, state == AttendanceState.COMPLETED,
            )
            if is_work_from_home:
                self._advance_wfh(employee_id, now, WFHStage.CHECK_IN)
            return MarkResult(code="CheckInMarked", message=CHECK_IN_MARKED, record=record)

        if is_checked_out:
            existing = self.repository.fetch_day(employee_id, day)
            state = attendance_state(existing)
            if state == AttendanceState.ABSENT:
                logger.info("Check-out rejected: employee=%s date=%s no prior check-in", employee_id, day)
                raise NoPriorCheckIn()
            if state == AttendanceState.COMPLETED:
                logger.info("Check-out rejected: employee=%s date=%s already checked out", employee_id, day)
                raise AlreadyCheckedOut()

            record = self.repository.complete_check_out(existing, time)
            logger.info("Check-out marked: employee=%s date=%s", employee_id, day)
            if record.is_work_from_home or is_work_from_home:
                self._advance_wfh(employee_id, now, WFHStage.COMPLETED)
            return MarkResult(code="CheckOutMarked", message=CHECK_OUT_MARKED, record=record)

        raise InvalidRequest()

    def get_today_attendance(self, employee_id: str, tz: Optional[str] = None) -> AttendanceRecord:
        """Today's record for the employee; AttendanceRecordNotFound if none yet."""
        record = self.repository.fetch_day(employee_id, self.today(tz))
        if record is None:
            raise AttendanceRecordNotFound()
        return record

    def worked_hours_summary(self, employee_id: str, start_date: date, end_date: date) -> WorkedHoursSummary:
        """
        Hours between check-in and check-out per weekday (Mon-Fri) for
        completed records in [start_date, end_date]. Each record's hours are
        rounded to 2 decimals before summing; weekend records are listed but
        not totalled.
        """
        if start_date > end_date:
            raise InvalidRequest("startDate must be less than or equal to endDate")

        records = self.repository.list_between(employee_id, start_date, end_date)
        summary = WorkedHoursSummary(details=records)
        for record in records:
            if attendance_state(record) != AttendanceState.COMPLETED:
                continue
            day = date.fromisoformat(record.date)
            check_in = parse_event_time(record.check_in_time, day)
            check_out = parse_event_time(record.check_out_time, day)
            if check_in is None or check_out is None:
                continue
            key = _WEEKDAY_KEYS.get(day.weekday())
            if key is None:
                continue
            hours = abs((check_out - check_in).total_seconds()) / 3600
            setattr(summary, key, round(getattr(summary, key) + round(hours, 2), 2))
        logger.info(
            "Worked hours employee=%s range=%s..%s records=%d totals=%s",
            employee_id, start_date, end_date, len(records), summary.totals(),
        )
        return summary

    def _enforce_geofence(
        self,
        employee: EmployeeProfile,
        latitude: Optional[float],
        longitude: Optional[float],
    ) -> None:
        if not self.enforce_geofence or self.geofence is None:
            return
        if latitude is None or longitude is None:
            raise InvalidRequest("latitude and longitude are required to check in")
        if not self.geofence.check_geofence(employee.company_id, employee.branch_id, latitude, longitude):
            logger.info("Check-in rejected: employee=%s outside geofence", employee.user_id)
            raise OutsideGeofence()

    def _advance_wfh(self, employee_id: str, now: datetime, stage: WFHStage) -> None:
        # The attendance write already succeeded; a stage update failure must not undo it
        if self.wfh is None:
            return
        # WFH dates live in the WFH timezone, which may differ from the attendance one
        day = self.wfh.day_of(now)
        try:
            self.wfh.advance_stage(employee_id, day, stage)
        except (ConcurrentModification, StoreUnavailable):
            logger.warning(
                "Could not advance WFH stage to %s for employee=%s date=%s",
                stage.value, employee_id, day, exc_info=True,
            )
