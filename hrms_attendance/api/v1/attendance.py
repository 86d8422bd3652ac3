"""
Attendance endpoints: mark check-in/check-out, today's record, weekday hours summary.
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from hrms_attendance.constants import ROLE_EMPLOYEE, ROLE_HR
from hrms_attendance.core.deps import Actor, get_attendance_service, require_roles
from hrms_attendance.core.exceptions import InvalidRequest
from hrms_attendance.schemas.attendance import (
    AttendanceRecord,
    MarkAttendanceRequest,
    MarkAttendanceResponse,
    WorkedHoursSummary,
)
from hrms_attendance.services.attendance_service import AttendanceService

router = APIRouter()
_log = logging.getLogger(__name__)


def _parse_date(value: Optional[str], name: str) -> date:
    if not value:
        raise InvalidRequest(f'"{name}" is required')
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidRequest(f'Invalid date format for "{name}", expected YYYY-MM-DD')


@router.post("/mark", response_model=MarkAttendanceResponse)
async def mark_attendance(
    body: MarkAttendanceRequest,
    service: AttendanceService = Depends(get_attendance_service),
    actor: Actor = Depends(require_roles(ROLE_HR, ROLE_EMPLOYEE)),
):
    """Mark check-in (isCheckedIn) or check-out (isCheckedOut) for today."""
    _log.debug("mark_attendance actor=%s employee=%s", actor.user_id, body.employee_id)
    result = service.mark_attendance(
        body.employee_id,
        body.company_id,
        body.time,
        body.is_checked_in,
        body.is_checked_out,
        body.is_work_from_home,
        tz=body.timezone,
        latitude=body.latitude,
        longitude=body.longitude,
    )
    return MarkAttendanceResponse(message=result.message, code=result.code)


@router.get("/today/{employee_id}", response_model=AttendanceRecord)
async def get_today_attendance(
    employee_id: str,
    timezone: Optional[str] = Query(None, description="IANA zone used to decide 'today'"),
    service: AttendanceService = Depends(get_attendance_service),
    actor: Actor = Depends(require_roles(ROLE_HR, ROLE_EMPLOYEE)),
):
    """Today's attendance record; 404 when the employee has not checked in today."""
    return service.get_today_attendance(employee_id, timezone)


@router.get("/summary/{employee_id}", response_model=WorkedHoursSummary)
async def get_worked_hours_summary(
    employee_id: str,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    service: AttendanceService = Depends(get_attendance_service),
    actor: Actor = Depends(require_roles(ROLE_HR, ROLE_EMPLOYEE)),
):
    """
    Hours worked per weekday between startDate and endDate (inclusive).

    Response:
    {
      "mon": 8.5, "tue": 0, "wed": 7.25, "thu": 0, "fri": 0,
      "details": [<attendance records in range>]
    }
    """
    return service.worked_hours_summary(
        employee_id,
        _parse_date(start_date, "startDate"),
        _parse_date(end_date, "endDate"),
    )
