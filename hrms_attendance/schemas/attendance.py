"""
Attendance schemas: the daily attendance record and mark-attendance payloads.
"""
from typing import Dict, List, Optional

from pydantic import Field

from hrms_attendance.schemas.common import CamelModel


class AttendanceRecord(CamelModel):
    """One employee's attendance for one calendar day (key: employeeId + date)."""
    attendance_id: str
    date: str = Field(..., description="YYYY-MM-DD in the request timezone")
    company_id: str
    employee_id: str
    time: str = Field(..., description="Time of the last check-in/out event, as sent by the client")
    is_checked_in: bool
    is_checked_out: bool
    is_work_from_home: bool = False
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    version: Optional[int] = Field(None, description="Store version, used for conditional writes")


class MarkAttendanceRequest(CamelModel):
    """
    Mark check-in or check-out for today.

    Every field except timezone/latitude/longitude is required; the service
    answers 400 "Invalid input data" when one is missing.
    """
    employee_id: Optional[str] = None
    company_id: Optional[str] = None
    time: Optional[str] = None
    is_checked_in: Optional[bool] = None
    is_checked_out: Optional[bool] = None
    is_work_from_home: Optional[bool] = None
    timezone: Optional[str] = Field(None, description="IANA zone used to decide 'today'")
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class MarkAttendanceResponse(CamelModel):
    message: str
    code: str


class WorkedHoursSummary(CamelModel):
    """Hours worked per weekday (Mon-Fri) over a date range, with the underlying records."""
    mon: float = 0
    tue: float = 0
    wed: float = 0
    thu: float = 0
    fri: float = 0
    details: List[AttendanceRecord] = Field(default_factory=list)

    def totals(self) -> Dict[str, float]:
        return {"mon": self.mon, "tue": self.tue, "wed": self.wed, "thu": self.thu, "fri": self.fri}
