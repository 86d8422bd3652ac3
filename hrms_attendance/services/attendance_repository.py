"""
Attendance-domain persistence on top of the record store.

Office attendance lives in the ``attendance`` collection keyed by
employeeId + date; WFH requests live in ``wfh_requests`` keyed by
employeeId + whfDate. Both keys are deterministic, so "one document per
employee per day" holds for each entity type.
"""
from datetime import date
from typing import List, Optional

from hrms_attendance.constants import (
    COLLECTION_ATTENDANCE,
    COLLECTION_WFH_REQUESTS,
    WFHStage,
    WFHStatus,
)
from hrms_attendance.db.record_store import RecordStore
from hrms_attendance.schemas.attendance import AttendanceRecord
from hrms_attendance.schemas.wfh import WFHRequestRecord
from hrms_attendance.utils.datetime_utils import iso_8601_utc, now_utc


def daily_key(employee_id: str, day: date) -> str:
    """Deterministic id for an employee's document on a given day."""
    return f"{employee_id}{day.isoformat()}"


class AttendanceRepository:
    def __init__(self, store: RecordStore):
        self.store = store

    def fetch_day(self, employee_id: str, day: date) -> Optional[AttendanceRecord]:
        doc = self.store.get(COLLECTION_ATTENDANCE, daily_key(employee_id, day))
        return AttendanceRecord.model_validate(doc) if doc else None

    def create_check_in(
        self,
        *,
        employee_id: str,
        company_id: str,
        day: date,
        time: str,
        is_work_from_home: bool,
        replaces: Optional[AttendanceRecord] = None,
    ) -> AttendanceRecord:
        """
        Write a fresh checked-in record for the day.

        When ``replaces`` is given (a completed day being reopened) the write
        only succeeds if that record is still the stored version; otherwise
        the key must still be absent.
        """
        stamp = iso_8601_utc(now_utc())
        record = AttendanceRecord(
            attendance_id=daily_key(employee_id, day),
            date=day.isoformat(),
            company_id=company_id,
            employee_id=employee_id,
            time=time,
            is_checked_in=True,
            is_checked_out=False,
            is_work_from_home=is_work_from_home,
            check_in_time=time,
            check_out_time=None,
            created_at=replaces.created_at if replaces else stamp,
            updated_at=stamp,
        )
        expected_version = replaces.version if replaces is not None else 0
        doc = self.store.put(
            COLLECTION_ATTENDANCE,
            record.attendance_id,
            record.to_document(),
            expected_version=expected_version,
        )
        return AttendanceRecord.model_validate(doc)

    def complete_check_out(self, record: AttendanceRecord, time: str) -> AttendanceRecord:
        """Mark the record checked out in place, conditional on the version read."""
        doc = self.store.update(
            COLLECTION_ATTENDANCE,
            record.attendance_id,
            {
                "isCheckedOut": True,
                "time": time,
                "checkOutTime": time,
                "updatedAt": iso_8601_utc(now_utc()),
            },
            expected_version=record.version,
        )
        return AttendanceRecord.model_validate(doc)

    def list_between(self, employee_id: str, start: date, end: date) -> List[AttendanceRecord]:
        """Records of one employee with start <= date <= end, ordered by date."""
        start_s, end_s = start.isoformat(), end.isoformat()
        docs = self.store.scan(
            COLLECTION_ATTENDANCE,
            lambda d: d.get("employeeId") == employee_id and start_s <= d.get("date", "") <= end_s,
        )
        records = [AttendanceRecord.model_validate(d) for d in docs]
        return sorted(records, key=lambda r: r.date)


class WorkFromHomeRepository:
    def __init__(self, store: RecordStore):
        self.store = store

    def get(self, attendance_id: str) -> Optional[WFHRequestRecord]:
        doc = self.store.get(COLLECTION_WFH_REQUESTS, attendance_id)
        return WFHRequestRecord.model_validate(doc) if doc else None

    def fetch_day(self, employee_id: str, day: date) -> Optional[WFHRequestRecord]:
        return self.get(daily_key(employee_id, day))

    def create_request(
        self,
        *,
        employee_id: str,
        company_id: str,
        day: date,
        reason: Optional[str] = None,
    ) -> WFHRequestRecord:
        """Insert a pending request; raises ConcurrentModification if the key already exists."""
        stamp = iso_8601_utc(now_utc())
        record = WFHRequestRecord(
            attendance_id=daily_key(employee_id, day),
            employee_id=employee_id,
            company_id=company_id,
            whf_date=day.isoformat(),
            whf=WFHStatus.PENDING,
            stage=WFHStage.REQUEST,
            reason=reason,
            created_at=stamp,
            updated_at=stamp,
        )
        doc = self.store.put(
            COLLECTION_WFH_REQUESTS,
            record.attendance_id,
            record.to_document(),
            expected_version=0,
        )
        return WFHRequestRecord.model_validate(doc)

    def set_status(
        self,
        record: WFHRequestRecord,
        whf: WFHStatus,
        stage: WFHStage,
        resolved: bool = False,
    ) -> WFHRequestRecord:
        stamp = iso_8601_utc(now_utc())
        patch = {"whf": whf.value, "stage": stage.value, "updatedAt": stamp}
        if resolved:
            patch["resolvedAt"] = stamp
        doc = self.store.update(
            COLLECTION_WFH_REQUESTS,
            record.attendance_id,
            patch,
            expected_version=record.version,
        )
        return WFHRequestRecord.model_validate(doc)

    def scan_company(self, company_id: str, whf: WFHStatus) -> List[WFHRequestRecord]:
        docs = self.store.scan(
            COLLECTION_WFH_REQUESTS,
            lambda d: d.get("companyId") == company_id and d.get("whf") == whf.value,
        )
        return [WFHRequestRecord.model_validate(d) for d in docs]

    def scan_employee(self, employee_id: str) -> List[WFHRequestRecord]:
        docs = self.store.scan(
            COLLECTION_WFH_REQUESTS,
            lambda d: d.get("employeeId") == employee_id,
        )
        return [WFHRequestRecord.model_validate(d) for d in docs]
