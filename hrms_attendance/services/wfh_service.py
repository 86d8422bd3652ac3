"""
WFH (Work From Home) request workflow.

Status axis: pending -> accepted | rejected. Stage axis: request -> checkIn ->
completed, advanced only for accepted requests when the employee actually
checks in/out from home. Re-resolving an already resolved request is allowed.
"""
import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Union

from hrms_attendance.constants import WFHStage, WFHStatus
from hrms_attendance.core.config import settings
from hrms_attendance.core.exceptions import (
    ConcurrentModification,
    DuplicateRequest,
    EmployeeNotFound,
    InvalidRequest,
    WorkFromHomeRequestNotFound,
)
from hrms_attendance.schemas.directory import EmployeeProfile
from hrms_attendance.schemas.wfh import EnrichedWFHRequest, WFHRequestRecord
from hrms_attendance.services.attendance_repository import WorkFromHomeRepository
from hrms_attendance.services.directory_service import DirectoryService
from hrms_attendance.utils.datetime_utils import get_zone, local_date

logger = logging.getLogger(__name__)

_DECISIONS = {WFHStatus.ACCEPTED.value: WFHStatus.ACCEPTED, WFHStatus.REJECTED.value: WFHStatus.REJECTED}
_STAGE_ORDER = {WFHStage.REQUEST: 0, WFHStage.CHECK_IN: 1, WFHStage.COMPLETED: 2}


class WorkFromHomeService:
    def __init__(
        self,
        repository: WorkFromHomeRepository,
        directory: DirectoryService,
        tz_name: Optional[str] = None,
    ):
        self.repository = repository
        self.directory = directory
        self.tz_name = tz_name or settings.WFH_TIMEZONE

    def parse_whf_date(self, value: Union[date, str, None]) -> date:
        """
        Normalise a WFH date.

        Plain dates are taken as-is; datetimes are converted to the WFH
        timezone before taking the calendar date.
        """
        if isinstance(value, datetime):
            moment = value
        elif isinstance(value, date):
            return value
        elif isinstance(value, str) and value.strip():
            text = value.strip()
            try:
                if "T" not in text and " " not in text:
                    return date.fromisoformat(text)
                moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                raise InvalidRequest('Invalid date format for "whfDate"')
        else:
            raise InvalidRequest()
        if moment.tzinfo is None:
            return moment.date()
        return moment.astimezone(get_zone(self.tz_name)).date()

    def request_work_from_home(
        self,
        employee_id: Optional[str],
        company_id: Optional[str],
        whf_date: Union[date, str, None],
        reason: Optional[str] = None,
    ) -> WFHRequestRecord:
        """
        Create a pending WFH request for (employee, date).

        Raises:
            InvalidRequest: missing fields or unparseable date
            EmployeeNotFound: employee unknown or not in company
            DuplicateRequest: a request already exists for that date
        """
        if not employee_id or not company_id:
            raise InvalidRequest()
        day = self.parse_whf_date(whf_date)

        employee = self.directory.get_employee(employee_id)
        if employee is None or employee.company_id != company_id:
            raise EmployeeNotFound()

        if self.repository.fetch_day(employee_id, day) is not None:
            logger.info("Duplicate WFH request employee=%s date=%s", employee_id, day)
            raise DuplicateRequest()

        try:
            record = self.repository.create_request(
                employee_id=employee_id,
                company_id=company_id,
                day=day,
                reason=reason,
            )
        except ConcurrentModification:
            # Another request for the same day landed between read and insert
            raise DuplicateRequest()

        logger.info("WFH request created employee=%s date=%s id=%s", employee_id, day, record.attendance_id)
        return record

    def resolve_work_from_home(
        self,
        attendance_id: str,
        decision: Optional[str],
        created_at: Optional[str] = None,
    ) -> WFHRequestRecord:
        """
        Accept or reject a WFH request.

        ``created_at``, when given, must match the stored request. Resolving a
        request that is already resolved overwrites the earlier decision.
        """
        status = _DECISIONS.get((decision or "").strip().lower())
        if status is None:
            raise InvalidRequest('"status" must be one of: accepted, rejected')

        record = self.repository.get(attendance_id)
        if record is None or (created_at and created_at != record.created_at):
            raise WorkFromHomeRequestNotFound()

        # An accepted request that is already being worked keeps its stage
        if status == WFHStatus.ACCEPTED and record.whf == WFHStatus.ACCEPTED:
            stage = record.stage
        else:
            stage = WFHStage.REQUEST

        if record.whf != WFHStatus.PENDING:
            logger.info("Re-resolving WFH request %s from %s to %s", attendance_id, record.whf.value, status.value)

        updated = self.repository.set_status(record, status, stage, resolved=True)
        logger.info("WFH request %s resolved as %s", attendance_id, status.value)
        return updated

    def day_of(self, moment: datetime) -> date:
        """Calendar date of an instant in the WFH timezone."""
        return local_date(self.tz_name, moment)

    def advance_stage(self, employee_id: str, day: date, stage: WFHStage) -> Optional[WFHRequestRecord]:
        """
        Move an accepted request for (employee, day) forward to ``stage``.

        No-op when there is no accepted request or the request is already at or
        past ``stage`` (a reopened day does not move completed back to checkIn).
        """
        record = self.repository.fetch_day(employee_id, day)
        if record is None or record.whf != WFHStatus.ACCEPTED:
            logger.info("No accepted WFH request for employee=%s date=%s, stage left unchanged", employee_id, day)
            return None
        if _STAGE_ORDER[stage] <= _STAGE_ORDER[record.stage]:
            return None
        updated = self.repository.set_status(record, WFHStatus.ACCEPTED, stage)
        logger.info("WFH request %s advanced to %s", record.attendance_id, stage.value)
        return updated

    def list_pending_work_from_home(self, company_id: str) -> List[EnrichedWFHRequest]:
        """Pending requests of a company joined with employee profiles, in scan order."""
        requests = self.repository.scan_company(company_id, WFHStatus.PENDING)

        profiles: Dict[str, Optional[EmployeeProfile]] = {}
        for request in requests:
            if request.employee_id not in profiles:
                profiles[request.employee_id] = self.directory.get_employee(request.employee_id)

        enriched = []
        for request in requests:
            profile = profiles.get(request.employee_id)
            enriched.append(
                EnrichedWFHRequest(
                    **request.model_dump(),
                    first_name=profile.first_name if profile else None,
                    last_name=profile.last_name if profile else None,
                    email=profile.email if profile else None,
                    image_url=profile.image_url if profile else None,
                )
            )
        return enriched

    def list_employee_work_from_home(self, employee_id: str) -> List[WFHRequestRecord]:
        """Every WFH request an employee has made (pending, accepted or rejected)."""
        return self.repository.scan_employee(employee_id)
