"""
WFH (Work From Home) API endpoints
"""
from typing import List

from fastapi import APIRouter, Depends, status

from hrms_attendance.constants import (
    ROLE_ADMIN,
    ROLE_BRANCH_ADMIN,
    ROLE_EMPLOYEE,
    ROLE_HR,
    ROLE_SUPERVISOR,
    WFH_REQUEST_CREATED,
    WFH_REQUEST_RESOLVED,
)
from hrms_attendance.core.deps import Actor, get_wfh_service, require_roles
from hrms_attendance.schemas.wfh import (
    EnrichedWFHRequest,
    WFHApplyRequest,
    WFHCreatedResponse,
    WFHDecisionRequest,
    WFHDecisionResponse,
    WFHRequestRecord,
)
from hrms_attendance.services.wfh_service import WorkFromHomeService

router = APIRouter()

_APPROVER_ROLES = (ROLE_ADMIN, ROLE_BRANCH_ADMIN, ROLE_HR, ROLE_SUPERVISOR)


@router.post("/requests", response_model=WFHCreatedResponse, status_code=status.HTTP_201_CREATED)
async def request_work_from_home(
    body: WFHApplyRequest,
    service: WorkFromHomeService = Depends(get_wfh_service),
    actor: Actor = Depends(require_roles(ROLE_HR, ROLE_EMPLOYEE)),
):
    """Request WFH for one date; 409 when a request for that date already exists"""
    record = service.request_work_from_home(
        body.employee_id,
        body.company_id,
        body.whf_date,
        reason=body.reason,
    )
    return WFHCreatedResponse(message=WFH_REQUEST_CREATED, attendance_id=record.attendance_id)


@router.get("/requests/pending/{company_id}", response_model=List[EnrichedWFHRequest])
async def list_pending_requests(
    company_id: str,
    service: WorkFromHomeService = Depends(get_wfh_service),
    actor: Actor = Depends(require_roles(*_APPROVER_ROLES)),
):
    """Pending requests of a company with the requesting employee's name, email and image"""
    return service.list_pending_work_from_home(company_id)


@router.get("/requests/employee/{employee_id}", response_model=List[WFHRequestRecord])
async def list_employee_requests(
    employee_id: str,
    service: WorkFromHomeService = Depends(get_wfh_service),
    actor: Actor = Depends(require_roles(ROLE_HR, ROLE_EMPLOYEE, *_APPROVER_ROLES)),
):
    return service.list_employee_work_from_home(employee_id)


@router.put("/requests/{attendance_id}", response_model=WFHDecisionResponse)
async def resolve_request(
    attendance_id: str,
    body: WFHDecisionRequest,
    service: WorkFromHomeService = Depends(get_wfh_service),
    actor: Actor = Depends(require_roles(*_APPROVER_ROLES)),
):
    """Accept or reject a WFH request (HR/Admin/Branch admin/Supervisor)"""
    record = service.resolve_work_from_home(attendance_id, body.status, created_at=body.created_at)
    return WFHDecisionResponse(message=WFH_REQUEST_RESOLVED, request=record)
