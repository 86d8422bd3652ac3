"""
WFH (Work From Home) schemas
"""
from typing import Optional

from pydantic import Field

from hrms_attendance.constants import WFHStage, WFHStatus
from hrms_attendance.schemas.common import CamelModel


class WFHRequestRecord(CamelModel):
    """Stored WFH request (key: employeeId + whfDate)."""
    attendance_id: str
    employee_id: str
    company_id: str
    whf_date: str = Field(..., description="YYYY-MM-DD")
    whf: WFHStatus = WFHStatus.PENDING
    stage: WFHStage = WFHStage.REQUEST
    reason: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    resolved_at: Optional[str] = None
    version: Optional[int] = None


class EnrichedWFHRequest(WFHRequestRecord):
    """Pending request joined with the requesting employee's profile."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    image_url: Optional[str] = None


class WFHApplyRequest(CamelModel):
    """Schema for requesting WFH"""
    employee_id: Optional[str] = None
    company_id: Optional[str] = None
    whf_date: Optional[str] = Field(None, description="WFH date (YYYY-MM-DD or ISO datetime)")
    reason: Optional[str] = None


class WFHCreatedResponse(CamelModel):
    message: str
    attendance_id: str


class WFHDecisionRequest(CamelModel):
    """Schema for accepting/rejecting a WFH request"""
    status: Optional[str] = Field(None, description="accepted | rejected")
    created_at: Optional[str] = Field(None, description="createdAt of the request, if the caller has it")


class WFHDecisionResponse(CamelModel):
    message: str
    request: WFHRequestRecord
