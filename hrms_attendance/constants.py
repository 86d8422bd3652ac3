"""
Constants for roles, record-store collections and workflow values
"""
import enum

SERVICE_NAME = "hrms-attendance"

# Role constants (as carried in identity-service tokens)
ROLE_ADMIN = "admin"
ROLE_BRANCH_ADMIN = "branchadmin"
ROLE_HR = "hr"
ROLE_EMPLOYEE = "employee"
ROLE_SUPERVISOR = "supervisor"

# Record store collections
COLLECTION_ATTENDANCE = "attendance"
COLLECTION_WFH_REQUESTS = "wfh_requests"
COLLECTION_EMPLOYEES = "employees"
COLLECTION_COMPANIES = "companies"

# Mean Earth radius in kilometers
EARTH_RADIUS_KM = 6371


class WFHStatus(str, enum.Enum):
    NO = "no"  # office day, never stored in wfh_requests
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class WFHStage(str, enum.Enum):
    REQUEST = "request"
    CHECK_IN = "checkIn"
    COMPLETED = "completed"


class AttendanceState(str, enum.Enum):
    ABSENT = "absent"
    CHECKED_IN = "checkedIn"
    COMPLETED = "completed"


# (whf, stage) pairs a WFH request may be in
ALLOWED_WFH_COMBINATIONS = {
    (WFHStatus.PENDING, WFHStage.REQUEST),
    (WFHStatus.REJECTED, WFHStage.REQUEST),
    (WFHStatus.ACCEPTED, WFHStage.REQUEST),
    (WFHStatus.ACCEPTED, WFHStage.CHECK_IN),
    (WFHStatus.ACCEPTED, WFHStage.COMPLETED),
}

# Success messages
CHECK_IN_MARKED = "Check-in marked successfully"
CHECK_OUT_MARKED = "Check-out marked successfully"
WFH_REQUEST_CREATED = "Work from home request created successfully"
WFH_REQUEST_RESOLVED = "Work from home request updated successfully"
