"""
Domain exceptions for the attendance core.

Every exception is an HTTPException carrying a stable ``code`` so services can
raise it directly and the shared handler in ``core.errors`` renders it.
"""
from typing import Optional

from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base class for attendance domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "DomainError"
    message: str = "Request could not be processed"

    def __init__(self, detail: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.message,
            headers=headers,
        )


# --- Validation (400) ---


class ValidationError(DomainError):
    code = "ValidationError"
    message = "Invalid input data"


class InvalidRequest(ValidationError):
    code = "InvalidRequest"
    message = "Invalid input data"


# --- Not found (404) ---


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NotFound"
    message = "Resource not found"


class EmployeeNotFound(NotFound):
    code = "EmployeeNotFound"
    message = 'Could not find user with provided "userId"'


class CompanyNotFound(NotFound):
    code = "CompanyNotFound"
    message = "Company not found with the provided companyId"


class AttendanceRecordNotFound(NotFound):
    code = "AttendanceRecordNotFound"
    message = "Attendance record not found"


class WorkFromHomeRequestNotFound(NotFound):
    code = "WorkFromHomeRequestNotFound"
    message = "Work from home request not found"


# --- Conflicts (state machine rejections) ---


class Conflict(DomainError):
    code = "Conflict"
    message = "Request conflicts with the current state"


class AlreadyCheckedIn(Conflict):
    code = "AlreadyCheckedIn"
    message = "You are already checked in"


class AlreadyCheckedOut(Conflict):
    code = "AlreadyCheckedOut"
    message = "You are already checked out"


class NoPriorCheckIn(Conflict):
    code = "NoPriorCheckIn"
    message = "Cannot mark check-out without a previous check-in for the day"


class DuplicateRequest(Conflict):
    status_code = status.HTTP_409_CONFLICT
    code = "DuplicateRequest"
    message = "A work from home request already exists for this date"


class ConcurrentModification(Conflict):
    status_code = status.HTTP_409_CONFLICT
    code = "ConcurrentModification"
    message = "The record was modified by another request, please retry"


# --- Forbidden (403) ---


class OutsideGeofence(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "OutsideGeofence"
    message = "You are outside the allowed location radius"


# --- Store (503, retryable) ---


class StoreUnavailable(DomainError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "StoreUnavailable"
    message = "Attendance storage is temporarily unavailable, please retry"
