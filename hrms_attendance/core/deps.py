"""
Dependencies and guards for FastAPI endpoints
"""
from dataclasses import dataclass, field
from typing import Generator, List, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from hrms_attendance.core.config import settings
from hrms_attendance.core.security import decode_token
from hrms_attendance.db.record_store import RecordStore
from hrms_attendance.db.session import SessionLocal
from hrms_attendance.services.attendance_repository import (
    AttendanceRepository,
    WorkFromHomeRepository,
)
from hrms_attendance.services.attendance_service import AttendanceService
from hrms_attendance.services.directory_service import DirectoryService
from hrms_attendance.services.geofence_service import GeofenceService
from hrms_attendance.services.wfh_service import WorkFromHomeService


security = HTTPBearer(auto_error=False)


@dataclass
class Actor:
    """Authenticated caller as described by the identity-service token"""
    user_id: str
    roles: List[str] = field(default_factory=list)
    company_id: Optional[str] = None


def get_db() -> Generator:
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_record_store(db: Session = Depends(get_db)) -> RecordStore:
    return RecordStore(db)


def get_directory(store: RecordStore = Depends(get_record_store)) -> DirectoryService:
    return DirectoryService(store)


def get_geofence_service(directory: DirectoryService = Depends(get_directory)) -> GeofenceService:
    return GeofenceService(directory)


def get_wfh_service(
    store: RecordStore = Depends(get_record_store),
    directory: DirectoryService = Depends(get_directory),
) -> WorkFromHomeService:
    return WorkFromHomeService(WorkFromHomeRepository(store), directory, settings.WFH_TIMEZONE)


def get_attendance_service(
    store: RecordStore = Depends(get_record_store),
    directory: DirectoryService = Depends(get_directory),
    geofence: GeofenceService = Depends(get_geofence_service),
    wfh: WorkFromHomeService = Depends(get_wfh_service),
) -> AttendanceService:
    return AttendanceService(
        AttendanceRepository(store),
        directory,
        geofence=geofence,
        wfh=wfh,
        default_tz=settings.ATTENDANCE_TIMEZONE,
        enforce_geofence=settings.ENFORCE_GEOFENCE_ON_MARK,
    )


def _unauthorized(detail: str = "Invalid authentication credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Actor:
    """
    Get the authenticated caller from the bearer token

    The token must carry ``sub``; roles come from ``roles`` (list) or
    ``role`` (single value) and are compared case-insensitively.
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    try:
        payload = decode_token(credentials.credentials)
    except ValueError:
        raise _unauthorized()

    sub_value = payload.get("sub")
    if not sub_value:
        raise _unauthorized()

    raw_roles = payload.get("roles")
    if raw_roles is None:
        raw_roles = [payload["role"]] if payload.get("role") else []
    elif isinstance(raw_roles, str):
        raw_roles = [raw_roles]
    roles = [str(r).strip().lower() for r in raw_roles if r]

    company_id = payload.get("companyId")
    return Actor(user_id=str(sub_value), roles=roles, company_id=str(company_id) if company_id else None)


def require_roles(*allowed_roles: str):
    """
    Dependency factory for role-based access control

    Usage:
        @router.get("/hr-only")
        async def hr_endpoint(actor: Actor = Depends(require_roles(ROLE_HR))):
            ...
    """
    allowed = {r.lower() for r in allowed_roles}

    def role_checker(actor: Actor = Depends(get_current_actor)) -> Actor:
        if not allowed.intersection(actor.roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied. Insufficient permissions."
            )
        return actor
    return role_checker
