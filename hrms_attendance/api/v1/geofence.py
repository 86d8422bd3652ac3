"""
Geofence gate endpoint
"""
import math
from typing import Optional

from fastapi import APIRouter, Depends, Query

from hrms_attendance.constants import ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_HR
from hrms_attendance.core.deps import Actor, get_geofence_service, require_roles
from hrms_attendance.core.exceptions import InvalidRequest
from hrms_attendance.schemas.geofence import GeofenceCheckResponse
from hrms_attendance.services.geofence_service import GeofenceService

router = APIRouter()


def _coordinate(value: Optional[str]) -> float:
    if value is None or not value.strip():
        raise InvalidRequest("userLat and userLon are required")
    try:
        parsed = float(value)
    except ValueError:
        raise InvalidRequest("userLat and userLon must be numeric")
    if math.isnan(parsed):
        raise InvalidRequest("userLat and userLon must be numeric")
    return parsed


@router.get("/check/{company_id}", response_model=GeofenceCheckResponse)
async def check_geofence(
    company_id: str,
    user_lat: Optional[str] = Query(None, alias="userLat"),
    user_lon: Optional[str] = Query(None, alias="userLon"),
    branch_id: Optional[str] = Query(None, alias="branchId"),
    service: GeofenceService = Depends(get_geofence_service),
    actor: Actor = Depends(require_roles(ROLE_ADMIN, ROLE_HR, ROLE_EMPLOYEE)),
):
    """
    Is (userLat, userLon) inside the branch zone (when branchId matches a
    branch of the company) or else the company zone.
    """
    within = service.check_geofence(company_id, branch_id, _coordinate(user_lat), _coordinate(user_lon))
    return GeofenceCheckResponse(within_radius=within)
