"""
Geofence check schemas
"""
from hrms_attendance.schemas.common import CamelModel


class GeofenceCheckResponse(CamelModel):
    """Response of the geofence gate"""
    within_radius: bool
