"""
Geofence evaluation: haversine great-circle distance against a circular zone.

The evaluator never raises. Non-numeric or NaN input yields False so the gate
fails closed.
"""
import logging
import math
from typing import Optional

from hrms_attendance.constants import EARTH_RADIUS_KM
from hrms_attendance.core.exceptions import CompanyNotFound
from hrms_attendance.schemas.directory import Company, GeoFenceZone
from hrms_attendance.services.directory_service import DirectoryService

logger = logging.getLogger(__name__)


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two points given in degrees."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    # Rounding can push a a hair above 1 for antipodal points
    if a > 1.0:
        a = 1.0
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c * 1000


def is_within_radius(
    user_lat: float,
    user_lon: float,
    zone_lat: float,
    zone_lon: float,
    radius_m: float,
) -> bool:
    """True when the user is inside the zone; the boundary counts as inside."""
    try:
        distance = haversine_distance(float(user_lat), float(user_lon), float(zone_lat), float(zone_lon))
        return distance <= float(radius_m)
    except (TypeError, ValueError, OverflowError):
        return False


def resolve_zone(company: Company, branch_id: Optional[str] = None) -> GeoFenceZone:
    """
    Branch zone when branch_id names one of the company's branches,
    otherwise the company-level zone.
    """
    if branch_id:
        branch = company.find_branch(branch_id)
        if branch is not None:
            return branch.zone()
        logger.debug("Branch %s not found in company %s, using company zone", branch_id, company.company_id)
    return company.zone()


class GeofenceService:
    """Answers "may this user check in from here" for a company/branch."""

    def __init__(self, directory: DirectoryService):
        self.directory = directory

    def check_geofence(
        self,
        company_id: str,
        branch_id: Optional[str],
        user_lat: float,
        user_lon: float,
    ) -> bool:
        """Raises CompanyNotFound when company_id is unknown."""
        company = self.directory.get_company(company_id)
        if company is None:
            raise CompanyNotFound()
        zone = resolve_zone(company, branch_id)
        within = is_within_radius(
            user_lat,
            user_lon,
            zone.center.latitude,
            zone.center.longitude,
            zone.radius_meters,
        )
        logger.info(
            "Geofence check company=%s branch=%s within=%s",
            company_id, branch_id, within,
        )
        return within
