"""
Directory document schemas (companies, branches, employees) and geofence zones.

Coordinates and radii may be stored as numeric strings; they are parsed to
floats on read. Ranges are not validated.
"""
from typing import List, Optional

from pydantic import Field

from hrms_attendance.schemas.common import CamelModel


class Coordinate(CamelModel):
    latitude: float
    longitude: float


class GeoFenceZone(CamelModel):
    center: Coordinate
    radius_meters: float


class Branch(CamelModel):
    branch_id: str
    name: Optional[str] = None
    location: Coordinate
    radius_from_center_of_branch: float

    def zone(self) -> GeoFenceZone:
        return GeoFenceZone(center=self.location, radius_meters=self.radius_from_center_of_branch)


class Company(CamelModel):
    company_id: str
    name: Optional[str] = None
    location: Coordinate
    radius_from_center_of_company: float
    branches: List[Branch] = Field(default_factory=list)

    def zone(self) -> GeoFenceZone:
        return GeoFenceZone(center=self.location, radius_meters=self.radius_from_center_of_company)

    def find_branch(self, branch_id: str) -> Optional[Branch]:
        for branch in self.branches:
            if branch.branch_id == branch_id:
                return branch
        return None


class EmployeeProfile(CamelModel):
    user_id: str
    company_id: str
    branch_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    image_url: Optional[str] = None
    role: Optional[str] = None
