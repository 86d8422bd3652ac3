"""
Main API router
"""
from fastapi import APIRouter

from hrms_attendance.api.v1 import (
    health,
    version,
    geofence,
    attendance,
    wfh,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(version.router, tags=["version"])
api_router.include_router(geofence.router, prefix="/geofence", tags=["geofence"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["attendance"])
api_router.include_router(wfh.router, prefix="/wfh", tags=["wfh"])
