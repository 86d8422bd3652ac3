"""
Database models
"""
from hrms_attendance.models.record import StoredRecord

__all__ = [
    "StoredRecord",
]
