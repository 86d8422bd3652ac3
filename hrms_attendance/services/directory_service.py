"""
Identity & directory lookups over the ``employees`` and ``companies`` collections.

Company, branch and employee documents are maintained by the surrounding HR
system; this service only reads them.
"""
from typing import Optional

from hrms_attendance.constants import COLLECTION_COMPANIES, COLLECTION_EMPLOYEES
from hrms_attendance.db.record_store import RecordStore
from hrms_attendance.schemas.directory import Company, EmployeeProfile


class DirectoryService:
    def __init__(self, store: RecordStore):
        self.store = store

    def get_employee(self, employee_id: str) -> Optional[EmployeeProfile]:
        doc = self.store.get(COLLECTION_EMPLOYEES, employee_id)
        return EmployeeProfile.model_validate(doc) if doc else None

    def get_company(self, company_id: str) -> Optional[Company]:
        doc = self.store.get(COLLECTION_COMPANIES, company_id)
        return Company.model_validate(doc) if doc else None
