"""
Pytest configuration and fixtures
"""
import os

# Settings are read at import time; point them at an in-memory database first
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-attendance-tests")
os.environ.setdefault("APP_ENV", "local")

from datetime import datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from hrms_attendance.constants import COLLECTION_COMPANIES, COLLECTION_EMPLOYEES  # noqa: E402
from hrms_attendance.core.config import settings  # noqa: E402
from hrms_attendance.core.deps import get_db  # noqa: E402
from hrms_attendance.db.base import Base  # noqa: E402
from hrms_attendance.db.record_store import RecordStore  # noqa: E402
from hrms_attendance.main import app  # noqa: E402
from hrms_attendance.models import StoredRecord  # noqa: E402,F401
from hrms_attendance.utils.datetime_utils import UTC  # noqa: E402


# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

COMPANY_ID = "company-A"
BRANCH_ID = "branch-1"
EMPLOYEE_ID = "emp1"

# Office (company zone) and a branch a few km away
OFFICE_LAT, OFFICE_LON = 12.9716, 77.5946
BRANCH_LAT, BRANCH_LON = 12.9352, 77.6245


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Test client fixture with database override"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def store(db):
    return RecordStore(db)


def make_token(sub=EMPLOYEE_ID, role="employee", company_id=COMPANY_ID, secret=None, expires_in=3600):
    """Token as the identity service would issue it"""
    payload = {
        "sub": sub,
        "role": role,
        "companyId": company_id,
        "exp": datetime.now(UTC) + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, secret or settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def auth_headers(role="employee", sub=EMPLOYEE_ID):
    return {"Authorization": f"Bearer {make_token(sub=sub, role=role)}"}


def seed_company(store, company_id=COMPANY_ID, radius=100, branches=None):
    """Company document with an office zone and optional branches"""
    doc = {
        "companyId": company_id,
        "name": "Acme Corp",
        "location": {"latitude": OFFICE_LAT, "longitude": OFFICE_LON},
        "radiusFromCenterOfCompany": radius,
        "branches": branches if branches is not None else [
            {
                "branchId": BRANCH_ID,
                "name": "Koramangala",
                "location": {"latitude": BRANCH_LAT, "longitude": BRANCH_LON},
                "radiusFromCenterOfBranch": 200,
            }
        ],
    }
    return store.put(COLLECTION_COMPANIES, company_id, doc, expected_version=0)


def seed_employee(store, user_id=EMPLOYEE_ID, company_id=COMPANY_ID, branch_id=None, **profile):
    doc = {
        "userId": user_id,
        "companyId": company_id,
        "branchId": branch_id,
        "firstName": profile.get("first_name", "Asha"),
        "lastName": profile.get("last_name", "Rao"),
        "email": profile.get("email", f"{user_id}@example.com"),
        "imageUrl": profile.get("image_url", f"https://img.example.com/{user_id}.png"),
        "role": profile.get("role", "employee"),
    }
    return store.put(COLLECTION_EMPLOYEES, user_id, doc, expected_version=0)


@pytest.fixture
def company(store):
    return seed_company(store)


@pytest.fixture
def employee(store, company):
    return seed_employee(store)
