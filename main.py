# Root entry point: re-exports the app from the hrms_attendance package
# so uvicorn can find it when running from the repository root:
#   uvicorn main:app --host 0.0.0.0 --port 8001

from hrms_attendance.main import app  # noqa: F401
