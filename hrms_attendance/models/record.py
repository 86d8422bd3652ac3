"""
Generic document record (the record store's only table)
"""
from sqlalchemy import Column, Integer, String, DateTime, JSON, UniqueConstraint
from sqlalchemy.sql import func
from hrms_attendance.db.base import Base


class StoredRecord(Base):
    __tablename__ = "records"

    id = Column(Integer, primary_key=True, index=True)
    collection = Column(String, nullable=False, index=True)  # e.g. "attendance", "wfh_requests"
    key = Column(String, nullable=False)
    data = Column(JSON, nullable=False)
    version = Column(Integer, nullable=False, default=1)  # bumped on every write, used for conditional writes
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    __table_args__ = (
        UniqueConstraint("collection", "key", name="uq_records_collection_key"),
    )
