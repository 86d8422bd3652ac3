"""
Document-style record store backed by the ``records`` table.

Documents are JSON dicts addressed by (collection, key). Every write bumps an
integer version; callers that read a document can make their write conditional
on that version:

- ``expected_version=0``: the key must not exist yet (create-only)
- ``expected_version=n``: the stored version must still be ``n``
- ``expected_version=None``: unconditional

A failed condition raises ConcurrentModification. Any driver or pool failure
raises StoreUnavailable; nothing is retried here.
"""
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError, IntegrityError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from hrms_attendance.core.exceptions import ConcurrentModification, NotFound, StoreUnavailable
from hrms_attendance.models.record import StoredRecord
from hrms_attendance.utils.json_serializer import sanitize_for_json
from hrms_attendance.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)

VERSION_FIELD = "version"

Document = Dict[str, Any]


def _to_document(row: StoredRecord) -> Document:
    doc = dict(row.data or {})
    doc[VERSION_FIELD] = row.version
    return doc


def _to_payload(record: Document) -> Document:
    payload = sanitize_for_json(dict(record))
    payload.pop(VERSION_FIELD, None)
    return payload


class RecordStore:
    """get/put/update/scan over named collections."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _store_call(self, operation: str, collection: str, key: Optional[str] = None) -> Iterator[None]:
        try:
            yield
        except IntegrityError as e:
            # Unique (collection, key) violated: someone created the key first
            self.db.rollback()
            logger.info("Conditional %s lost race on %s/%s", operation, collection, key)
            raise ConcurrentModification() from e
        except (DBAPIError, PoolTimeoutError) as e:
            self.db.rollback()
            logger.error("Record store %s failed on %s/%s", operation, collection, key, exc_info=True)
            raise StoreUnavailable() from e

    def _select_row(self, collection: str, key: str) -> Optional[StoredRecord]:
        stmt = select(StoredRecord).where(
            StoredRecord.collection == collection,
            StoredRecord.key == key,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get(self, collection: str, key: str) -> Optional[Document]:
        """Return the document stored under key, or None."""
        with self._store_call("get", collection, key):
            row = self._select_row(collection, key)
            return _to_document(row) if row is not None else None

    def put(
        self,
        collection: str,
        key: str,
        record: Document,
        expected_version: Optional[int] = None,
    ) -> Document:
        """Create or replace the document stored under key."""
        payload = _to_payload(record)
        with self._store_call("put", collection, key):
            if expected_version == 0:
                row = StoredRecord(collection=collection, key=key, data=payload, version=1)
                self.db.add(row)
                self.db.commit()
                self.db.refresh(row)
                return _to_document(row)

            if expected_version is not None:
                self._conditional_write(collection, key, payload, expected_version)
                self.db.commit()
                return self.get(collection, key)

            row = self._select_row(collection, key)
            if row is None:
                row = StoredRecord(collection=collection, key=key, data=payload, version=1)
                self.db.add(row)
            else:
                row.data = payload
                row.version = row.version + 1
                row.updated_at = now_utc()
            self.db.commit()
            self.db.refresh(row)
            return _to_document(row)

    def update(
        self,
        collection: str,
        key: str,
        patch: Document,
        expected_version: Optional[int] = None,
    ) -> Document:
        """
        Merge patch into an existing document and return the updated document.

        Raises NotFound when the key does not exist. The merge is always
        conditional on the version it was computed from.
        """
        with self._store_call("update", collection, key):
            row = self._select_row(collection, key)
            if row is None:
                raise NotFound(f"No record {key!r} in {collection!r}")
            version = row.version if expected_version is None else expected_version
            merged = dict(row.data or {})
            merged.update(_to_payload(patch))
            self._conditional_write(collection, key, merged, version)
            self.db.commit()
            return self.get(collection, key)

    def scan(
        self,
        collection: str,
        predicate: Optional[Callable[[Document], bool]] = None,
    ) -> List[Document]:
        """All documents of a collection matching predicate, in insertion order."""
        with self._store_call("scan", collection):
            stmt = (
                select(StoredRecord)
                .where(StoredRecord.collection == collection)
                .order_by(StoredRecord.id)
            )
            docs = [_to_document(row) for row in self.db.execute(stmt).scalars()]
        if predicate is None:
            return docs
        return [doc for doc in docs if predicate(doc)]

    def _conditional_write(self, collection: str, key: str, payload: Document, expected_version: int) -> None:
        stmt = (
            update(StoredRecord)
            .where(
                StoredRecord.collection == collection,
                StoredRecord.key == key,
                StoredRecord.version == expected_version,
            )
            .values(data=payload, version=expected_version + 1, updated_at=now_utc())
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        if result.rowcount == 0:
            self.db.rollback()
            logger.info(
                "Conditional write rejected on %s/%s (expected version %s)",
                collection, key, expected_version,
            )
            raise ConcurrentModification()
