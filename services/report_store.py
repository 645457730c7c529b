"""Persistence for career analysis records.

Records are write-once: a store can insert, read, list and delete them, but
never update the stored report.
"""
import copy
import itertools
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Protocol

from google.api_core import exceptions as gcp_exceptions
from google.auth import exceptions as google_auth_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter
from google.cloud.firestore_v1.transaction import transactional
from pydantic import ValidationError

from models.schemas import AnalysisRecord, NewAnalysisRecord
from services.report_structure import upgrade_legacy_report

logger = logging.getLogger(__name__)

FIRESTORE_ERRORS = (gcp_exceptions.GoogleAPIError, google_auth_exceptions.GoogleAuthError)


class AnalysisNotFoundError(Exception):
    def __init__(self, analysis_id: str) -> None:
        super().__init__(f"Analysis {analysis_id} not found")
        self.analysis_id = analysis_id


class AnalysisPermissionError(Exception):
    def __init__(self, analysis_id: str) -> None:
        super().__init__(f"Not allowed to delete analysis {analysis_id}")
        self.analysis_id = analysis_id


class StoreUnavailableError(Exception):
    """The backing store could not be reached or returned an error."""


class ReportStore(Protocol):
    def create(self, new_record: NewAnalysisRecord) -> AnalysisRecord: ...

    def get_by_id(self, analysis_id: str) -> AnalysisRecord: ...

    def list_by_user(self, user_id: str) -> List[AnalysisRecord]: ...

    def delete(self, analysis_id: str, requesting_user_id: str) -> None: ...

    def count_by_user(self, user_id: str) -> int: ...


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _record_from_document(analysis_id: str, document: Dict[str, Any]) -> AnalysisRecord:
    """Build a record from a stored document, upgrading legacy report shapes."""
    data = dict(document)
    data["id"] = analysis_id
    data["result"] = upgrade_legacy_report(data.get("result") or {})
    try:
        return AnalysisRecord.model_validate(data)
    except ValidationError as e:
        logger.error(f"Stored analysis {analysis_id} is unreadable: {e.error_count()} errors")
        raise StoreUnavailableError(f"Stored analysis {analysis_id} is unreadable") from e


# ---------- In-memory ----------
class InMemoryReportStore:
    """Process-local store for tests and local runs."""

    def __init__(self) -> None:
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._order: Dict[str, int] = {}
        self._seq = itertools.count()
        self._lock = threading.Lock()

    def create(self, new_record: NewAnalysisRecord) -> AnalysisRecord:
        now = _now()
        record = AnalysisRecord(
            id=uuid.uuid4().hex,
            created_at=now,
            updated_at=now,
            **dict(new_record),
        )
        with self._lock:
            self._documents[record.id] = record.to_document()
            self._order[record.id] = next(self._seq)
        logger.info(f"Stored analysis {record.id} for user {record.user_id}")
        return record

    def get_by_id(self, analysis_id: str) -> AnalysisRecord:
        with self._lock:
            document = copy.deepcopy(self._documents.get(analysis_id))
        if document is None:
            raise AnalysisNotFoundError(analysis_id)
        return _record_from_document(analysis_id, document)

    def list_by_user(self, user_id: str) -> List[AnalysisRecord]:
        with self._lock:
            owned = [
                (analysis_id, copy.deepcopy(doc))
                for analysis_id, doc in self._documents.items()
                if doc.get("userId") == user_id
            ]
            order = dict(self._order)
        owned.sort(key=lambda item: (item[1]["createdAt"], order[item[0]]), reverse=True)
        return [_record_from_document(analysis_id, doc) for analysis_id, doc in owned]

    def delete(self, analysis_id: str, requesting_user_id: str) -> None:
        with self._lock:
            document = self._documents.get(analysis_id)
            if document is None:
                raise AnalysisNotFoundError(analysis_id)
            if document.get("userId") != requesting_user_id:
                raise AnalysisPermissionError(analysis_id)
            del self._documents[analysis_id]
            self._order.pop(analysis_id, None)
        logger.info(f"Deleted analysis {analysis_id}")

    def count_by_user(self, user_id: str) -> int:
        with self._lock:
            return sum(1 for doc in self._documents.values() if doc.get("userId") == user_id)


# ---------- Firestore ----------
class FirestoreReportStore:
    """One Firestore collection, one document per analysis.

    Pass a client as ``db``, or a ``connect`` callable that builds one on
    first use so missing credentials surface as ``StoreUnavailableError``.
    """

    def __init__(self, db=None, collection: str = "career_analyses", connect=None) -> None:
        self._db = db
        self._connect = connect
        self.collection_name = collection

    @property
    def db(self):
        if self._db is None:
            try:
                self._db = self._connect()
            except (ValueError, google_auth_exceptions.GoogleAuthError) as e:
                logger.error(f"[Firestore] connection failed: {e}")
                raise StoreUnavailableError(f"Firestore connection failed: {e}") from e
        return self._db

    @property
    def collection(self):
        return self.db.collection(self.collection_name)

    def _owned_query(self, user_id: str):
        return self.collection.where(filter=FieldFilter("userId", "==", user_id))

    def create(self, new_record: NewAnalysisRecord) -> AnalysisRecord:
        now = _now()
        try:
            doc_ref = self.collection.document()
            record = AnalysisRecord(id=doc_ref.id, created_at=now, updated_at=now, **dict(new_record))
            doc_ref.set(record.to_document())
        except FIRESTORE_ERRORS as e:
            logger.error(f"[Firestore] write failed: {e}")
            raise StoreUnavailableError(str(e)) from e
        logger.info(f"Stored analysis {record.id} for user {record.user_id}")
        return record

    def get_by_id(self, analysis_id: str) -> AnalysisRecord:
        try:
            snapshot = self.collection.document(analysis_id).get()
        except FIRESTORE_ERRORS as e:
            raise StoreUnavailableError(str(e)) from e
        if not snapshot.exists:
            raise AnalysisNotFoundError(analysis_id)
        return _record_from_document(snapshot.id, snapshot.to_dict())

    def list_by_user(self, user_id: str) -> List[AnalysisRecord]:
        try:
            snapshots = list(self._owned_query(user_id).stream())
        except FIRESTORE_ERRORS as e:
            raise StoreUnavailableError(str(e)) from e
        records = [_record_from_document(s.id, s.to_dict()) for s in snapshots]
        # Sorted here so the query needs no composite index
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records

    def delete(self, analysis_id: str, requesting_user_id: str) -> None:
        @transactional
        def delete_if_owner(transaction, doc_ref):
            snapshot = doc_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise AnalysisNotFoundError(analysis_id)
            if (snapshot.to_dict() or {}).get("userId") != requesting_user_id:
                raise AnalysisPermissionError(analysis_id)
            transaction.delete(doc_ref)

        try:
            delete_if_owner(self.db.transaction(), self.collection.document(analysis_id))
        except FIRESTORE_ERRORS as e:
            raise StoreUnavailableError(str(e)) from e
        logger.info(f"Deleted analysis {analysis_id}")

    def count_by_user(self, user_id: str) -> int:
        try:
            return sum(1 for _ in self._owned_query(user_id).stream())
        except FIRESTORE_ERRORS as e:
            raise StoreUnavailableError(str(e)) from e
