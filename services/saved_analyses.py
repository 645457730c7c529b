import json
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional

from models.schemas import AnalysisRecord, SavedAnalysisEntry, SavedAnalysisMetadata
from services.report_store import ReportStore, StoreUnavailableError

logger = logging.getLogger(__name__)


def entry_from_record(record: AnalysisRecord) -> SavedAnalysisEntry:
    return SavedAnalysisEntry(
        user_id=record.user_id,
        report=record.result,
        metadata=SavedAnalysisMetadata(
            id=record.id,
            date_created=record.created_at,
            desired_role=record.desired_role,
            professional_level=record.professional_level,
        ),
    )


class SavedAnalysesCache:
    """Write-through copy of each user's saved analyses.

    The report store is authoritative. The cache is refreshed from it on every
    successful listing and only served on its own, flagged ``stale``, while the
    store is unavailable. With ``path`` set the entries survive restarts as a
    JSON file.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = Path(path) if path else None
        self._entries: Dict[str, SavedAnalysisEntry] = {}
        self._lock = threading.Lock()
        self._load()

    def _load(self) -> None:
        if self.path is None or not self.path.exists():
            return
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable saved analyses file {self.path}: {e}")
            return
        for item in raw:
            entry = SavedAnalysisEntry.model_validate(item)
            self._entries[entry.metadata.id] = entry

    def _flush(self) -> None:
        # called with the lock held
        if self.path is None:
            return
        payload = [entry.model_dump(mode="json", by_alias=True) for entry in self._entries.values()]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload), encoding="utf-8")
        except OSError as e:
            # in-memory entries stay current; the store holds the real records
            logger.error(f"Could not write saved analyses file {self.path}: {e}")

    def remember(self, record: AnalysisRecord) -> SavedAnalysisEntry:
        entry = entry_from_record(record)
        with self._lock:
            self._entries[entry.metadata.id] = entry
            self._flush()
        return entry

    def forget(self, analysis_id: str) -> None:
        with self._lock:
            if self._entries.pop(analysis_id, None) is not None:
                self._flush()

    def entries_for(self, user_id: str) -> List[SavedAnalysisEntry]:
        with self._lock:
            owned = [e for e in self._entries.values() if e.user_id == user_id]
        return sorted(owned, key=lambda e: e.metadata.date_created, reverse=True)

    def reconcile(self, user_id: str, records: List[AnalysisRecord]) -> List[SavedAnalysisEntry]:
        """Replace the user's entries with the server's list, keeping its order."""
        fresh = [entry_from_record(record) for record in records]
        with self._lock:
            for analysis_id in [k for k, e in self._entries.items() if e.user_id == user_id]:
                del self._entries[analysis_id]
            for entry in fresh:
                self._entries[entry.metadata.id] = entry
            self._flush()
        return fresh

    def list_saved(self, user_id: str, store: ReportStore) -> List[SavedAnalysisEntry]:
        try:
            records = store.list_by_user(user_id)
        except StoreUnavailableError as e:
            logger.warning(f"Serving cached analyses for user {user_id}, store unavailable: {e}")
            return [entry.model_copy(update={"stale": True}) for entry in self.entries_for(user_id)]
        return self.reconcile(user_id, records)
