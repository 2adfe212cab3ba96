"""
Bounded history of saved diagnoses.

The history keeps the most recent entries (newest first) in a single value of
an injected key-value storage. Every change replaces the whole list in one
write. Storage failures are logged and the in-memory list stays usable.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from models import StoredValue

logger = logging.getLogger(__name__)

STORAGE_KEY = 'clif-c-of-history'
MAX_HISTORY = 10


class StorageError(Exception):
    """Raised by storage backends when a read or write fails."""


class InMemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class DatabaseStorage:
    """Storage backed by the StoredValue table. Needs an application context."""

    def __init__(self, database):
        self.db = database

    def get(self, key: str) -> Optional[str]:
        try:
            row = self.db.session.get(StoredValue, key)
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            raise StorageError(f'could not read {key!r}') from exc
        return row.value if row is not None else None

    def set(self, key: str, value: str) -> None:
        try:
            row = self.db.session.get(StoredValue, key)
            if row is None:
                self.db.session.add(StoredValue(key=key, value=value))
            else:
                row.value = value
            self.db.session.commit()
        except SQLAlchemyError as exc:
            self.db.session.rollback()
            raise StorageError(f'could not write {key!r}') from exc


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DiagnosisHistory:
    """
    Newest-first list of saved diagnoses, capped at ``max_entries``.

    Every operation re-reads storage first, so several stores sharing one
    backend (for example worker processes over the same database) see each
    other's entries. The read and the following write are not atomic: two
    concurrent writers can still lose one change. When a read fails the last
    list this store saw is used instead.
    """

    def __init__(self, storage, key: str = STORAGE_KEY, max_entries: int = MAX_HISTORY,
                 clock: Callable[[], datetime] = _utcnow):
        if max_entries < 1:
            raise ValueError('max_entries must be at least 1')
        self.storage = storage
        self.key = key
        self.max_entries = max_entries
        self.clock = clock
        self._entries: List[Dict] = []
        self._last_id = 0

    # ---------- storage ----------

    def _read(self) -> List[Dict]:
        previous = self._entries
        try:
            raw = self.storage.get(self.key)
        except StorageError as exc:
            logger.warning('Error reading diagnosis history: %s', exc)
            return previous
        if raw is None:
            return []
        try:
            entries = json.loads(raw)
        except ValueError as exc:
            logger.warning('Discarding unreadable diagnosis history: %s', exc)
            return previous
        if not isinstance(entries, list):
            logger.warning('Discarding diagnosis history of type %s', type(entries).__name__)
            return previous
        kept = [e for e in entries if isinstance(e, dict)]
        if len(kept) != len(entries):
            logger.warning('Dropping %d malformed diagnosis history entries',
                           len(entries) - len(kept))
        return kept[: self.max_entries]

    def _load(self) -> List[Dict]:
        self._entries = self._read()
        return self._entries

    def _write(self, entries: List[Dict]) -> None:
        self._entries = entries
        try:
            self.storage.set(self.key, json.dumps(entries))
        except (StorageError, TypeError, ValueError) as exc:
            logger.warning('Error writing diagnosis history: %s', exc)

    def reload(self) -> List[Dict]:
        return list(self._load())

    # ---------- operations ----------

    def _next_id(self, now: datetime, entries: List[Dict]) -> int:
        known = [e.get('id') for e in entries if isinstance(e.get('id'), int)]
        latest = max(known + [self._last_id])
        self._last_id = max(int(now.timestamp() * 1000), latest + 1)
        return self._last_id

    def entries(self) -> List[Dict]:
        return list(self._load())

    def add(self, result: Dict) -> Dict:
        entries = self._load()
        now = self.clock()
        entry = dict(result)
        entry['id'] = self._next_id(now, entries)
        entry['timestamp'] = now.isoformat()
        self._write([entry] + entries[: self.max_entries - 1])
        logger.info('Saved diagnosis %s to history (%s)', entry['id'], entry.get('grade'))
        return entry

    def remove(self, entry_id: int) -> None:
        entries = self._load()
        remaining = [e for e in entries if e.get('id') != entry_id]
        if len(remaining) != len(entries):
            self._write(remaining)

    def clear(self) -> None:
        self._write([])

    def load_by_id(self, entry_id: int) -> Optional[Dict]:
        return next((e for e in self._load() if e.get('id') == entry_id), None)

    def __len__(self) -> int:
        return len(self._load())
