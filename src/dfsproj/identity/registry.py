"""In-memory, append-only registry of player identities."""

from __future__ import annotations

import logging
import threading
import zlib
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from dfsproj.identity.names import normalize_name
from dfsproj.models import IdentityRecord, ProvisionalId


logger = logging.getLogger(__name__)


class IdentityStore(Protocol):
    """Backing store; a ``load_error`` attribute, when present, reports a failed load."""

    def load(self) -> Sequence[IdentityRecord]: ...


def synthetic_provisional_id(source_id: object, normalized_name: str) -> int:
    """Negative id derived from the source-system id, or from the name when there is none."""

    text = str(source_id).strip() if source_id is not None else ""
    if text.isdigit() and int(text) > 0:
        return -int(text)
    digest = zlib.crc32(normalized_name.encode("utf-8")) & 0x7FFFFFFF
    return -(digest or 1)


class IdentityRegistry:
    """Registry of identity records, lazily loaded from an optional store.

    Records are kept in load order followed by append order; every scan the
    resolver performs walks that order, which keeps resolution reproducible.
    ``add_provisional`` is a check-then-insert critical section so concurrent
    callers resolving the same unknown name share a single record.

    A store that failed to load leaves the registry running on what it has,
    but ``flush`` writes nothing until a ``reload`` succeeds.
    """

    def __init__(
        self,
        store: IdentityStore | None = None,
        *,
        records: Iterable[IdentityRecord] | None = None,
    ) -> None:
        self._store = store
        self._lock = threading.RLock()
        self._loaded = store is None
        self._load_failed = False
        self._records: List[IdentityRecord] = []
        self._names: List[str] = []
        self._by_name: Dict[str, IdentityRecord] = {}
        self._keys: set[tuple[str, int]] = set()
        for record in records or ():
            self.add(record)

    def __len__(self) -> int:
        self._ensure_loaded()
        return len(self._records)

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        with self._lock:
            if self._loaded:
                return
            self._loaded = True
            self._load_from_store()

    def _load_from_store(self) -> int:
        if self._store is None:
            return 0
        try:
            loaded = list(self._store.load())
        except Exception as exc:
            self._load_failed = True
            logger.warning("Identity registry load failed; continuing with %d records: %s", len(self._records), exc)
            return 0
        error = getattr(self._store, "load_error", None)
        if error:
            self._load_failed = True
            logger.warning("Identity registry load failed; continuing with %d records: %s", len(self._records), error)
            return 0
        self._load_failed = False
        added = 0
        for record in loaded:
            if self._insert(record):
                added += 1
        logger.info("Loaded %d identity records (%d skipped)", added, len(loaded) - added)
        return added

    def _insert(self, record: IdentityRecord) -> bool:
        if record.identity_key in self._keys:
            logger.debug("Skipping duplicate identity %s for %s", record.identity_key, record.display_name)
            return False
        normalized = normalize_name(record.display_name)
        self._records.append(record)
        self._names.append(normalized)
        self._keys.add(record.identity_key)
        self._by_name.setdefault(normalized, record)
        return True

    def reload(self) -> int:
        """Retry the store and merge any records not already present.

        A successful reload re-enables ``flush`` after a failed load.
        """

        with self._lock:
            self._loaded = True
            return self._load_from_store()

    def add(self, record: IdentityRecord) -> IdentityRecord:
        self._ensure_loaded()
        with self._lock:
            if not self._insert(record):
                raise ValueError(f"identity {record.identity_key} is already registered")
        return record

    def lookup_exact(self, normalized_name: str) -> Optional[IdentityRecord]:
        self._ensure_loaded()
        return self._by_name.get(normalized_name)

    def all(self) -> Tuple[IdentityRecord, ...]:
        self._ensure_loaded()
        with self._lock:
            return tuple(self._records)

    def indexed(self) -> Tuple[Tuple[str, IdentityRecord], ...]:
        """Snapshot of ``(normalized_name, record)`` pairs in registry order."""

        self._ensure_loaded()
        with self._lock:
            return tuple(zip(self._names, self._records))

    def add_provisional(self, source_id: object, raw_name: str, position: str = "") -> IdentityRecord:
        normalized = normalize_name(raw_name)
        self._ensure_loaded()
        with self._lock:
            existing = self._by_name.get(normalized)
            if existing is not None:
                return existing
            value = synthetic_provisional_id(source_id, normalized)
            while ("provisional", value) in self._keys:
                value -= 1
            source_text = str(source_id).strip() if source_id is not None else ""
            record = IdentityRecord(
                identity=ProvisionalId(value=value, source_id=source_text or None),
                display_name=raw_name.strip() if isinstance(raw_name, str) else "",
                position=position or "",
            )
            self._insert(record)
        logger.debug("Created provisional identity %d for %r", value, raw_name)
        return record

    def flush(self) -> int:
        """Write every record back through the store; returns the number written."""

        save = getattr(self._store, "save", None)
        if save is None:
            return 0
        records = self.all()
        if self._load_failed:
            logger.warning("Not flushing %d identity records: the store failed to load; reload it first", len(records))
            return 0
        save(records)
        return len(records)
