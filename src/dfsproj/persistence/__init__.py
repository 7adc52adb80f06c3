"""Persistence adapters for the identity registry."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from dfsproj.models import CanonicalId, IdentityRecord, ProvisionalId


logger = logging.getLogger(__name__)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return datetime.now(timezone.utc)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return datetime.now(timezone.utc)


def _identity_from_fields(kind: str | None, value: int, source_id: str | None):
    if kind == "provisional" or (kind is None and value < 0):
        return ProvisionalId(value=value, source_id=source_id)
    return CanonicalId(value=value)


def _entry_key(entry: Mapping[str, Any]) -> Optional[Tuple[str, int]]:
    try:
        value = int(entry["id"])
    except (KeyError, TypeError, ValueError):
        return None
    kind = entry.get("kind")
    if kind not in ("canonical", "provisional"):
        kind = "provisional" if value < 0 else "canonical"
    return kind, value


def _write_atomic(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(temp_path, path)
    except BaseException:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


class RegistryStore:
    """SQLite-backed store for identity records.

    ``load`` never raises; when it cannot read the database it returns an
    empty list and leaves the reason in :attr:`load_error`.
    """

    def __init__(self, db_path: Path | str):
        self._use_uri = isinstance(db_path, str) and db_path.startswith("file:")
        self.db_path: Path | str = db_path if self._use_uri else Path(db_path)
        self._schema_ready = False
        self.load_error: Optional[str] = None

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
        else:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        if not self._schema_ready:
            self._create_schema(conn)
            self._schema_ready = True
        return conn

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS identities (
                kind TEXT NOT NULL,
                id INTEGER NOT NULL,
                source_id TEXT,
                name TEXT NOT NULL,
                position TEXT NOT NULL,
                team_id INTEGER NOT NULL,
                active INTEGER NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                PRIMARY KEY (kind, id)
            )
            """
        )
        conn.commit()

    def load(self) -> List[IdentityRecord]:
        """Return all stored records in insertion order; empty on any failure."""

        try:
            with self._connect() as conn:
                rows = conn.execute("SELECT * FROM identities ORDER BY rowid").fetchall()
        except (sqlite3.Error, OSError) as exc:
            logger.warning("Unable to load identity registry from %s: %s", self.db_path, exc)
            self.load_error = str(exc)
            return []
        self.load_error = None

        records: List[IdentityRecord] = []
        for row in rows:
            try:
                records.append(self._row_to_record(row))
            except ValidationError as exc:
                logger.warning("Skipping invalid identity row %s/%s: %s", row["kind"], row["id"], exc)
        return records

    def save(self, records: Iterable[IdentityRecord]) -> None:
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT INTO identities (
                    kind, id, source_id, name, position, team_id, active, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(kind, id) DO UPDATE SET
                    source_id = excluded.source_id,
                    name = excluded.name,
                    position = excluded.position,
                    team_id = excluded.team_id,
                    active = excluded.active,
                    updated_at = excluded.updated_at
                """,
                [
                    (
                        record.identity.kind,
                        record.identity.value,
                        getattr(record.identity, "source_id", None),
                        record.display_name,
                        record.position,
                        record.team_id,
                        int(record.active),
                        record.created_at.isoformat(),
                        record.updated_at.isoformat(),
                    )
                    for record in records
                ],
            )
            conn.commit()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> IdentityRecord:
        return IdentityRecord(
            identity=_identity_from_fields(row["kind"], int(row["id"]), row["source_id"]),
            display_name=row["name"],
            position=row["position"],
            team_id=int(row["team_id"]),
            active=bool(row["active"]),
            created_at=_parse_timestamp(row["created_at"]),
            updated_at=_parse_timestamp(row["updated_at"]),
        )


class JsonRegistryStore:
    """Store for ``player-mapping.json`` style files.

    Entries look like ``{"id": 12345, "name": "Ken Griffey", "position": "OF",
    "team_id": 136, "active": true, "created_at": ..., "updated_at": ...}``.
    Files written here add a ``kind`` field; older files without one treat a
    negative ``id`` as provisional.

    ``save`` merges with the entries already on disk on ``(kind, id)`` and
    replaces the file atomically, so entries this process could not parse
    survive a write.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self.load_error: Optional[str] = None

    def _read_entries(self) -> List[Any]:
        payload = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(payload, list):
            raise ValueError(f"{self.path} is not a JSON list")
        return payload

    def load(self) -> List[IdentityRecord]:
        try:
            payload = self._read_entries()
        except FileNotFoundError:
            self.load_error = None
            return []
        except (OSError, ValueError) as exc:
            logger.warning("Unable to load identity registry from %s: %s", self.path, exc)
            self.load_error = str(exc)
            return []
        self.load_error = None

        records: List[IdentityRecord] = []
        for entry in payload:
            if not isinstance(entry, Mapping):
                logger.warning("Skipping non-object identity entry %r", entry)
                continue
            try:
                records.append(self._entry_to_record(entry))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping invalid identity entry %r: %s", entry, exc)
        return records

    def save(self, records: Iterable[IdentityRecord]) -> None:
        payload: List[Any] = [
            {
                "id": record.canonical_id,
                "kind": record.identity.kind,
                "source_id": getattr(record.identity, "source_id", None),
                "name": record.display_name,
                "position": record.position,
                "team_id": record.team_id,
                "active": record.active,
                "created_at": record.created_at.isoformat(),
                "updated_at": record.updated_at.isoformat(),
            }
            for record in records
        ]
        try:
            existing = self._read_entries()
        except FileNotFoundError:
            existing = []
        except (OSError, ValueError) as exc:
            raise ValueError(f"refusing to overwrite unreadable identity registry {self.path}: {exc}") from exc

        written = {_entry_key(entry) for entry in payload}
        for entry in existing:
            if isinstance(entry, Mapping) and _entry_key(entry) not in written:
                payload.append(entry)
        _write_atomic(self.path, json.dumps(payload, indent=2))

    @staticmethod
    def _entry_to_record(entry: Mapping[str, Any]) -> IdentityRecord:
        return IdentityRecord(
            identity=_identity_from_fields(entry.get("kind"), int(entry["id"]), entry.get("source_id")),
            display_name=str(entry["name"]),
            position=str(entry.get("position") or ""),
            team_id=int(entry.get("team_id") or 0),
            active=bool(entry.get("active", True)),
            created_at=_parse_timestamp(entry.get("created_at")),
            updated_at=_parse_timestamp(entry.get("updated_at")),
        )


__all__ = ["JsonRegistryStore", "RegistryStore"]
