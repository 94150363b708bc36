"""
Key-value persistence for the engine: the live session blob plus an
append-only history of daily records.

Reads never raise: a missing or damaged file means "nothing saved".
Writes are fire-and-forget: failures are logged and dropped, the in-memory
session stays authoritative and the next mutation saves again.
"""

import json
import os
from pathlib import Path
from typing import List, Optional, Protocol

from .config import log
from .constants import MAX_HISTORY_DAYS
from .models import DailyRecord
from .state import SessionState


class KeyValueStore(Protocol):
    def load_session_state(self) -> Optional[SessionState]:
        raise NotImplementedError

    def save_session_state(self, state: SessionState) -> None:
        raise NotImplementedError

    def append_daily_record(self, record: DailyRecord) -> None:
        raise NotImplementedError

    def list_daily_records(self) -> List[DailyRecord]:
        """Oldest first (insertion order)."""
        raise NotImplementedError

    def clear(self) -> None:
        """Forget everything (used on sign-out)."""
        raise NotImplementedError


def _records_from_json(items) -> List[DailyRecord]:
    if not isinstance(items, list):
        return []
    records = []
    for raw in items:
        record = DailyRecord.from_dict(raw)
        if record is not None:
            records.append(record)
    return records


def _cap(records, limit):
    return records[-limit:] if limit and len(records) > limit else records


# ─── JSON files on disk ──────────────────────────────────────────

class JsonFileStore:
    SESSION_FILE = "session.json"
    HISTORY_FILE = "history.json"

    def __init__(self, base_dir, max_history=MAX_HISTORY_DAYS):
        self._dir = Path(base_dir)
        self._max_history = max_history
        self.session_path = self._dir / self.SESSION_FILE
        self.history_path = self._dir / self.HISTORY_FILE

    def _read_json(self, path):
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            log.warning("Ignoring unreadable %s: %s", path.name, e)
            return None

    def _write_json(self, path, data):
        """Write via temp file + replace so a crash never leaves half a file."""
        self._dir.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp, path)

    def load_session_state(self):
        data = self._read_json(self.session_path)
        if data is None:
            return None
        state = SessionState.from_dict(data)
        log.info("Session restored (phase=%s)", state.phase.value)
        return state

    def save_session_state(self, state):
        try:
            self._write_json(self.session_path, state.to_dict())
        except (OSError, TypeError, ValueError) as e:
            log.warning("Session save failed: %s", e)

    def append_daily_record(self, record):
        try:
            items = self._read_json(self.history_path)
            if not isinstance(items, list):
                items = []
            items.append(record.to_dict())
            self._write_json(self.history_path, _cap(items, self._max_history))
            log.info("Daily record archived for %s", record.date)
        except (OSError, TypeError, ValueError) as e:
            log.warning("Daily record archive failed: %s", e)

    def list_daily_records(self):
        return _records_from_json(self._read_json(self.history_path))

    def clear(self):
        for path in (self.session_path, self.history_path):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                log.warning("Could not remove %s: %s", path.name, e)
        log.info("Time tracking data cleared")


# ─── In-process ──────────────────────────────────────────────────

class MemoryStore:
    """Same contract as JsonFileStore, kept in memory. Blobs are stored as
    dicts so loads return fresh objects, like a real store would."""

    def __init__(self, max_history=MAX_HISTORY_DAYS):
        self._max_history = max_history
        self._session = None
        self._history = []
        self.save_count = 0

    def load_session_state(self):
        if self._session is None:
            return None
        return SessionState.from_dict(self._session)

    def save_session_state(self, state):
        self._session = state.to_dict()
        self.save_count += 1

    def append_daily_record(self, record):
        self._history.append(record.to_dict())
        self._history = _cap(self._history, self._max_history)

    def list_daily_records(self):
        return _records_from_json(self._history)

    def clear(self):
        self._session = None
        self._history = []
