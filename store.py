import json
import logging
import os
import tempfile
import threading
from typing import Any, Dict, List, Optional

from config import get_settings
from errors import PersistenceFailure
from timezones import now_utc, to_iso

logger = logging.getLogger(__name__)

_settings = get_settings()
DB_FILE = _settings.events_db_file
PROFILES_FILE = _settings.events_profiles_file
TRAIL_FILE = _settings.events_trail_file

_log_lock = threading.Lock()


def now_iso() -> str:
    return to_iso(now_utc())


class JsonCollection:
    """
    A list of JSON records backed by one JSON array file.
    Records are plain dicts keyed by "id"; insertion order is preserved.
    Mutations hold the collection lock until the file write has finished, so a
    failed write only ever undoes its own change.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self.records: List[Dict[str, Any]] = []
        self._lock = threading.RLock()
        self.load()

    def load(self) -> None:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            self.records = []
            self.save()
            return
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceFailure(f"Could not read {self.path}: {exc}") from exc
        self.records = data if isinstance(data, list) else []

    def save(self) -> None:
        """
        Write every record to a temp file beside the collection file, then swap it in.
        Readers of the file see either the old or the new collection, never a mix.
        """
        dirpath = os.path.dirname(os.path.abspath(self.path)) or "."
        try:
            fd, tmp_path = tempfile.mkstemp(dir=dirpath)
        except OSError as exc:
            raise PersistenceFailure(f"Could not write {self.path}: {exc}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self.records, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as exc:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise PersistenceFailure(f"Could not write {self.path}: {exc}") from exc

    def all(self) -> List[Dict[str, Any]]:
        return list(self.records)

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        return next((r for r in self.records if r.get("id") == record_id), None)

    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            self.records.append(record)
            try:
                self.save()
            except PersistenceFailure:
                self.records.remove(record)
                raise
        return record

    def replace(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Swap the stored record with the same id; the previous one is restored if saving fails."""
        with self._lock:
            for idx, existing in enumerate(self.records):
                if existing.get("id") == record["id"]:
                    self.records[idx] = record
                    try:
                        self.save()
                    except PersistenceFailure:
                        self.records[idx] = existing
                        raise
                    return record
        raise KeyError(record["id"])


def append_json_file(path: str, entry: Dict[str, Any]) -> None:
    """
    Add one entry to the request-trail JSON array at path, under _log_lock.
    A missing or unreadable trail file starts a fresh array.
    """
    with _log_lock:
        data: List[Any] = []
        if os.path.exists(path):
            with open(path, "r", encoding="utf-8") as f:
                try:
                    loaded = json.load(f)
                    data = loaded if isinstance(loaded, list) else [loaded]
                except json.JSONDecodeError:
                    data = []
        data.append(entry)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)


def append_trail(
    request: Dict[str, Any],
    response: Any,
    status_code: int,
    endpoint: str,
    path: Optional[str] = None,
) -> None:
    """
    Standardized request-trail entry appended to the trail file.
    A failing trail write is logged and never fails the request.
    """
    entry = {
        "timestamp": now_iso(),
        "endpoint": endpoint,
        "status_code": status_code,
        "outcome": "success" if status_code < 400 else "failure",
        "request": request,
        "response": response,
    }
    try:
        append_json_file(path or TRAIL_FILE, entry)
    except OSError:
        logger.warning("could not append to request trail %s", path or TRAIL_FILE, exc_info=True)
