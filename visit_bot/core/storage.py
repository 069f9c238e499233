"""JSON blob storage standing in for a browser's local storage."""

from __future__ import annotations

import datetime
import json
import logging
import os
from collections.abc import Iterable, Mapping
from datetime import UTC
from pathlib import Path
from typing import Any

log = logging.getLogger("visit_bot.storage")

USERS_KEY = "users"
CURRENT_USER_KEY = "current_user"
VISITS_KEY = "visits"
SUGGESTIONS_KEY = "suggestions"


class JSONStorage:
    """Persist named JSON blobs, one file per key, under ``root``.

    Every write replaces the whole blob; there is no partial update,
    versioning or migration. Unreadable blobs are logged and treated as
    empty so a corrupt file never prevents start-up.
    """

    def __init__(self, root: Path | str) -> None:
        """Initialise storage rooted at directory ``root``."""
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.root / f"{key}.json"

    # ------------------------------------------------------------------
    # Reading
    def _read(self, key: str) -> Any:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            log.warning("Ignoring unreadable blob %s: %s", path, exc)
            return None

    def load(self, key: str) -> list[dict]:
        """Return the records stored under ``key`` or ``[]``."""
        data = self._read(key)
        if data is None:
            return []
        if not isinstance(data, list):
            log.warning("Expected a list under %r, got %s", key, type(data).__name__)
            return []
        records = [item for item in data if isinstance(item, dict)]
        if len(records) != len(data):
            log.warning(
                "Skipping %d non-object entries under %r", len(data) - len(records), key
            )
        return records

    def load_one(self, key: str) -> dict | None:
        """Return the single record stored under ``key`` if there is one."""
        data = self._read(key)
        if data is None:
            return None
        if not isinstance(data, dict):
            log.warning("Expected an object under %r, got %s", key, type(data).__name__)
            return None
        return data

    # ------------------------------------------------------------------
    # Writing
    def _write(self, key: str, payload: Any) -> None:
        path = self.path_for(key)
        tmp = path.with_suffix(".json.tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(tmp, path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise

    def save(self, key: str, records: Iterable[Mapping[str, Any]]) -> None:
        """Overwrite ``key`` with the full collection ``records``."""
        self._write(key, [dict(r) for r in records])

    def save_one(self, key: str, record: Mapping[str, Any]) -> None:
        """Overwrite ``key`` with a single record."""
        self._write(key, dict(record))

    def remove(self, key: str) -> None:
        """Delete the blob under ``key``; missing blobs are ignored."""
        self.path_for(key).unlink(missing_ok=True)

    # ------------------------------------------------------------------
    @staticmethod
    def normalize_dates(
        record: Mapping[str, Any], date_fields: Iterable[str]
    ) -> dict[str, Any]:
        """Return a copy of ``record`` with ``date_fields`` parsed to datetimes.

        Absent or ``None`` fields are left out of the result entirely, so an
        optional date that was never set stays absent after a reload. Naive
        timestamps are assumed to be UTC.
        """
        result = dict(record)
        for name in date_fields:
            value = result.get(name)
            if value is None:
                result.pop(name, None)
                continue
            if isinstance(value, datetime.datetime):
                parsed = value
            else:
                try:
                    parsed = datetime.datetime.fromisoformat(str(value))
                except ValueError:
                    log.warning("Dropping unparseable %s=%r", name, value)
                    result.pop(name)
                    continue
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=UTC)
            result[name] = parsed
        return result
