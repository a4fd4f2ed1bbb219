# =============================================================================
# core/services/fallback_store.py - Local Fallback Store
# =============================================================================
# JSON file holding an ordered list of application records under a fixed
# namespace. The admin listing reads it when the upstream is unreachable and
# merges every successful upstream listing into it. In offline demo mode
# records saved here get client-side ids (SOL-<epoch ms>); those survive the
# merge until the upstream lists the same id.
#
# File layout:
#   {"bancamia_solicitudes": [{...}, {...}]}
#
# One admin session writes at a time; there is no locking.
# =============================================================================

import json
import logging
import re
import time
from pathlib import Path
from typing import Any

from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

STORAGE_NAMESPACE = "bancamia_solicitudes"
ID_PREFIX = "SOL"
LOCAL_ID_PATTERN = re.compile(rf"^{ID_PREFIX}-\d+$")


def is_local_id(record_id: Any) -> bool:
    """True for ids generated by save() rather than by the upstream."""
    return isinstance(record_id, str) and bool(LOCAL_ID_PATTERN.match(record_id))


class LocalFallbackStore:
    """
    File-backed list of application records.

    Read failures (missing or corrupt file) are logged and behave as an
    empty store; the store is a cache, never the source of truth.
    """

    def __init__(self, path: str | Path, namespace: str = STORAGE_NAMESPACE) -> None:
        self.path = Path(path)
        self.namespace = namespace

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def all(self) -> list[dict[str, Any]]:
        """Every stored record, oldest first."""
        if not self.path.exists():
            return []
        try:
            content = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Could not read fallback store {self.path}: {e}")
            return []

        records = content.get(self.namespace, []) if isinstance(content, dict) else []
        if not isinstance(records, list):
            logger.error(f"Fallback store namespace {self.namespace} is not a list, ignoring")
            return []
        return [r for r in records if isinstance(r, dict)]

    def get(self, record_id: str) -> dict[str, Any] | None:
        for record in self.all():
            if record.get("id") == record_id:
                return record
        return None

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def save(self, record: dict[str, Any]) -> dict[str, Any]:
        """
        Append a record with a generated id and submission timestamp.

        Returns:
            The stored record
        """
        stored = {
            **record,
            "id": self._new_id(),
            "fechaSolicitud": utc_now_iso(),
        }
        records = self.all()
        records.append(stored)
        self._write(records)
        return stored

    def replace_all(self, records: list[dict[str, Any]]) -> None:
        """Overwrite the store with a fresh listing (e.g. from upstream)."""
        self._write([r for r in records if isinstance(r, dict)])

    def merge_upstream(self, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """
        Cache an upstream listing without losing records saved offline.

        Upstream records replace everything except locally generated
        records (SOL-<ms>) whose id the upstream does not know.

        Returns:
            The stored records, upstream first
        """
        upstream = [r for r in records if isinstance(r, dict)]
        upstream_ids = {r.get("id") for r in upstream}
        local_only = [
            r for r in self.all()
            if is_local_id(r.get("id")) and r.get("id") not in upstream_ids
        ]
        merged = upstream + local_only
        self._write(merged)
        return merged

    def delete(self, record_id: str) -> bool:
        """Remove one record. Returns True if it existed."""
        records = self.all()
        remaining = [r for r in records if r.get("id") != record_id]
        if len(remaining) == len(records):
            return False
        self._write(remaining)
        return True

    def clear(self) -> None:
        self._write([])

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _new_id(self) -> str:
        existing = {r.get("id") for r in self.all()}
        stamp = int(time.time() * 1000)
        # Two saves within the same millisecond must not share an id
        while f"{ID_PREFIX}-{stamp}" in existing:
            stamp += 1
        return f"{ID_PREFIX}-{stamp}"

    def _write(self, records: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(
            json.dumps({self.namespace: records}, ensure_ascii=False, indent=2, default=str),
            encoding="utf-8",
        )
        tmp.replace(self.path)
