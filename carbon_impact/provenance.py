# -*- coding: utf-8 -*-
"""
Provenance Tracking for the Carbon Impact Engine

SHA-256 audit trail for every calculation the engine performs. Two hash
kinds are produced:

- Record hashes (``compute_hash``): deterministic digests over a record's
  inputs and derived fields. Identical inputs always give identical
  hashes, so a stored record can be re-derived and checked.
- Link hashes (``ProvenanceTracker``): an append-only log where every
  entry commits to the entry before it, the record it describes and the
  record's data hash. Editing any entry breaks every later link.

Entity Types:
    - sink: New vegetation carbon sinks
    - existing_sink: Pre-existing vegetation carbon sinks
    - renewable: Renewable deployment assessments
    - ccs: Carbon capture retrofit calculations
    - mcs: Methane capture retrofit calculations

The log is served over HTTP by ``GET /provenance`` and
``GET /provenance/{entity_type}/{entity_id}``.

Example:
    >>> from carbon_impact.provenance import ProvenanceTracker
    >>> tracker = ProvenanceTracker()
    >>> entry = tracker.record("ccs", "calculate", "rec_001", data={"a": 1})
    >>> tracker.verify_chain()
    True

Author: Carbon Impact Team
Date: October 2026
Status: Production Ready
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from carbon_impact.coercion import finite_or_none

logger = logging.getLogger(__name__)

DEFAULT_GENESIS = "GL-CARBON-IMPACT-GENESIS"

VALID_ENTITY_TYPES = frozenset({
    "sink",
    "existing_sink",
    "renewable",
    "ccs",
    "mcs",
})


def compute_hash(data: Any) -> str:
    """Return the SHA-256 hex digest of ``data`` in canonical JSON form.

    Keys are sorted and non-finite floats are hashed as ``null``, matching
    how the record is later serialized.
    """
    serialized = json.dumps(finite_or_none(data), sort_keys=True, default=str)
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


@dataclass
class ProvenanceEntry:
    """One link of the provenance log.

    Attributes:
        sequence: Zero-based position in the log.
        entity_type: Calculator family that produced the record.
        entity_id: Store identifier of the record.
        action: Action performed, normally ``calculate``.
        data_hash: ``compute_hash`` of the stored record document.
        parent_hash: Link hash of the preceding entry (genesis for the first).
        hash_value: Link hash of this entry.
        timestamp: UTC ISO timestamp.
        metadata: Extra fields, e.g. the record's own provenance hash.
    """

    sequence: int
    entity_type: str
    entity_id: str
    action: str
    data_hash: str
    parent_hash: str
    hash_value: str
    timestamp: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def link_hash(self) -> str:
        """Recompute this entry's link hash from its committed fields."""
        payload = {
            "sequence": self.sequence,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "action": self.action,
            "data_hash": self.data_hash,
            "parent_hash": self.parent_hash,
            "timestamp": self.timestamp,
        }
        return compute_hash(payload)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ProvenanceTracker:
    """Append-only, hash-linked log of calculation provenance.

    Entries are indexed by ``(entity_type, entity_id)`` so the history of
    a single stored record can be fetched without scanning the log.
    Thread-safe; one lock guards both the log and the index.
    """

    def __init__(self, genesis_hash: str = DEFAULT_GENESIS) -> None:
        self._genesis = hashlib.sha256(genesis_hash.encode("utf-8")).hexdigest()
        self._entries: List[ProvenanceEntry] = []
        self._by_entity: Dict[str, List[ProvenanceEntry]] = {}
        self._lock = threading.Lock()
        logger.info(
            "Carbon impact ProvenanceTracker initialized with genesis prefix=%s",
            self._genesis[:16],
        )

    def record(
        self,
        entity_type: str,
        action: str,
        entity_id: str,
        data: Optional[Any] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ProvenanceEntry:
        """Append an entry for ``entity_type``/``entity_id``.

        Raises:
            ValueError: If entity_type, action or entity_id is empty.
        """
        for name, value in (
            ("entity_type", entity_type),
            ("action", action),
            ("entity_id", entity_id),
        ):
            if not value:
                raise ValueError(f"{name} must not be empty")
        if entity_type not in VALID_ENTITY_TYPES:
            logger.warning("Recording provenance for unknown entity type %r", entity_type)

        timestamp = datetime.now(timezone.utc).replace(microsecond=0).isoformat()
        data_hash = compute_hash(data)

        with self._lock:
            entry = ProvenanceEntry(
                sequence=len(self._entries),
                entity_type=entity_type,
                entity_id=entity_id,
                action=action,
                data_hash=data_hash,
                parent_hash=self._entries[-1].hash_value if self._entries else self._genesis,
                hash_value="",
                timestamp=timestamp,
                metadata=dict(metadata or {}),
            )
            entry.hash_value = entry.link_hash()
            self._entries.append(entry)
            self._by_entity.setdefault(f"{entity_type}:{entity_id}", []).append(entry)

        logger.debug(
            "Provenance entry %d: %s/%s hash=%s",
            entry.sequence, entity_type, entity_id, entry.hash_value[:16],
        )
        return entry

    def verify_chain(self) -> bool:
        """Return True if every entry's parent link and link hash hold."""
        with self._lock:
            entries = list(self._entries)

        expected_parent = self._genesis
        for entry in entries:
            if entry.parent_hash != expected_parent or entry.link_hash() != entry.hash_value:
                logger.warning("Provenance chain broken at entry %d", entry.sequence)
                return False
            expected_parent = entry.hash_value
        return True

    def get_entries(
        self,
        entity_type: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[ProvenanceEntry]:
        """Return entries, optionally filtered by type and capped to the most recent."""
        with self._lock:
            entries = list(self._entries)
        if entity_type:
            entries = [e for e in entries if e.entity_type == entity_type]
        if limit is not None and limit > 0:
            entries = entries[-limit:]
        return entries

    def get_entries_for_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> List[ProvenanceEntry]:
        with self._lock:
            return list(self._by_entity.get(f"{entity_type}:{entity_id}", []))

    @property
    def genesis_hash(self) -> str:
        return self._genesis

    @property
    def last_hash(self) -> str:
        with self._lock:
            return self._entries[-1].hash_value if self._entries else self._genesis

    @property
    def entry_count(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.entry_count


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_tracker_instance: Optional[ProvenanceTracker] = None
_tracker_lock = threading.Lock()


def get_provenance_tracker() -> ProvenanceTracker:
    """Return the process-wide ProvenanceTracker, creating it on first use."""
    global _tracker_instance
    if _tracker_instance is None:
        with _tracker_lock:
            if _tracker_instance is None:
                from carbon_impact.config import get_config

                _tracker_instance = ProvenanceTracker(get_config().genesis_hash)
    return _tracker_instance


def reset_provenance_tracker() -> None:
    global _tracker_instance
    with _tracker_lock:
        _tracker_instance = None


__all__ = [
    "DEFAULT_GENESIS",
    "VALID_ENTITY_TYPES",
    "compute_hash",
    "ProvenanceEntry",
    "ProvenanceTracker",
    "get_provenance_tracker",
    "reset_provenance_tracker",
]
