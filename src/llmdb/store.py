"""Process-wide holder for the published catalog snapshot.

Publication is copy-on-write: a build computes a complete
:class:`~llmdb.catalog.snapshot.Snapshot` off to the side and the store swaps
a single reference to it. Readers load that reference without locking and
always see one whole snapshot. Writers are serialized by a lock so epochs are
strictly increasing.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from llmdb.catalog.snapshot import Snapshot

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Holds at most one current snapshot and a publication epoch counter."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot: Optional[Snapshot] = None
        self._epoch = 0

    def publish(self, snapshot: Snapshot) -> Snapshot:
        """Stamp ``snapshot`` with the next epoch and make it current.

        Returns:
            The published snapshot (a copy of ``snapshot`` carrying its epoch).
        """
        with self._lock:
            self._epoch += 1
            published = snapshot.with_epoch(self._epoch)
            self._snapshot = published
        logger.info(
            "Published catalog snapshot epoch=%d (%d providers, %d models)",
            published.meta.epoch,
            len(published.providers_by_id),
            len(published.models_by_key),
        )
        return published

    def current(self) -> Optional[Snapshot]:
        return self._snapshot

    def epoch(self) -> int:
        """Epoch of the last publication; 0 before the first one."""
        return self._epoch

    def clear(self) -> None:
        """Drop the current snapshot; the epoch counter keeps increasing."""
        with self._lock:
            self._snapshot = None


_default_store = SnapshotStore()


def default_store() -> SnapshotStore:
    return _default_store


def publish(snapshot: Snapshot) -> Snapshot:
    return _default_store.publish(snapshot)


def current() -> Optional[Snapshot]:
    return _default_store.current()


def epoch() -> int:
    return _default_store.epoch()


def clear() -> None:
    _default_store.clear()


__all__ = ["SnapshotStore", "clear", "current", "default_store", "epoch", "publish"]
