"""Tests for snapshot publication and epochs."""

import threading

from llmdb import store
from llmdb.store import SnapshotStore


class TestSnapshotStore:
    """Copy-on-write publication with a monotonically increasing epoch."""

    def test_starts_empty(self):
        fresh = SnapshotStore()
        assert fresh.current() is None
        assert fresh.epoch() == 0

    def test_publish_assigns_epoch(self, catalog_snapshot):
        fresh = SnapshotStore()
        first = fresh.publish(catalog_snapshot)
        second = fresh.publish(catalog_snapshot)

        assert (first.meta.epoch, second.meta.epoch) == (1, 2)
        assert fresh.current() is second
        assert fresh.epoch() == 2
        # The input snapshot is never mutated.
        assert catalog_snapshot.meta.epoch is None

    def test_clear_keeps_epoch_counter(self, catalog_snapshot):
        fresh = SnapshotStore()
        fresh.publish(catalog_snapshot)
        fresh.clear()

        assert fresh.current() is None
        assert fresh.publish(catalog_snapshot).meta.epoch == 2

    def test_concurrent_publishers_get_distinct_epochs(self, catalog_snapshot):
        fresh = SnapshotStore()
        epochs = []
        lock = threading.Lock()

        def publish():
            published = fresh.publish(catalog_snapshot)
            with lock:
                epochs.append(published.meta.epoch)

        threads = [threading.Thread(target=publish) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(epochs) == list(range(1, 17))
        assert fresh.current().meta.epoch in epochs

    def test_readers_see_whole_snapshots(self, catalog_snapshot):
        fresh = SnapshotStore()
        fresh.publish(catalog_snapshot)
        seen = fresh.current()
        fresh.publish(catalog_snapshot)

        # A reference taken before a reload stays internally consistent.
        assert seen.meta.epoch == 1
        assert len(seen.models_by_key) == len(catalog_snapshot.models_by_key)


def test_module_level_store(catalog_snapshot):
    before = store.epoch()
    published = store.publish(catalog_snapshot)

    assert store.current() is published
    assert store.epoch() == before + 1
    store.clear()
    assert store.current() is None
