"""Unit tests for the scratch object pool."""

import threading

from fieldlog import Fields, ScratchPool, fields_pool


def test_get_creates_instance_when_empty():
    pool = ScratchPool(Fields)
    item = pool.get()
    assert isinstance(item, Fields)
    assert len(pool) == 0


def test_put_then_get_reuses_instance():
    pool = ScratchPool(Fields)
    item = pool.get()
    item["msg"] = "hello"
    item.clear()
    pool.put(item)

    assert len(pool) == 1
    assert pool.get() is item


def test_returned_instances_are_not_cleaned_by_the_pool():
    """Clearing is the caller's job; the pool hands back whatever it was given."""
    pool = ScratchPool(Fields)
    item = Fields({"stale": True})
    pool.put(item)

    assert pool.get() == {"stale": True}


def test_max_size_bounds_idle_instances():
    pool = ScratchPool(Fields, max_size=2)
    for _ in range(5):
        pool.put(Fields())
    assert len(pool) == 2


def test_concurrent_get_and_put():
    pool = ScratchPool(Fields)
    errors = []

    def worker():
        try:
            for i in range(200):
                item = pool.get()
                item["i"] = i
                item.clear()
                pool.put(item)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert 1 <= len(pool) <= 16
    assert all(pool.get() == {} for _ in range(len(pool)))


def test_shared_pool_holds_fields():
    assert isinstance(fields_pool.get(), Fields)
