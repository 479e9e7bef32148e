import threading
from dataclasses import dataclass
from typing import Any

from zaplog.pool import Pool


@dataclass
class PooledValue:
    value: Any


def test_new():
    pool = Pool(lambda: PooledValue("new"))
    for _ in range(1_000):
        pool.put(PooledValue("test_new"))

    for _ in range(10):
        x = pool.get()
        try:
            assert x.value == "test_new"
        finally:
            pool.put(x)

    for _ in range(1_000):
        pool.get()

    assert pool.get().value == "new"


def test_get_returns_same_object_after_put():
    pool = Pool(lambda: PooledValue(0))
    first = pool.get()
    pool.put(first)
    assert pool.get() is first


def test_concurrent_use():
    created = []
    lock = threading.Lock()

    def factory():
        item = PooledValue(-1)
        with lock:
            created.append(item)
        return item

    pool = Pool(factory)

    def work(i):
        x = pool.get()
        try:
            if x.value >= -1:
                x.value = i
        finally:
            pool.put(x)

    threads = [threading.Thread(target=work, args=(i,)) for i in range(100)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert 1 <= len(created) <= 100
    drained = [pool.get() for _ in created]
    assert {id(item) for item in drained} == {id(item) for item in created}
    assert all(item.value in range(100) for item in drained)

    fresh = pool.get()
    assert fresh.value == -1
    assert len(created) == len(drained) + 1