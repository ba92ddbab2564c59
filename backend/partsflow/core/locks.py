"""
Per-part critical sections for stock and reservation mutations.

Each part code maps to its own lock so that writers touching different parts
never contend. Multi-part operations acquire their locks in sorted order.
Locks are reentrant: a thread holding a part may call per-part operations on it.
"""
import threading
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List


class PartLockRegistry:

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.RLock] = {}

    def lock_for(self, part_code: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(part_code)
            if lock is None:
                lock = threading.RLock()
                self._locks[part_code] = lock
            return lock

    @contextmanager
    def hold(self, *part_codes: str) -> Iterator[None]:
        with self.hold_many(part_codes):
            yield

    @contextmanager
    def hold_many(self, part_codes: Iterable[str]) -> Iterator[None]:
        acquired: List[threading.RLock] = []
        try:
            for code in sorted(set(part_codes)):
                lock = self.lock_for(code)
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


_registry = PartLockRegistry()


def get_part_locks() -> PartLockRegistry:
    return _registry
