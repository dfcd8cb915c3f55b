"""Per-order serialization of mutating commands.

Only one writer may work on a given order at a time. Every mutating command
is pushed through ``process_for_order`` which holds the order's lock for the
whole unit of work, including the post-commit event dispatch. Reads never
take a lock.

Locks live in the registry only while some thread holds or waits on them, so
unknown or deleted order ids leave nothing behind.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from protean.utils.globals import current_domain

SEQUENCE_LOCK_KEY = "__order_sequence__"


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


_locks: dict[str, _Entry] = {}
_registry_lock = threading.Lock()


def _acquire_entry(key: str) -> _Entry:
    with _registry_lock:
        entry = _locks.get(key)
        if entry is None:
            entry = _locks[key] = _Entry()
        entry.users += 1
        return entry


def _release_entry(key: str, entry: _Entry) -> None:
    with _registry_lock:
        entry.users -= 1
        if entry.users == 0 and _locks.get(key) is entry:
            del _locks[key]


@contextmanager
def order_lock(order_id: str) -> Iterator[None]:
    key = str(order_id)
    entry = _acquire_entry(key)
    try:
        with entry.lock:
            yield
    finally:
        _release_entry(key, entry)


def is_locked(order_id: str) -> bool:
    with _registry_lock:
        entry = _locks.get(str(order_id))
        return entry is not None and entry.lock.locked()


def active_lock_count() -> int:
    """Number of order ids currently held or waited on."""
    with _registry_lock:
        return len(_locks)


def process_for_order(order_id: str, command):
    """Process ``command`` synchronously while holding the order's lock."""
    with order_lock(order_id):
        return current_domain.process(command, asynchronous=False)


def process_new_order(command):
    """Process an order-creating command under the sequence lock."""
    with order_lock(SEQUENCE_LOCK_KEY):
        return current_domain.process(command, asynchronous=False)
