import os
import re
from contextlib import ExitStack, contextmanager
from typing import Iterable, Iterator

from filelock import FileLock

from app.config import settings

_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]")


def lock_path(name: str) -> str:
    os.makedirs(settings.LOCK_DIR, exist_ok=True)
    return os.path.join(settings.LOCK_DIR, f"{_UNSAFE.sub('_', name)}.lock")


@contextmanager
def named_locks(names: Iterable[str], timeout: float = None) -> Iterator[None]:
    """
    Hold an inter-process file lock for every name until the block exits.

    Locks are taken in sorted order so two callers that need overlapping sets
    cannot deadlock. Raises ``filelock.Timeout`` if any lock cannot be taken
    within ``timeout`` seconds; locks already held are released.

    SQLite ignores ``SELECT ... FOR UPDATE``, so these locks are what serialises
    concurrent writers there; on server databases they sit in front of the row locks.
    """
    timeout = settings.LOCK_TIMEOUT_SECONDS if timeout is None else timeout
    with ExitStack() as stack:
        for name in sorted(set(names)):
            lock = FileLock(lock_path(name))
            stack.enter_context(lock.acquire(timeout=timeout))
        yield
