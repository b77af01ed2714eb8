from contextlib import contextmanager
import threading

@contextmanager
def dispatch_lock(lock: threading.Lock, timeout_sec: float = 5.0):
    """
    Single-writer guard: one action is applied to completion before the next.
    """
    acquired = lock.acquire(timeout=timeout_sec)
    if not acquired:
        raise RuntimeError("Could not acquire dispatch lock")
    try:
        yield
    finally:
        lock.release()
