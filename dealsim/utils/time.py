import time
import uuid


def now_ms() -> int:
    return int(time.time() * 1000)


def new_id() -> str:
    """Short random id for log entries and state snapshots."""
    return uuid.uuid4().hex[:8] + "-" + format(now_ms(), "x")
