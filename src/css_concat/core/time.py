import time
import uuid


def monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


def new_run_id() -> str:
    return uuid.uuid4().hex[:12]
