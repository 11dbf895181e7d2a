from __future__ import annotations
import time
from datetime import datetime, timezone


def now_ms() -> int:
    """Current wall-clock instant in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def elapsed_ms(start: int, now: int) -> int:
    """Milliseconds from ``start`` to ``now`` (never negative)."""
    return max(now - start, 0)


def close_interval(start: int, now: int) -> tuple[int, int]:
    """
    Return ``(end, duration)`` for a timer stopped at ``now``.
    A clock that stepped backwards pins ``end`` to ``start`` so that
    ``duration == end - start`` always holds and is never negative.
    """
    end = max(now, start)
    return end, end - start
