from __future__ import annotations

from typing import Awaitable, TypeVar

from css_concat.core import monotonic_ms

from .context import ConcatContext
from .events import EventType

T = TypeVar("T")


def format_duration_ms(ms: int) -> str:
    """Return a short human-readable duration string."""
    if ms < 1000:
        return f"{ms} ms"
    return f"{ms / 1000:.2f} s"


async def run_stage(ctx: ConcatContext, stage_id: str, work: Awaitable[T]) -> T:
    """
    Await one stage of a run with timing and logging around it.

    Failures are logged and re-raised untouched.
    """
    log = ctx.stage_logger(stage_id)
    t0 = monotonic_ms()

    ctx.emit(EventType.STAGE_START, stage=stage_id)
    log.debug("Stage starting")

    try:
        result = await work
    except Exception as e:
        duration = monotonic_ms() - t0
        ctx.emit(
            EventType.STAGE_FAILED,
            stage=stage_id,
            duration_ms=duration,
            exc_type=type(e).__name__,
            message=str(e),
        )
        log.error(
            "Stage failed",
            duration_ms=duration,
            duration=format_duration_ms(duration),
            error=str(e),
        )
        raise

    duration = monotonic_ms() - t0
    ctx.emit(EventType.STAGE_SUCCESS, stage=stage_id, duration_ms=duration)
    log.info(
        "Stage succeeded",
        duration_ms=duration,
        duration=format_duration_ms(duration),
    )
    return result
