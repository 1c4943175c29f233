from __future__ import annotations

from contextlib import contextmanager
from typing import Any
import time

from .instrumentation import Cat, Emitter


@contextmanager
def phase_timer(
    emitter: Emitter | None,
    label: str,
    *,
    cat: Cat = Cat.NAV,
    ctx: dict[str, Any] | None = None,
):
    if emitter is None:
        raise RuntimeError("phase_timer requires an Emitter")
    start = time.perf_counter()
    merged_ctx: dict[str, Any] = {"a": label}
    if ctx:
        merged_ctx.update(ctx)
    emitter.emit_signal(cat, f"START phase: {label}", **merged_ctx)
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        merged_ctx["elapsed_s"] = round(elapsed, 3)
        if elapsed >= 60:
            mins = int(elapsed // 60)
            secs = int(elapsed % 60)
            emitter.emit_signal(cat, f"END phase: {label} ({mins}m {secs}s)", **merged_ctx)
        else:
            emitter.emit_signal(cat, f"END phase: {label} ({elapsed:.2f} seconds)", **merged_ctx)
