from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from time import perf_counter
from typing import Any


class LogMode(str, Enum):
    LIVE = "live"
    DEBUG = "debug"
    TRACE = "trace"


class Cat(str, Enum):
    NAV = "NAV"
    REG = "REG"
    SCROLL = "SCROLL"
    RESOLVE = "RESOLVE"
    RAIL = "RAIL"
    PAGE = "PAGE"
    DIR = "DIR"
    STARTUP = "STARTUP"


@dataclass(frozen=True)
class InstrumentPolicy:
    mode: LogMode = LogMode.LIVE

    # Minimum seconds between lines sharing a rate-limit key.
    rate_limits_s: dict[str, float] = field(default_factory=dict)


class Counters(Counter):
    """Named event counts; snapshot() is what gets logged at the end of a run."""

    def inc(self, key: str, n: int = 1) -> None:
        self[key] += n

    def get(self, key: str, default: int = 0) -> int:
        return super().get(key, default)

    def snapshot(self) -> dict[str, int]:
        return dict(self)


# ctx keys that lead every line, in this order
_CTX_LEAD = ("prefix", "sec", "active", "y", "kind", "a")


def format_ctx(**ctx: Any) -> str:
    lead = [(k, ctx[k]) for k in _CTX_LEAD if ctx.get(k) is not None]
    rest = sorted((k, v) for k, v in ctx.items() if k not in _CTX_LEAD and v is not None)
    return " ".join(f"{k}={v}" for k, v in lead + rest)


def parse_log_mode(raw: str | None) -> LogMode:
    try:
        return LogMode((raw or "").lower())
    except ValueError:
        return LogMode.LIVE


_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class Emitter:
    """
    Category-tagged log emission shared by every tracker component.

    - emit_signal(): always logged, at the requested level
    - emit_diag():   only in debug/trace mode
    - emit_trace():  only in trace mode

    diag/trace lines given a `key=` listed in policy.rate_limits_s are
    dropped until that key's interval has passed.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        *,
        policy: InstrumentPolicy | None = None,
    ) -> None:
        self.logger = logger or logging.getLogger("alpha_nav")
        self.policy = policy or InstrumentPolicy()
        self.counters = Counters()
        self._last_emit: dict[str, float] = {}

    def _line(self, cat: Cat, msg: str, ctx: dict[str, Any]) -> str:
        c = format_ctx(**ctx)
        return f"[{cat.value}] {msg} :: {c}" if c else f"[{cat.value}] {msg}"

    def _allowed(self, key: str | None) -> bool:
        every_s = self.policy.rate_limits_s.get(key) if key else None
        if not every_s:
            return True
        now = perf_counter()
        last = self._last_emit.get(key)
        if last is not None and (now - last) < every_s:
            return False
        self._last_emit[key] = now
        return True

    def emit_signal(self, cat: Cat, msg: str, *, level: str = "info", **ctx: Any) -> None:
        self.logger.log(_LEVELS.get(level.lower(), logging.INFO), self._line(cat, msg, ctx))

    def emit_diag(self, cat: Cat, msg: str, *, key: str | None = None, **ctx: Any) -> None:
        if self.policy.mode is LogMode.LIVE or not self._allowed(key):
            return
        self.logger.debug(self._line(cat, msg, ctx))

    def emit_trace(self, cat: Cat, msg: str, *, key: str | None = None, **ctx: Any) -> None:
        if self.policy.mode is not LogMode.TRACE or not self._allowed(key):
            return
        self.logger.debug(self._line(cat, msg, ctx))
