"""Hash utilities for TickData traces."""

from __future__ import annotations

import hashlib
from typing import Any, Iterable, Mapping, Union

from .logger import _canonical_json, _normalize_tick
from .schema import TickData

TickLike = Union[TickData, Mapping[str, Any]]


def tick_hash(tick: TickLike) -> str:
    """Return a deterministic hash for a single tick."""
    return hashlib.sha256(_canonical_json(_normalize_tick(tick)).encode("utf-8")).hexdigest()


class RunHash:
    """Accumulator for a full run; feeds on per-tick hashes."""

    def __init__(self) -> None:
        self._hasher = hashlib.sha256()
        self.ticks = 0

    def update(self, tick: TickLike) -> str:
        digest = tick_hash(tick)
        self._hasher.update(digest.encode("utf-8"))
        self.ticks += 1
        return digest

    def hexdigest(self) -> str:
        return self._hasher.hexdigest()


def trace_hash(ticks: Iterable[TickLike]) -> str:
    run_hash = RunHash()
    for tick in ticks:
        run_hash.update(tick)
    return run_hash.hexdigest()


__all__ = ["RunHash", "tick_hash", "trace_hash"]
