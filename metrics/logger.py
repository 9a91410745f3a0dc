"""Deterministic JSONL trace writing and reading for TickData."""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import IO, Any, Dict, Iterable, Iterator, List, Mapping, Union

from .schema import TickData

TickLike = Union[TickData, Mapping[str, Any]]


def _normalize_tick(tick: TickLike) -> Dict[str, Any]:
    if isinstance(tick, TickData):
        return tick.to_ordered_dict()
    if is_dataclass(tick) and not isinstance(tick, type):
        return asdict(tick)
    if isinstance(tick, Mapping):
        return dict(tick)
    raise TypeError(f"Unsupported tick type: {type(tick)!r}")


def _canonical_json(payload: Mapping[str, Any]) -> str:
    # sort_keys enforces stable key order; separators remove whitespace noise.
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


class JsonlLogger:
    """Append-only JSONL writer with deterministic ordering."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._fh: IO[str] | None = None
        self.lines_written = 0

    def __enter__(self) -> "JsonlLogger":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        if self._fh is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = self.path.open("w", encoding="utf-8")

    def close(self) -> None:
        if self._fh:
            self._fh.close()
            self._fh = None

    def write(self, record: TickLike) -> None:
        if self._fh is None:
            self.open()
        assert self._fh is not None  # for type checkers
        self._fh.write(_canonical_json(_normalize_tick(record)) + "\n")
        self._fh.flush()
        self.lines_written += 1

    write_tick = write

    def write_all(self, records: Iterable[TickLike]) -> None:
        for record in records:
            self.write(record)


def read_jsonl(path: str | Path) -> Iterator[Dict[str, Any]]:
    with Path(path).open("r", encoding="utf-8") as fh:
        for line in fh:
            if line.strip():
                yield json.loads(line)


def load_trace(path: str | Path) -> List[Dict[str, Any]]:
    return list(read_jsonl(path))


__all__ = ["JsonlLogger", "_canonical_json", "_normalize_tick", "load_trace", "read_jsonl"]
