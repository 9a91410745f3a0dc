"""Canonical per-tick record for traces, analysis, and the inspector."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

SCHEMA_VERSION = "1.0.0"


@dataclass
class TickData:
    """Single source of truth for analysis and UI."""

    schema_version: str = SCHEMA_VERSION
    tick: int = 0
    # Body state after the tick
    age: str = "BABY"
    alive: bool = True
    loci: Dict[str, int] = field(default_factory=dict)
    concentrations: Dict[str, float] = field(default_factory=dict)
    # What the genome did
    deltas: Dict[str, float] = field(default_factory=dict)
    firings: List[Dict[str, Any]] = field(default_factory=list)
    brain_output: Optional[List[float]] = None
    # Scenario info
    scenario: str = ""
    genome_fingerprint: str = ""

    def to_ordered_dict(self) -> Dict[str, Any]:
        """Return a plain dict in schema order for deterministic serialization."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


__all__ = ["SCHEMA_VERSION", "TickData"]
