"""Stage ordering for one genome tick."""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Tuple

# Kinetics read the pre-tick map; receptors see committed + pending; the brain
# runs on the signals collected this tick.
PIPELINE_ORDER: Tuple[str, ...] = (
    "kinetics",
    "sensing",
    "commit",
    "brain",
)

# The context is duck-typed to avoid import cycles with the genome package.
Step = Callable[[Any], None]


class Pipeline:
    """Executes named steps in a fixed, explicit order."""

    def __init__(self, handlers: Dict[str, Step], order: Iterable[str] = PIPELINE_ORDER) -> None:
        self.handlers = handlers
        self.order = tuple(order)
        unknown = set(handlers) - set(self.order)
        if unknown:
            raise ValueError(f"Handlers without a pipeline slot: {sorted(unknown)}")

    def run(self, context: Any) -> None:
        for name in self.order:
            handler = self.handlers.get(name)
            if handler:
                handler(context)


__all__ = ["PIPELINE_ORDER", "Pipeline", "Step"]
