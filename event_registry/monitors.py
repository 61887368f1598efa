"""Monitoring utilities for the event registry.

This module contains helper classes that subscribe to a registry and
record simple diagnostics.  They are used in tests to assert that
handlers ran in the expected order, with the expected arguments, and
the expected number of times.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass
class DeliveryRecorder:
    """Record every delivery made to the handlers it hands out.

    Each handler is identified by a label; deliveries are kept in the
    order they happened across all labels.

    Example:
        recorder = DeliveryRecorder()
        registry.on("saved", recorder.handler("first"))
        registry.on("saved", recorder.handler("second"))
        registry.emit("saved", "a.txt")
        assert recorder.labels == ["first", "second"]
    """

    deliveries: List[Tuple[str, Tuple[Any, ...]]] = field(default_factory=list)
    counts: Dict[str, int] = field(default_factory=dict)

    def handler(
        self, label: str, then: Callable[..., Any] | None = None
    ) -> Callable[..., Any]:
        """Return a handler that records under ``label``.

        ``then`` is called with the same arguments after recording, which
        lets tests subscribe or cancel from inside a dispatch.
        """

        def record(*args: Any) -> Any:
            self.deliveries.append((label, args))
            self.counts[label] = self.counts.get(label, 0) + 1
            if then is not None:
                return then(*args)
            return None

        record.__name__ = f"record_{label}"
        return record

    @property
    def labels(self) -> List[str]:
        return [label for label, _ in self.deliveries]

    def calls(self, label: str) -> List[Tuple[Any, ...]]:
        """Arguments of each delivery made to ``label``, in order."""
        return [args for name, args in self.deliveries if name == label]

    def reset(self) -> None:
        self.deliveries.clear()
        self.counts.clear()
