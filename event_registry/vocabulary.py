"""Resolution of a host's declared event vocabulary.

A vocabulary may be a class whose public methods name the events (their
signatures document the handler signatures), an ``Enum`` whose members
are the event names, any iterable or mapping of names, or ``None`` for
an open vocabulary.
"""

from __future__ import annotations

import enum
import inspect
from collections.abc import Hashable, Iterable, Mapping
from typing import Any

from .types import EventName


def _class_event_names(cls: type) -> list[str]:
    names: list[str] = []
    # Walk base classes first so inherited events keep their declared order.
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, member in vars(klass).items():
            if name.startswith("_") or name in names:
                continue
            if inspect.isfunction(member):
                names.append(name)
    return names


def resolve_event_names(events: Any) -> tuple[EventName, ...] | None:
    """Resolve ``events`` into an ordered tuple of event names.

    Args:
        events: The declared vocabulary, or ``None`` for an open one.

    Returns:
        The event names in declaration order, or ``None`` when the
        vocabulary is open.

    Raises:
        TypeError: If ``events`` is a bare string or contains unhashable
            names.
        ValueError: If the same name is declared twice.
    """
    if events is None:
        return None

    if isinstance(events, (str, bytes)):
        raise TypeError(
            "Event vocabulary must be a collection of names, not a single string"
        )

    if isinstance(events, type):
        if issubclass(events, enum.Enum):
            candidates: Iterable[Any] = list(events)
        else:
            candidates = _class_event_names(events)
    elif isinstance(events, Mapping):
        candidates = list(events.keys())
    elif isinstance(events, Iterable):
        candidates = list(events)
    else:
        raise TypeError(f"Unsupported event vocabulary: {events!r}")

    names: list[EventName] = []
    seen: set[EventName] = set()
    for name in candidates:
        if not isinstance(name, Hashable):
            raise TypeError(f"Event name {name!r} is not hashable")
        if name in seen:
            raise ValueError(f"Duplicate event name {name!r}")
        seen.add(name)
        names.append(name)
    return tuple(names)


def emitter_attribute_names(names: Iterable[EventName]) -> list[str]:
    """Return the names that can be exposed as ``emit.<name>`` attributes."""
    return [
        name
        for name in names
        if isinstance(name, str) and name.isidentifier() and not name.startswith("_")
    ]
