"""Type definitions and dataclasses for the event registry.

This module declares the records shared by the registry, its
cancellation handles and the batch ``subscribe`` entry point.  Entries
of a ``subscribe`` mapping form a tagged variant: ``Plain(handler)``
subscribes normally and ``Once(handler)`` subscribes for one delivery.
A bare callable counts as ``Plain``; the two are told apart by class,
never by inspecting the handler itself.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any, Union

# A handler receives the positional arguments of the event.  Its return
# value is ignored unless it is awaitable.
Handler = Callable[..., Any]

# Event names are strings or opaque tokens (``Token`` instances, enum
# members, or any other hashable object with identity semantics).
EventName = Hashable


class EventRegistryError(Exception):
    """Base class for errors raised by the event registry."""


class UnknownEventError(EventRegistryError, KeyError):
    """Raised when an event name is not part of the declared vocabulary."""

    def __init__(self, event_name: EventName, known: tuple[EventName, ...] = ()):
        self.event_name = event_name
        self.known = known
        super().__init__(event_name)

    def __str__(self) -> str:
        if self.known:
            names = ", ".join(repr(name) for name in self.known)
            return f"Unknown event {self.event_name!r}; expected one of: {names}"
        return f"Unknown event {self.event_name!r}"


class Token:
    """An opaque, unique event name.

    Two tokens are never equal, even with the same description, and a
    token is never equal to a string.  The description only appears in
    ``repr()`` output.
    """

    __slots__ = ("description",)

    def __init__(self, description: str = "") -> None:
        self.description = description

    def __repr__(self) -> str:
        return f"Token({self.description!r})"


@dataclass(frozen=True, eq=False)
class Subscription:
    """One registration of one handler to one event name.

    Attributes:
        id: Identifier unique within the owning registry's lifetime.
        event_name: The event this subscription listens to.
        handler: The callable invoked on dispatch.  For fire-once
            subscriptions this is the self-cancelling wrapper.
    """

    id: int
    event_name: EventName
    handler: Handler


@dataclass(frozen=True)
class Plain:
    """Handler-map entry that subscribes normally."""

    handler: Handler


@dataclass(frozen=True)
class Once:
    """Handler-map entry that subscribes for a single delivery."""

    handler: Handler


HandlerEntry = Union[Handler, Plain, Once, None]


def once(handler: Handler) -> Once:
    """Mark ``handler`` for fire-once delivery in a ``subscribe`` mapping.

    Example:
        registry.subscribe({
            "opened": on_opened,
            "closed": once(on_first_close),
        })
    """
    if not callable(handler):
        raise TypeError(f"once() expects a callable, got {type(handler).__name__}")
    return Once(handler)


def is_once(value: Any) -> bool:
    """Return True if ``value`` was produced by :func:`once`."""
    return isinstance(value, Once)
