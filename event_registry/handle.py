"""Cancellation handles returned by the registry's subscribe operations."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from .types import EventName

if TYPE_CHECKING:
    from .registry import EventRegistry


class SubscriptionHandle:
    """Undo one subscription, or a batch of subscriptions created together.

    The handle is a zero-argument callable.  Calling it (or ``cancel()``)
    removes every governed subscription that is still registered and
    silently skips the rest, so it may be called any number of times,
    including from inside a handler that is currently being dispatched.

    Example:
        cancel = registry.on("saved", on_saved)
        ...
        cancel()

        with registry.on("saved", on_saved):
            registry.emit("saved", doc)
    """

    __slots__ = ("_registry", "_keys")

    def __init__(
        self,
        registry: EventRegistry,
        keys: Iterable[tuple[EventName, int]] = (),
    ) -> None:
        self._registry = registry
        self._keys: tuple[tuple[EventName, int], ...] = tuple(keys)

    @classmethod
    def combine(cls, handles: Iterable[SubscriptionHandle]) -> SubscriptionHandle:
        """Merge handles from the same registry into one batch handle."""
        handles = list(handles)
        if not handles:
            raise ValueError("combine() needs at least one handle")
        registry = handles[0]._registry
        if any(handle._registry is not registry for handle in handles):
            raise ValueError("Cannot combine handles from different registries")
        return cls(registry, (key for handle in handles for key in handle._keys))

    @property
    def ids(self) -> tuple[int, ...]:
        """Subscription ids governed by this handle, in creation order."""
        return tuple(sub_id for _, sub_id in self._keys)

    @property
    def active(self) -> bool:
        """True while at least one governed subscription is registered."""
        return any(
            self._registry._is_registered(event_name, sub_id)
            for event_name, sub_id in self._keys
        )

    def cancel(self) -> None:
        for event_name, sub_id in self._keys:
            self._registry._remove(event_name, sub_id)

    def __call__(self) -> None:
        self.cancel()

    def __enter__(self) -> SubscriptionHandle:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel()

    def __repr__(self) -> str:
        state = "active" if self.active else "cancelled"
        return f"<SubscriptionHandle ids={list(self.ids)} {state}>"
