"""Subscription-only views over an :class:`EventRegistry`.

``EventSource`` is what a registry owner hands to consumers: it can
subscribe but cannot emit.  ``WithEventEmitter`` is a convenience base
class for hosts that want to expose the subscription methods directly on
themselves while keeping emit private.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
from collections.abc import Mapping
from typing import Any

from .config import RegistryConfig
from .handle import SubscriptionHandle
from .registry import EventRegistry
from .types import EventName, Handler, HandlerEntry


class EventSource:
    """Read-only, subscribe-only view of a registry."""

    __slots__ = ("__registry",)

    def __init__(self, registry: EventRegistry) -> None:
        self.__registry = registry

    @property
    def event_names(self) -> tuple[EventName, ...] | None:
        return self.__registry.event_names

    def on(self, event_name: EventName, handler: Handler) -> SubscriptionHandle:
        return self.__registry.on(event_name, handler)

    def once(self, event_name: EventName, handler: Handler) -> SubscriptionHandle:
        return self.__registry.once(event_name, handler)

    def once_as_promise(self, event_name: EventName) -> concurrent.futures.Future:
        return self.__registry.once_as_promise(event_name)

    def once_async(self, event_name: EventName) -> asyncio.Future:
        return self.__registry.once_async(event_name)

    def subscribe(
        self,
        handlers: Mapping[EventName, HandlerEntry] | None = None,
        /,
        **named_handlers: HandlerEntry,
    ) -> SubscriptionHandle:
        return self.__registry.subscribe(handlers, **named_handlers)

    def __repr__(self) -> str:
        return f"<EventSource events={self.event_names!r}>"


class WithEventEmitter:
    """Base class that makes its subclass an event source.

    Subclasses get the public subscription methods and a protected
    ``_emit`` for triggering their own events.

    Example:
        class Document(WithEventEmitter):
            events = ("renamed",)

            def rename(self, name: str) -> None:
                self.name = name
                self._emit.renamed(name)

        doc = Document()
        doc.on("renamed", print)
        doc.rename("draft.txt")
    """

    events: Any = None

    def __init__(self, events: Any = None, config: RegistryConfig | None = None) -> None:
        self._event_registry = EventRegistry(
            events if events is not None else type(self).events, config
        )
        self._emit = self._event_registry.emit

    def on(self, event_name: EventName, handler: Handler) -> SubscriptionHandle:
        return self._event_registry.on(event_name, handler)

    def once(self, event_name: EventName, handler: Handler) -> SubscriptionHandle:
        return self._event_registry.once(event_name, handler)

    def once_as_promise(self, event_name: EventName) -> concurrent.futures.Future:
        return self._event_registry.once_as_promise(event_name)

    def once_async(self, event_name: EventName) -> asyncio.Future:
        return self._event_registry.once_async(event_name)

    def subscribe(
        self,
        handlers: Mapping[EventName, HandlerEntry] | None = None,
        /,
        **named_handlers: HandlerEntry,
    ) -> SubscriptionHandle:
        return self._event_registry.subscribe(handlers, **named_handlers)
