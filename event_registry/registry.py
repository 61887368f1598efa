"""A synchronous publish/subscribe registry.

Subscribers register handlers for specific event names via ``on()``,
``once()``, ``once_as_promise()`` or the batch ``subscribe()``.  Each
call returns a :class:`SubscriptionHandle` that cancels what it created.
When the owner emits an event via ``emit()``, every handler registered
for that event name when the dispatch began is invoked synchronously,
in registration order, with the emitted arguments.

Handlers may subscribe or cancel (themselves or siblings) while a
dispatch is in progress.  Dispatch iterates over a snapshot taken when
it starts, so handlers added during the pass wait for the next emit,
while handlers cancelled during the pass are skipped when their turn
comes.

Exceptions raised by handlers propagate to the caller of ``emit()``
unless the registry is configured to isolate them.  Awaitables returned
by handlers are scheduled on the running event loop and never awaited
by ``emit()``.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import functools
import inspect
import itertools
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .config import RegistryConfig
from .handle import SubscriptionHandle
from .types import (
    EventName,
    Handler,
    HandlerEntry,
    Once,
    Plain,
    Subscription,
    UnknownEventError,
)
from .vocabulary import emitter_attribute_names, resolve_event_names

if TYPE_CHECKING:
    from .source import EventSource

logger = logging.getLogger(__name__)


class EmitTable:
    """Dispatch entry point of a registry.

    Call it with an event name, ``emit("saved", doc)``, or use the
    per-event attribute built for every declared identifier-like name,
    ``emit.saved(doc)``.
    """

    def __init__(self, registry: EventRegistry, names: tuple[EventName, ...] | None) -> None:
        self._registry = registry
        for name in emitter_attribute_names(names or ()):
            setattr(self, name, functools.partial(registry._dispatch, name))

    def __call__(self, event_name: EventName, *args: Any) -> None:
        self._registry._dispatch(event_name, *args)


class EventRegistry:
    """Owns the subscriptions for one set of events and dispatches to them.

    Keep the registry private and hand out :meth:`as_event_source` to
    consumers, so only the owner can emit.

    Example:
        class DocumentEvents(Protocol):
            def saved(self, path: str, size: int) -> None: ...
            def closed(self) -> None: ...

        registry = EventRegistry(DocumentEvents)
        registry.on("saved", lambda path, size: print(path, size))
        registry.emit.saved("notes.txt", 42)
    """

    def __init__(self, events: Any = None, config: RegistryConfig | None = None) -> None:
        """Initialize the registry.

        Args:
            events: Declared event vocabulary (see
                :func:`resolve_event_names`), or None to accept any name.
            config: Behavioural switches; defaults to ``RegistryConfig()``.
        """
        self.config = config or RegistryConfig()
        self._event_names = resolve_event_names(events)
        self._declared = frozenset(self._event_names or ())
        # Map of event name -> {subscription id -> subscription}, in
        # registration order.
        self._subscriptions: dict[EventName, dict[int, Subscription]] = {
            name: {} for name in self._event_names or ()
        }
        self._next_id = itertools.count()
        self._pending_tasks: set[asyncio.Future] = set()
        self._source: EventSource | None = None
        self.emit = EmitTable(self, self._event_names)

    @property
    def event_names(self) -> tuple[EventName, ...] | None:
        """Declared event names, or None for an open vocabulary."""
        return self._event_names

    def as_event_source(self) -> EventSource:
        """Return the subscription-only view of this registry."""
        if self._source is None:
            from .source import EventSource

            self._source = EventSource(self)
        return self._source

    # ------------------------------------------------------------------
    # Subscribing
    # ------------------------------------------------------------------

    def on(self, event_name: EventName, handler: Handler) -> SubscriptionHandle:
        """Register ``handler`` for ``event_name``.

        Args:
            event_name: Name of the event to subscribe to.
            handler: Callable invoked with the emitted arguments.

        Returns:
            A handle that cancels the subscription.
        """
        self._check_event_name(event_name)
        if not callable(handler):
            raise TypeError(f"Handler for {event_name!r} must be callable")

        subscription = Subscription(next(self._next_id), event_name, handler)
        self._subscriptions.setdefault(event_name, {})[subscription.id] = subscription
        logger.debug("Subscribed %d to %r", subscription.id, event_name)
        return SubscriptionHandle(self, [(event_name, subscription.id)])

    def once(self, event_name: EventName, handler: Handler) -> SubscriptionHandle:
        """Register ``handler`` for the next delivery of ``event_name`` only.

        The subscription is removed before ``handler`` runs, so it is gone
        even if the handler raises, and a re-entrant emit from inside the
        handler cannot reach it again.
        """
        if not callable(handler):
            raise TypeError(f"Handler for {event_name!r} must be callable")

        handle: SubscriptionHandle | None = None

        @functools.wraps(handler)
        def fire_once(*args: Any) -> Any:
            handle.cancel()
            return handler(*args)

        handle = self.on(event_name, fire_once)
        return handle

    def once_as_promise(self, event_name: EventName) -> concurrent.futures.Future:
        """Return a future resolved with the arguments of the next emit.

        The future is resolved synchronously during that emit with the
        argument tuple.  It has no timeout and never fails on its own.
        Cancelling the future before the event fires drops the
        subscription.
        """
        future: concurrent.futures.Future = concurrent.futures.Future()

        def resolve(*args: Any) -> None:
            if not future.cancelled():
                future.set_result(args)

        handle = self.once(event_name, resolve)

        def drop_if_cancelled(done: concurrent.futures.Future) -> None:
            if done.cancelled():
                handle.cancel()

        future.add_done_callback(drop_if_cancelled)
        return future

    def once_async(self, event_name: EventName) -> asyncio.Future:
        """Like :meth:`once_as_promise`, awaitable on the running loop.

        Must be called while an event loop is running.  The subscription
        is made immediately, not when the result is first awaited, and
        the future is resolved during the emit that delivers the event.
        """
        future = asyncio.get_running_loop().create_future()

        def resolve(*args: Any) -> None:
            if not future.done():
                future.set_result(args)

        handle = self.once(event_name, resolve)

        def drop_if_cancelled(done: asyncio.Future) -> None:
            if done.cancelled():
                handle.cancel()

        future.add_done_callback(drop_if_cancelled)
        return future

    def subscribe(
        self,
        handlers: Mapping[EventName, HandlerEntry] | None = None,
        /,
        **named_handlers: HandlerEntry,
    ) -> SubscriptionHandle:
        """Subscribe to several events at once.

        Each entry maps an event name to a handler, ``once(handler)``,
        ``Plain(handler)`` or None.  None entries are skipped.

        Example:
            cancel = registry.subscribe({
                "saved": on_saved,
                "closed": once(on_closed),
                "renamed": on_renamed if track_renames else None,
            })

        Returns:
            One handle that cancels every subscription created here.
        """
        entries: dict[EventName, HandlerEntry] = dict(handlers or {})
        entries.update(named_handlers)

        # Validate everything first so a bad entry leaves nothing behind.
        for event_name, entry in entries.items():
            if entry is None:
                continue
            self._check_event_name(event_name)
            target = entry.handler if isinstance(entry, (Once, Plain)) else entry
            if not callable(target):
                raise TypeError(f"Handler for {event_name!r} must be callable")

        created: list[SubscriptionHandle] = []
        for event_name, entry in entries.items():
            if entry is None:
                continue
            if isinstance(entry, Once):
                created.append(self.once(event_name, entry.handler))
            elif isinstance(entry, Plain):
                created.append(self.on(event_name, entry.handler))
            else:
                created.append(self.on(event_name, entry))

        return SubscriptionHandle(
            self, [key for handle in created for key in handle._keys]
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def subscription_count(self, event_name: EventName | None = None) -> int:
        """Number of live subscriptions for one event, or for all events."""
        if event_name is None:
            return sum(len(bucket) for bucket in self._subscriptions.values())
        self._check_event_name(event_name)
        return len(self._subscriptions.get(event_name, {}))

    def has_subscribers(self, event_name: EventName) -> bool:
        return self.subscription_count(event_name) > 0

    def clear(self, event_name: EventName | None = None) -> None:
        """Cancel every subscription for one event, or for all events."""
        if event_name is None:
            targets = list(self._subscriptions)
        else:
            self._check_event_name(event_name)
            targets = [event_name]
        for name in targets:
            bucket = self._subscriptions.get(name)
            if bucket:
                logger.debug("Clearing %d subscriptions from %r", len(bucket), name)
                bucket.clear()
            self._discard_if_empty(name)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _dispatch(self, event_name: EventName, *args: Any) -> None:
        self._check_event_name(event_name)
        bucket = self._subscriptions.get(event_name)
        if not bucket:
            return

        snapshot = list(bucket.values())
        if self.config.log_dispatch:
            logger.debug("Dispatching %r to %d handlers", event_name, len(snapshot))

        for subscription in snapshot:
            # Cancelled earlier in this pass.
            if not self._is_live(subscription):
                continue
            try:
                result = subscription.handler(*args)
            except Exception:
                if not self.config.isolate_handler_errors:
                    raise
                logger.exception(
                    "Handler %d for %r failed", subscription.id, event_name
                )
                continue
            if result is not None and inspect.isawaitable(result):
                self._schedule(subscription, result)

    def _schedule(self, subscription: Subscription, awaitable: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if self.config.close_orphan_coroutines and inspect.iscoroutine(awaitable):
                awaitable.close()
                logger.warning(
                    "Handler %d for %r returned a coroutine with no running "
                    "event loop; it was closed without running",
                    subscription.id,
                    subscription.event_name,
                )
            return

        task = asyncio.ensure_future(awaitable, loop=loop)
        self._pending_tasks.add(task)
        task.add_done_callback(functools.partial(self._task_done, subscription))

    def _task_done(self, subscription: Subscription, task: asyncio.Future) -> None:
        self._pending_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Async handler %d for %r failed: %r",
                subscription.id,
                subscription.event_name,
                exc,
                exc_info=exc,
            )

    # ------------------------------------------------------------------
    # Bookkeeping used by SubscriptionHandle
    # ------------------------------------------------------------------

    def _check_event_name(self, event_name: EventName) -> None:
        if (
            self._event_names is not None
            and self.config.strict_event_names
            and event_name not in self._subscriptions
        ):
            raise UnknownEventError(event_name, self._event_names)

    def _is_live(self, subscription: Subscription) -> bool:
        bucket = self._subscriptions.get(subscription.event_name)
        return bucket is not None and bucket.get(subscription.id) is subscription

    def _is_registered(self, event_name: EventName, sub_id: int) -> bool:
        return sub_id in self._subscriptions.get(event_name, {})

    def _remove(self, event_name: EventName, sub_id: int) -> None:
        bucket = self._subscriptions.get(event_name)
        if bucket is not None and bucket.pop(sub_id, None) is not None:
            logger.debug("Cancelled %d from %r", sub_id, event_name)
            self._discard_if_empty(event_name)

    def _discard_if_empty(self, event_name: EventName) -> None:
        # Declared names keep their bucket; it marks them as known.
        if event_name in self._declared:
            return
        bucket = self._subscriptions.get(event_name)
        if bucket is not None and not bucket:
            del self._subscriptions[event_name]
