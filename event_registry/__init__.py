"""Top-level package for the in-process event registry.

This package provides a synchronous publish/subscribe registry with
cancellable subscriptions, fire-once handlers, future-based single-shot
subscriptions and a subscribe-only view for handing to consumers.  The
owner of a registry keeps it private and is the only party able to emit.

The code here is intentionally small: the focus is on precise dispatch
semantics when handlers subscribe or cancel during an active delivery
pass, not on throughput.
"""

from .config import RegistryConfig
from .handle import SubscriptionHandle
from .monitors import DeliveryRecorder
from .registry import EmitTable, EventRegistry
from .source import EventSource, WithEventEmitter
from .types import (
    EventRegistryError,
    Once,
    Plain,
    Subscription,
    Token,
    UnknownEventError,
    is_once,
    once,
)
from .vocabulary import resolve_event_names
