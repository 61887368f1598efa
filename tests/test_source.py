"""Tests for the subscribe-only EventSource view and WithEventEmitter."""

from __future__ import annotations

import pytest

from event_registry import DeliveryRecorder, EventSource, WithEventEmitter, once


class TestEventSource:
    """Tests for EventRegistry.as_event_source()."""

    def test_view_has_no_emit(self, registry):
        """Consumers of the view cannot trigger events."""
        source = registry.as_event_source()
        assert isinstance(source, EventSource)
        assert not hasattr(source, "emit")
        assert not hasattr(source, "_registry")
        with pytest.raises(AttributeError):
            source.extra = 1

    def test_view_is_cached(self, registry):
        assert registry.as_event_source() is registry.as_event_source()

    def test_view_subscriptions_reach_registry(self, registry, recorder):
        """Subscriptions made through the view are delivered by the owner."""
        source = registry.as_event_source()
        source.on("foo", recorder.handler("on"))
        source.once("foo", recorder.handler("once"))
        source.subscribe(bar=recorder.handler("batch"))
        future = source.once_as_promise("foo")

        registry.emit.foo(42, True)
        registry.emit.foo(7, False)
        registry.emit.bar()

        assert recorder.calls("on") == [(42, True), (7, False)]
        assert recorder.calls("once") == [(42, True)]
        assert recorder.counts["batch"] == 1
        assert future.result() == (42, True)

    def test_view_cancel(self, registry, recorder):
        cancel = registry.as_event_source().on("bar", recorder.handler("h"))
        cancel()
        registry.emit("bar")
        assert recorder.counts == {}

    def test_view_exposes_event_names(self, registry):
        assert registry.as_event_source().event_names == ("foo", "bar")


class Document(WithEventEmitter):
    """Host that declares its events as a class attribute."""

    events = ("renamed", "closed")

    def __init__(self, name: str) -> None:
        super().__init__()
        self.name = name

    def rename(self, name: str) -> None:
        old, self.name = self.name, name
        self._emit.renamed(old, name)

    def close(self) -> None:
        self._emit("closed")


class TestWithEventEmitter:
    """Tests for the WithEventEmitter base class."""

    def test_subclass_emits_to_subscribers(self):
        recorder = DeliveryRecorder()
        doc = Document("draft.txt")
        doc.on("renamed", recorder.handler("renamed"))
        doc.rename("final.txt")
        assert recorder.calls("renamed") == [("draft.txt", "final.txt")]

    def test_subclass_supports_all_subscription_forms(self):
        recorder = DeliveryRecorder()
        doc = Document("a")
        doc.once("renamed", recorder.handler("once"))
        cancel = doc.subscribe({"closed": once(recorder.handler("closed"))})
        future = doc.once_as_promise("closed")

        doc.rename("b")
        doc.rename("c")
        doc.close()
        doc.close()

        assert recorder.counts == {"once": 1, "closed": 1}
        assert future.result() == ()
        assert not cancel.active

    def test_vocabulary_from_constructor(self):
        host = WithEventEmitter(["ping"])
        recorder = DeliveryRecorder()
        host.on("ping", recorder.handler("ping"))
        host._emit.ping()
        assert recorder.counts["ping"] == 1

    def test_unknown_event_rejected(self):
        with pytest.raises(KeyError):
            Document("a").on("opened", lambda: None)
