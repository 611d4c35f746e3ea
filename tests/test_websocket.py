"""Tests for md2html.server.websocket — subscriber registry and fan-out."""

from __future__ import annotations

import asyncio

import pytest

from md2html.server.websocket import Notifier, SubscriberRegistry


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeSubscriber:
    """Records frames; optionally fails or stalls on send."""

    def __init__(self, fail: bool = False, gate: asyncio.Event | None = None) -> None:
        self.fail = fail
        self.gate = gate
        self.received: list[str] = []
        self.closed = False

    async def send_text(self, data: str) -> None:
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RuntimeError("Cannot call 'send' once a close message has been sent.")
        self.received.append(data)

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        self.closed = True


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestSubscriberRegistry:
    """Membership operations."""

    def test_register_and_snapshot(self) -> None:
        registry = SubscriberRegistry()
        a, b = FakeSubscriber(), FakeSubscriber()
        registry.register(a)
        registry.register(b)

        assert len(registry) == 2
        assert a in registry
        assert set(map(id, registry.snapshot())) == {id(a), id(b)}

    def test_register_twice_keeps_one_entry(self) -> None:
        registry = SubscriberRegistry()
        a = FakeSubscriber()
        registry.register(a)
        registry.register(a)
        assert len(registry) == 1

    def test_unregister(self) -> None:
        registry = SubscriberRegistry()
        a = FakeSubscriber()
        registry.register(a)

        assert registry.unregister(a) is True
        assert a not in registry
        assert registry.unregister(a) is False

    def test_snapshot_is_detached(self) -> None:
        registry = SubscriberRegistry()
        a = FakeSubscriber()
        registry.register(a)
        snapshot = registry.snapshot()
        registry.unregister(a)
        assert snapshot == (a,)
        assert registry.snapshot() == ()


# ---------------------------------------------------------------------------
# Notifier
# ---------------------------------------------------------------------------


class TestNotifier:
    """Best-effort fan-out."""

    @pytest.mark.asyncio
    async def test_no_subscribers(self) -> None:
        notifier = Notifier(SubscriberRegistry())
        assert await notifier.notify_all() == 0

    @pytest.mark.asyncio
    async def test_every_subscriber_gets_one_reload(self) -> None:
        registry = SubscriberRegistry()
        subs = [FakeSubscriber() for _ in range(3)]
        for sub in subs:
            registry.register(sub)

        delivered = await Notifier(registry).notify_all()

        assert delivered == 3
        assert all(sub.received == ["reload"] for sub in subs)

    @pytest.mark.asyncio
    async def test_failed_subscriber_removed_others_notified(self) -> None:
        registry = SubscriberRegistry()
        good, bad, other = FakeSubscriber(), FakeSubscriber(fail=True), FakeSubscriber()
        for sub in (good, bad, other):
            registry.register(sub)

        delivered = await Notifier(registry).notify_all()

        assert delivered == 2
        assert good.received == ["reload"]
        assert other.received == ["reload"]
        assert bad not in registry
        assert bad.closed
        assert len(registry) == 2

    @pytest.mark.asyncio
    async def test_register_during_fan_out(self) -> None:
        registry = SubscriberRegistry()
        gate = asyncio.Event()
        slow = FakeSubscriber(gate=gate)
        registry.register(slow)
        notifier = Notifier(registry)

        in_flight = asyncio.create_task(notifier.notify_all())
        await asyncio.sleep(0)
        late = FakeSubscriber()
        registry.register(late)
        gate.set()
        assert await in_flight == 1

        assert slow.received == ["reload"]
        assert late.received == []

        assert await notifier.notify_all() == 2
        assert slow.received == ["reload", "reload"]
        assert late.received == ["reload"]

    @pytest.mark.asyncio
    async def test_concurrent_calls_do_not_overlap(self) -> None:
        registry = SubscriberRegistry()
        sub = FakeSubscriber()
        registry.register(sub)
        notifier = Notifier(registry)

        results = await asyncio.gather(notifier.notify_all(), notifier.notify_all())

        assert results == [1, 1]
        assert sub.received == ["reload", "reload"]

    @pytest.mark.asyncio
    async def test_custom_message(self) -> None:
        registry = SubscriberRegistry()
        sub = FakeSubscriber()
        registry.register(sub)
        await Notifier(registry, message="refresh").notify_all()
        assert sub.received == ["refresh"]
