"""Tests for md2html.server.cache — the shared rendered document."""

from __future__ import annotations

import threading

from md2html.server.cache import ReadWriteLock, RenderCache


class TestRenderCache:
    """Basic read/write behaviour."""

    def test_initial_document(self) -> None:
        cache = RenderCache(b"<p>first</p>")
        assert cache.read() == b"<p>first</p>"
        assert cache.version == 1

    def test_empty_cache(self) -> None:
        cache = RenderCache()
        assert cache.read() == b""
        assert cache.version == 0

    def test_write_replaces(self) -> None:
        cache = RenderCache(b"old")
        before = cache.updated_at
        cache.write(b"new")
        assert cache.read() == b"new"
        assert cache.version == 2
        assert cache.updated_at >= before

    def test_write_copies_mutable_input(self) -> None:
        buf = bytearray(b"abc")
        cache = RenderCache()
        cache.write(buf)
        buf[0] = ord("z")
        assert cache.read() == b"abc"


class TestConcurrency:
    """Readers racing a writer only ever see complete documents."""

    def test_no_torn_reads(self) -> None:
        documents = [bytes([65 + i]) * 4096 for i in range(20)]
        cache = RenderCache(documents[0])
        seen: list[bytes] = []
        seen_lock = threading.Lock()
        done = threading.Event()

        def reader() -> None:
            while not done.is_set():
                value = cache.read()
                with seen_lock:
                    seen.append(value)

        readers = [threading.Thread(target=reader) for _ in range(4)]
        for t in readers:
            t.start()
        for doc in documents[1:]:
            cache.write(doc)
        done.set()
        for t in readers:
            t.join(timeout=5)

        assert seen
        assert all(value in documents for value in seen)
        assert cache.read() == documents[-1]

    def test_readers_share_lock(self) -> None:
        lock = ReadWriteLock()
        inside = threading.Barrier(2, timeout=5)

        def reader() -> None:
            with lock.read_lock():
                # Both readers must be inside at once for the barrier to pass
                inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)
        assert not inside.broken

    def test_writer_excludes_readers(self) -> None:
        lock = ReadWriteLock()
        events: list[str] = []
        writer_in = threading.Event()

        def reader() -> None:
            writer_in.wait(timeout=5)
            with lock.read_lock():
                events.append("read")

        t = threading.Thread(target=reader)
        t.start()
        with lock.write_lock():
            writer_in.set()
            t.join(timeout=0.2)
            events.append("write")
        t.join(timeout=5)
        assert events == ["write", "read"]
