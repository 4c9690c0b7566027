"""Tests for per-key locks."""

import asyncio

from cardindex.services.keyed_lock import KeyedLock


class TestKeyedLock:
    async def test_same_key_serialized(self) -> None:
        """Holders of one key never overlap."""
        locks = KeyedLock()
        events: list[str] = []

        async def worker(label: str) -> None:
            async with locks.hold("Forest"):
                events.append(f"{label}-start")
                await asyncio.sleep(0.01)
                events.append(f"{label}-end")

        await asyncio.gather(worker("a"), worker("b"))

        assert events == ["a-start", "a-end", "b-start", "b-end"]

    async def test_distinct_keys_overlap(self) -> None:
        """Different keys run concurrently."""
        locks = KeyedLock()
        both_inside = asyncio.Event()
        inside = 0

        async def worker(key: str) -> None:
            nonlocal inside
            async with locks.hold(key):
                inside += 1
                if inside == 2:
                    both_inside.set()
                await asyncio.wait_for(both_inside.wait(), timeout=1)

        await asyncio.gather(worker("Forest"), worker("Island"))

        assert both_inside.is_set()

    async def test_locks_released(self) -> None:
        """No lock is kept once every holder is done."""
        locks = KeyedLock()

        async with locks.hold("Forest"):
            assert len(locks) == 1

        assert len(locks) == 0

    async def test_released_on_error(self) -> None:
        """A failing holder still frees the key."""
        locks = KeyedLock()

        try:
            async with locks.hold("Forest"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert len(locks) == 0
        async with locks.hold("Forest"):
            pass
