"""Tests for per-line locks."""

import asyncio
import gc

from subway.core.locks import LineLockRegistry


class TestLineLockRegistry:
    """Tests for LineLockRegistry."""

    def test_same_line_shares_lock(self) -> None:
        registry = LineLockRegistry()

        first = registry.get("line-1")
        second = registry.get("line-1")

        assert first is second
        assert registry.get("line-2") is not first

    def test_unused_locks_are_released(self) -> None:
        registry = LineLockRegistry()
        lock = registry.get("line-1")
        assert len(registry) == 1

        del lock
        gc.collect()

        assert len(registry) == 0

    async def test_serialises_mutations_of_one_line(self) -> None:
        registry = LineLockRegistry()
        events: list[str] = []

        async def mutate(name: str) -> None:
            async with registry.hold("line-1"):
                events.append(f"{name}:start")
                await asyncio.sleep(0.01)
                events.append(f"{name}:end")

        await asyncio.gather(mutate("first"), mutate("second"))

        assert events == ["first:start", "first:end", "second:start", "second:end"]

    async def test_different_lines_do_not_block_each_other(self) -> None:
        registry = LineLockRegistry()
        release = asyncio.Event()

        async def hold_line_one() -> None:
            async with registry.hold("line-1"):
                await release.wait()

        holder = asyncio.create_task(hold_line_one())
        await asyncio.sleep(0)

        async with asyncio.timeout(1):
            async with registry.hold("line-2"):
                assert registry.get("line-1").locked()

        release.set()
        await holder
