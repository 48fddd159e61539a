import asyncio

import pytest

from socialnet.models.friend import ordered_pair, pair_key
from socialnet.services.locks import PairLockRegistry


def test_pair_key_is_order_independent():
    assert pair_key("b", "a") == pair_key("a", "b") == "a:b"
    assert ordered_pair("z", "m") == ("m", "z")


@pytest.mark.asyncio
async def test_same_pair_is_serialized():
    locks = PairLockRegistry()
    events = []

    async def worker(name, a, b):
        async with locks.hold(a, b):
            events.append(f"{name}-in")
            await asyncio.sleep(0.01)
            events.append(f"{name}-out")

    await asyncio.gather(worker("first", "u1", "u2"), worker("second", "u2", "u1"))

    assert events in (
        ["first-in", "first-out", "second-in", "second-out"],
        ["second-in", "second-out", "first-in", "first-out"],
    )


@pytest.mark.asyncio
async def test_different_pairs_run_concurrently():
    locks = PairLockRegistry()
    inside = asyncio.Event()

    async def holder():
        async with locks.hold("u1", "u2"):
            await asyncio.wait_for(inside.wait(), timeout=1)

    async def other_pair():
        async with locks.hold("u1", "u3"):
            inside.set()

    await asyncio.gather(holder(), other_pair())


@pytest.mark.asyncio
async def test_idle_locks_are_released():
    locks = PairLockRegistry()

    async with locks.hold("u1", "u2"):
        assert len(locks) == 1

    assert len(locks) == 0
