"""Tests for the poller."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from vk_relay.errors import TransportError
from vk_relay.polling import Poller
from vk_relay.use_cases import PollSummary


@pytest.mark.asyncio
async def test_overlapping_cycle_is_skipped() -> None:
    """A trigger during a running cycle must not start a second one."""
    release = asyncio.Event()
    service = AsyncMock()

    async def slow_cycle() -> PollSummary:
        await release.wait()
        return PollSummary(fetched=1)

    service.process_new_posts.side_effect = slow_cycle
    poller = Poller(service, interval=60)

    first = asyncio.create_task(poller.run_cycle())
    await asyncio.sleep(0.01)
    assert poller.running

    assert await poller.run_cycle() is None

    release.set()
    summary = await first
    assert summary.fetched == 1
    assert service.process_new_posts.await_count == 1
    assert not poller.running


@pytest.mark.asyncio
async def test_run_forever_survives_failed_cycle() -> None:
    """A failed cycle is logged and polling continues."""
    service = AsyncMock()
    poller = Poller(service, interval=0.01)
    calls = 0

    async def cycle() -> PollSummary:
        nonlocal calls
        calls += 1
        if calls == 1:
            raise TransportError("VK unreachable")
        poller.stop()
        return PollSummary()

    service.process_new_posts.side_effect = cycle

    await asyncio.wait_for(poller.run_forever(), timeout=2)

    assert calls == 2


@pytest.mark.asyncio
async def test_stop_interrupts_wait() -> None:
    service = AsyncMock()
    service.process_new_posts.return_value = PollSummary()
    poller = Poller(service, interval=3600)

    task = asyncio.create_task(poller.run_forever())
    await asyncio.sleep(0.01)
    poller.stop()

    await asyncio.wait_for(task, timeout=1)
    assert service.process_new_posts.await_count == 1
