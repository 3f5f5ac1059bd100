"""Tests for the duplicate-check debouncer."""

import asyncio

import pytest

from fixmyhood.services.duplicates import DuplicateCheckDebouncer


@pytest.mark.asyncio
async def test_only_last_draft_in_quiet_window_is_checked() -> None:
    calls: list[str] = []
    delivered: list[str] = []

    async def check(title: str) -> str:
        calls.append(title)
        return title.upper()

    async def deliver(result: str) -> None:
        delivered.append(result)

    debouncer = DuplicateCheckDebouncer(check, delay_seconds=0.05, on_result=deliver)
    debouncer.schedule("pot")
    debouncer.schedule("poth")
    last = debouncer.schedule("pothole")

    assert await last == "POTHOLE"
    assert calls == ["pothole"]
    assert delivered == ["POTHOLE"]
    assert debouncer.latest == "POTHOLE"
    assert not debouncer.pending


@pytest.mark.asyncio
async def test_in_flight_check_finishes_but_stale_result_is_dropped() -> None:
    started = asyncio.Event()
    release = asyncio.Event()
    delivered: list[str] = []

    async def check(title: str) -> str:
        if title == "slow":
            started.set()
            await release.wait()
        return title

    async def deliver(result: str) -> None:
        delivered.append(result)

    debouncer = DuplicateCheckDebouncer(check, delay_seconds=0.01, on_result=deliver)
    slow = debouncer.schedule("slow")
    await started.wait()

    fast = debouncer.schedule("fast")
    assert await fast == "fast"
    release.set()

    assert await slow is None
    assert delivered == ["fast"]


@pytest.mark.asyncio
async def test_close_cancels_pending_checks() -> None:
    calls: list[str] = []

    async def check(title: str) -> str:
        calls.append(title)
        return title

    debouncer = DuplicateCheckDebouncer(check, delay_seconds=10)
    task = debouncer.schedule("pothole")
    assert debouncer.pending

    await debouncer.close()

    assert task.cancelled()
    assert calls == []
