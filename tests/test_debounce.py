from __future__ import annotations

import asyncio

import pytest

from tracker.services.debounce import Debouncer

DELAY = 0.02


def recorder(log: list, value):
    return lambda: log.append(value)


@pytest.mark.asyncio
async def test_latest_edit_wins():
    writes = []
    debouncer = Debouncer(delay=DELAY)
    for text in ["a", "ab", "abc"]:
        debouncer.schedule("essay-1", recorder(writes, text))
    assert writes == []
    await asyncio.sleep(DELAY * 5)
    assert writes == ["abc"]
    assert len(debouncer) == 0


@pytest.mark.asyncio
async def test_keys_are_independent():
    writes = []
    debouncer = Debouncer(delay=DELAY)
    debouncer.schedule(("notes", "a1"), recorder(writes, "notes"))
    debouncer.schedule(("essay-text", "e1"), recorder(writes, "essay"))
    assert len(debouncer) == 2
    await asyncio.sleep(DELAY * 5)
    assert sorted(writes) == ["essay", "notes"]


@pytest.mark.asyncio
async def test_cancel_drops_the_write():
    writes = []
    debouncer = Debouncer(delay=DELAY)
    debouncer.schedule("k", recorder(writes, "x"))
    assert debouncer.is_pending("k")
    assert debouncer.cancel("k")
    assert not debouncer.cancel("k")
    await asyncio.sleep(DELAY * 5)
    assert writes == []


@pytest.mark.asyncio
async def test_flush_applies_now_and_only_once():
    writes = []
    debouncer = Debouncer(delay=DELAY)
    debouncer.schedule("a", recorder(writes, "a"))
    debouncer.schedule("b", recorder(writes, "b"))
    assert debouncer.flush("a") == 1
    assert writes == ["a"]
    assert debouncer.flush() == 1
    assert writes == ["a", "b"]
    await asyncio.sleep(DELAY * 5)
    assert writes == ["a", "b"]


@pytest.mark.asyncio
async def test_cancel_all():
    writes = []
    debouncer = Debouncer(delay=DELAY)
    debouncer.schedule("a", recorder(writes, "a"))
    debouncer.schedule("b", recorder(writes, "b"))
    assert debouncer.cancel_all() == 2
    await asyncio.sleep(DELAY * 5)
    assert writes == []


def test_schedule_needs_running_loop():
    with pytest.raises(RuntimeError):
        Debouncer(delay=DELAY).schedule("k", lambda: None)
