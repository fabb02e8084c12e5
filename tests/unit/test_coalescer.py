"""Unit tests for the debounced flush scheduler."""

import asyncio
import logging

import pytest

from blood_drive.services.coalescer import Coalescer, FlushState


class Recorder:
    def __init__(self, failures: int = 0):
        self.calls = 0
        self.failures = failures

    async def __call__(self) -> None:
        self.calls += 1
        if self.failures:
            self.failures -= 1
            raise OSError("disk full")


class TestCoalescer:
    @pytest.mark.asyncio
    async def test_burst_collapses_into_one_run(self) -> None:
        action = Recorder()
        coalescer = Coalescer("test", action, delay=0.02)

        for _ in range(10):
            coalescer.request()
        assert coalescer.state == FlushState.PENDING

        await asyncio.sleep(0.08)

        assert action.calls == 1
        assert coalescer.state == FlushState.IDLE
        assert coalescer.deadline is None

    @pytest.mark.asyncio
    async def test_deadline_fixed_by_first_request(self) -> None:
        coalescer = Coalescer("test", Recorder(), delay=0.05)

        coalescer.request()
        deadline = coalescer.deadline
        await asyncio.sleep(0.01)
        coalescer.request()

        assert coalescer.deadline == deadline
        coalescer.cancel()

    @pytest.mark.asyncio
    async def test_new_window_after_run(self) -> None:
        action = Recorder()
        coalescer = Coalescer("test", action, delay=0.01)

        coalescer.request()
        await asyncio.sleep(0.05)
        coalescer.request()
        await asyncio.sleep(0.05)

        assert action.calls == 2
        assert coalescer.runs == 2

    @pytest.mark.asyncio
    async def test_failure_is_logged_and_next_request_retries(self, caplog) -> None:
        action = Recorder(failures=1)
        coalescer = Coalescer("persistence", action, delay=0.01)

        with caplog.at_level(logging.ERROR, logger="blood_drive.services.coalescer"):
            coalescer.request()
            await asyncio.sleep(0.05)

        assert "persistence flush failed" in caplog.text
        assert coalescer.state == FlushState.IDLE
        assert coalescer.runs == 0

        coalescer.request()
        await asyncio.sleep(0.05)

        assert action.calls == 2
        assert coalescer.runs == 1

    @pytest.mark.asyncio
    async def test_flush_runs_pending_immediately(self) -> None:
        action = Recorder()
        coalescer = Coalescer("test", action, delay=10)

        coalescer.request()
        await coalescer.flush()

        assert action.calls == 1
        assert coalescer.state == FlushState.IDLE

    @pytest.mark.asyncio
    async def test_cancel_drops_pending(self) -> None:
        action = Recorder()
        coalescer = Coalescer("test", action, delay=0.01)

        coalescer.request()
        coalescer.cancel()
        await asyncio.sleep(0.05)

        assert action.calls == 0
        assert coalescer.state == FlushState.IDLE

    @pytest.mark.asyncio
    async def test_flush_when_idle_is_noop(self) -> None:
        action = Recorder()
        coalescer = Coalescer("test", action, delay=0.01)

        await coalescer.flush()

        assert action.calls == 0
