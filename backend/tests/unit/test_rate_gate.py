"""Unit tests for the minimum-interval rate gate."""

import asyncio

import pytest

from travelbuddy.utils import RateGate


class FakeTime:
    """Monotonic clock whose sleep just advances time."""

    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def clock(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class TestRateGate:
    """Tests for RateGate."""

    def setup_method(self) -> None:
        self.time = FakeTime()
        self.gate = RateGate("test", 1.1, clock=self.time.clock, sleep=self.time.sleep)

    @pytest.mark.asyncio
    async def test_first_request_does_not_wait(self) -> None:
        await self.gate.acquire()
        assert self.time.sleeps == []
        assert self.gate.last_request_time is None

    @pytest.mark.asyncio
    async def test_back_to_back_requests_are_spaced(self) -> None:
        async with self.gate.throttle():
            pass
        self.time.now += 0.3
        async with self.gate.throttle():
            pass
        assert self.time.sleeps == [pytest.approx(0.8)]

    @pytest.mark.asyncio
    async def test_no_wait_after_interval_elapsed(self) -> None:
        async with self.gate.throttle():
            pass
        self.time.now += 2.0
        async with self.gate.throttle():
            pass
        assert self.time.sleeps == []

    @pytest.mark.asyncio
    async def test_consecutive_starts_respect_interval(self) -> None:
        starts = []
        for _ in range(3):
            async with self.gate.throttle():
                starts.append(self.time.now)
                self.time.now += 0.2
        gaps = [b - a for a, b in zip(starts, starts[1:])]
        assert all(gap >= 1.1 - 1e-9 for gap in gaps)

    @pytest.mark.asyncio
    async def test_concurrent_callers_go_one_at_a_time(self) -> None:
        starts = []

        async def request() -> None:
            async with self.gate.throttle():
                starts.append(self.time.now)
                await asyncio.sleep(0)
                self.time.now += 0.2

        await asyncio.gather(request(), request())
        assert len(starts) == 2
        assert starts[1] - starts[0] >= 1.1 + 0.2 - 1e-9

    @pytest.mark.asyncio
    async def test_failed_request_still_marks_gate(self) -> None:
        with pytest.raises(RuntimeError):
            async with self.gate.throttle():
                raise RuntimeError("upstream down")
        assert self.gate.last_request_time == self.time.now
        assert self.gate.remaining_delay() == pytest.approx(1.1)
