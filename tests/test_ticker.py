"""Tests for chronomancer.core.ticker."""

import asyncio
import logging

import pytest

from chronomancer.core.ticker import Ticker


class TestTicker:
    def test_interval_must_be_positive(self):
        with pytest.raises(ValueError):
            Ticker(0, lambda now: None)

    @pytest.mark.asyncio
    async def test_delivers_ticks_with_clock_value(self):
        seen = []
        clock_values = iter(range(100, 200))
        ticker = Ticker(0.01, seen.append, clock=lambda: next(clock_values))

        ticker.start()
        await asyncio.sleep(0.1)
        await ticker.stop()

        assert len(seen) >= 3
        assert seen == list(range(100, 100 + len(seen)))
        assert not ticker.running

    @pytest.mark.asyncio
    async def test_handler_error_does_not_stop_ticking(self, caplog):
        calls = []

        def _boom(now):
            calls.append(now)
            raise RuntimeError("bad tick")

        ticker = Ticker(0.01, _boom, clock=lambda: 5)
        with caplog.at_level(logging.ERROR):
            ticker.start()
            await asyncio.sleep(0.08)
            await ticker.stop()

        assert len(calls) >= 2
        assert "Tick handler failed" in caplog.text

    @pytest.mark.asyncio
    async def test_start_twice_reuses_task(self):
        ticker = Ticker(10, lambda now: None)
        first = ticker.start()
        assert ticker.start() is first
        await ticker.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        ticker = Ticker(1, lambda now: None)
        await ticker.stop()
        assert ticker.ticks == 0
