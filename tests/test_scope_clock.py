"""
Tests for the per-cycle tensor scope, loop states and display clocks.
"""

import asyncio

import numpy as np
import pytest

from pipeline.clock import ManualClock, RefreshClock
from pipeline.scope import ScopeStats, TensorScope
from pipeline.states import LoopState, TRANSITIONS, can_transition


class TestTensorScope:
    def test_releases_on_exit(self):
        stats = ScopeStats()
        with TensorScope(stats) as scope:
            a = scope.track(np.zeros(3))
            b, c = scope.track(np.ones(2), np.ones(2))
            assert scope.live == 3
            assert a.shape == (3,)

        assert scope.closed
        assert scope.live == 0
        assert (stats.opened, stats.closed, stats.released_tensors) == (1, 1, 3)
        assert stats.open_scopes == 0

    def test_releases_on_error(self):
        stats = ScopeStats()
        with pytest.raises(ValueError):
            with TensorScope(stats) as scope:
                scope.track(np.zeros(1))
                raise ValueError("decode failed")

        assert stats.closed == 1
        assert stats.released_tensors == 1

    def test_close_is_idempotent(self):
        stats = ScopeStats()
        scope = TensorScope(stats).open()
        scope.close()
        scope.close()
        assert stats.closed == 1

    def test_cannot_reopen_or_track_after_close(self):
        scope = TensorScope()
        with scope:
            pass
        with pytest.raises(RuntimeError):
            scope.open()
        with pytest.raises(RuntimeError):
            scope.track(np.zeros(1))


class TestLoopStates:
    def test_every_state_has_a_successor(self):
        assert set(TRANSITIONS) == set(LoopState)

    def test_forward_cycle(self):
        order = [
            LoopState.IDLE, LoopState.CAPTURING, LoopState.ENCODING, LoopState.INFERRING,
            LoopState.DECODING, LoopState.RENDERING, LoopState.SCHEDULED, LoopState.CAPTURING,
        ]
        for current, target in zip(order, order[1:]):
            assert can_transition(current, target)

    def test_early_exit_only_from_inferring(self):
        assert can_transition(LoopState.INFERRING, LoopState.SCHEDULED)
        assert not can_transition(LoopState.ENCODING, LoopState.SCHEDULED)
        assert not can_transition(LoopState.SCHEDULED, LoopState.IDLE)
        assert not can_transition(LoopState.RENDERING, LoopState.RENDERING)


class TestManualClock:
    def test_tick_without_waiter_is_dropped(self):
        clock = ManualClock()
        assert clock.tick() is False
        assert clock.dropped_ticks == 1
        assert clock.delivered_ticks == 0

    @pytest.mark.asyncio
    async def test_tick_wakes_waiter(self):
        clock = ManualClock()
        waiter = asyncio.create_task(clock.next_tick())
        await asyncio.sleep(0)
        assert clock.waiting

        assert clock.tick() is True
        assert await waiter == 1.0
        assert not clock.waiting

    @pytest.mark.asyncio
    async def test_only_one_pending_request(self):
        clock = ManualClock()
        waiter = asyncio.create_task(clock.next_tick())
        await asyncio.sleep(0)

        with pytest.raises(RuntimeError):
            await clock.next_tick()

        clock.tick()
        await waiter


class TestRefreshClock:
    def test_invalid_rate(self):
        with pytest.raises(ValueError):
            RefreshClock(0)

    @pytest.mark.asyncio
    async def test_waits_at_most_one_period(self):
        clock = RefreshClock(refresh_hz=100)
        loop = asyncio.get_running_loop()
        before = loop.time()

        await clock.next_tick()

        assert loop.time() - before < clock.period + 0.05
