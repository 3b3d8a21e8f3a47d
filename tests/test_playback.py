"""Tests for play/pause driven by frame schedulers."""

import asyncio
import logging

from anim_engine import (
    Animation,
    AsyncioFrameScheduler,
    ManualFrameScheduler,
    VirtualDomAdapter,
    VirtualElement,
)


def _animation(scheduler, config=None):
    circle = VirtualElement(classes={"circle"})
    layer = VirtualElement(children=[circle])
    animation = Animation([("layer-1", layer)], VirtualDomAdapter(), config=config, scheduler=scheduler)
    animation.define(
        [
            {
                "selector": "layer-1 >> .circle",
                "timespan": [0, 5],
                "from": {"opacity": "0"},
                "to": {"opacity": "1"},
            }
        ]
    )
    return animation, circle


class TestManualScheduler:
    def test_advance_runs_pending_frame(self):
        scheduler = ManualFrameScheduler()
        calls = []
        scheduler.request_frame(lambda: calls.append(scheduler.now()))
        assert scheduler.advance(40)
        assert calls == [40]
        assert not scheduler.has_pending

    def test_advance_without_frame(self):
        scheduler = ManualFrameScheduler(start_ms=10)
        assert not scheduler.advance(5)
        assert scheduler.now() == 15

    def test_single_outstanding_frame(self):
        scheduler = ManualFrameScheduler()
        calls = []
        scheduler.request_frame(lambda: calls.append("first"))
        scheduler.request_frame(lambda: calls.append("second"))
        scheduler.run_frame()
        assert calls == ["second"]

    def test_cancel_stale_handle_is_ignored(self):
        scheduler = ManualFrameScheduler()
        old = scheduler.request_frame(lambda: None)
        scheduler.request_frame(lambda: None)
        scheduler.cancel_frame(old)
        assert scheduler.has_pending


class TestPlay:
    def test_play_advances_by_whole_timesteps(self):
        scheduler = ManualFrameScheduler()
        animation, circle = _animation(scheduler)
        animation.play()
        assert animation.is_playing

        scheduler.advance(250)
        assert animation.current_time == 200
        assert circle.style == {"opacity": "0.04"}

        # The 50ms remainder is carried over
        scheduler.advance(100)
        assert animation.current_time == 300

    def test_short_frame_waits(self):
        scheduler = ManualFrameScheduler()
        animation, circle = _animation(scheduler)
        animation.play()
        scheduler.advance(50)
        assert animation.current_time == 0
        assert circle.style == {}
        assert scheduler.has_pending

    def test_completes_and_stops(self):
        scheduler = ManualFrameScheduler()
        animation, circle = _animation(scheduler)
        animation.play()
        scheduler.advance(6000)
        assert animation.current_time == 5000
        assert animation.is_completed
        assert not animation.is_playing
        assert not scheduler.has_pending
        assert circle.style == {"opacity": "1"}

    def test_runs_frames_until_completion(self):
        scheduler = ManualFrameScheduler()
        animation, _ = _animation(scheduler, config={"timestep": 1000})
        ran = scheduler.run_frames(100, interval_ms=500)
        assert ran == 0

        animation.play()
        ran = scheduler.run_frames(100, interval_ms=500)
        assert ran == 10
        assert animation.is_completed

    def test_pause(self):
        scheduler = ManualFrameScheduler()
        animation, _ = _animation(scheduler)
        animation.play()
        scheduler.advance(300)
        animation.pause()
        assert not animation.is_playing
        assert not scheduler.has_pending

        scheduler.advance(1000)
        assert animation.current_time == 300

    def test_pause_is_idempotent(self):
        scheduler = ManualFrameScheduler()
        animation, _ = _animation(scheduler)
        animation.pause()
        animation.pause()
        assert not animation.is_playing

    def test_resume_from_current_time(self):
        scheduler = ManualFrameScheduler()
        animation, _ = _animation(scheduler)
        animation.forward(1000)
        animation.play()
        scheduler.advance(100)
        assert animation.current_time == 1100

    def test_play_twice_is_noop(self):
        scheduler = ManualFrameScheduler()
        animation, _ = _animation(scheduler)
        animation.play()
        animation.play()
        scheduler.advance(100)
        assert animation.current_time == 100

    def test_play_after_completion_restarts(self):
        scheduler = ManualFrameScheduler()
        animation, circle = _animation(scheduler)
        animation.seek(1)
        assert animation.is_completed

        animation.play()
        assert animation.is_playing
        assert animation.current_time == 0
        assert circle.style == {}

    def test_stepping_pauses(self):
        scheduler = ManualFrameScheduler()
        animation, _ = _animation(scheduler)
        animation.play()
        animation.forward(500)
        assert not animation.is_playing
        assert not scheduler.has_pending


class TestAsyncioScheduler:
    def test_plays_to_completion(self):
        async def run():
            animation, circle = _animation(
                AsyncioFrameScheduler(frame_interval_ms=5), config={"timestep": 10}
            )
            animation.define(
                [
                    {
                        "selector": "layer-1 >> .circle",
                        "timespan": [0, 0.05],
                        "from": {"opacity": "0"},
                        "to": {"opacity": "1"},
                    }
                ]
            )
            animation.play()
            for _ in range(200):
                if animation.is_completed:
                    break
                await asyncio.sleep(0.01)
            return animation, circle

        animation, circle = asyncio.run(run())
        assert animation.is_completed
        assert animation.current_time == animation.duration == 50
        assert circle.style == {"opacity": "1"}

    def test_play_outside_event_loop_warns(self, caplog):
        animation, _ = _animation(None)
        with caplog.at_level(logging.WARNING, logger="anim_engine"):
            animation.play()
        assert "Can't play without a frame scheduler" in caplog.text
        assert not animation.is_playing

        # Not left half-started: a working scheduler plays right away
        scheduler = ManualFrameScheduler()
        animation.scheduler = scheduler
        animation.play()
        assert animation.is_playing
        scheduler.advance(100)
        assert animation.current_time == 100

    def test_play_after_completion_outside_event_loop_keeps_state(self):
        animation, circle = _animation(AsyncioFrameScheduler())
        animation.seek(1)
        animation.play()
        assert animation.is_completed
        assert circle.style == {"opacity": "1"}

    def test_default_scheduler_uses_timestep(self):
        animation = Animation([], VirtualDomAdapter(), config={"timestep": 20})
        assert isinstance(animation.scheduler, AsyncioFrameScheduler)
        assert animation.scheduler.frame_interval_ms == 20

    def test_pause_cancels_timer(self):
        async def run():
            animation, _ = _animation(AsyncioFrameScheduler(frame_interval_ms=5))
            animation.play()
            animation.pause()
            await asyncio.sleep(0.05)
            return animation

        animation = asyncio.run(run())
        assert animation.current_time == 0
        assert not animation.is_playing
