"""Tests for playback clocks and the scoped playback driver."""

from __future__ import annotations

from typing import List

import pytest

from syncreader.readalong import (
    ManualClock,
    PlaybackDriver,
    PlaybackSync,
    SyncFrame,
    Transcript,
    WallClock,
)
from tests.conftest import make_word


class FakeTime:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def _driver(transcript: Transcript, clock, mode: str = "strict"):
    sync = PlaybackSync(mode=mode)
    sync.load(transcript)
    frames: List[SyncFrame] = []
    driver = PlaybackDriver(clock, sync, on_frame=frames.append)
    return driver, sync, frames


def test_manual_clock_only_advances_while_playing() -> None:
    clock = ManualClock(duration=5.0)
    assert clock.advance(1.0) == 0.0
    clock.play()
    assert clock.advance(1.0) == 1.0
    assert clock.advance(10.0) == 5.0
    assert clock.seek(-3.0) == 0.0


def test_unsubscribe_is_idempotent() -> None:
    clock = ManualClock()
    seen: List[float] = []
    unsubscribe = clock.on_seek(seen.append)
    clock.seek(1.0)
    unsubscribe()
    unsubscribe()
    clock.seek(2.0)
    assert seen == [1.0]


def test_driver_ticks_on_every_advance_while_playing(hello_transcript: Transcript) -> None:
    clock = ManualClock(duration=hello_transcript.duration)
    driver, _, frames = _driver(hello_transcript, clock)

    with driver:
        clock.play()
        clock.advance(0.25)
        clock.advance(0.5)

    assert [f.point for f in frames] == [0.0, 0.25, 0.75]
    assert [w.text for w in frames[-1].active] == ["there"]


def test_driver_ticks_once_per_seek_while_paused(hello_transcript: Transcript) -> None:
    clock = ManualClock(duration=hello_transcript.duration)
    driver, _, frames = _driver(hello_transcript, clock)

    with driver:
        clock.seek(2.5)
        assert [w.text for w in frames[-1].active] == ["world"]
        clock.play()
        count = len(frames)
        clock.seek(0.25)
        # Seeking while playing waits for the next advance
        assert len(frames) == count


def test_pause_stops_ticking_and_updates_once(hello_transcript: Transcript) -> None:
    clock = ManualClock(duration=hello_transcript.duration)
    driver, _, frames = _driver(hello_transcript, clock)

    with driver:
        clock.play()
        clock.advance(0.25)
        clock.pause()
        assert not driver.scheduled
        assert frames[-1].point == 0.25
        count = len(frames)
        clock.poll()
        assert len(frames) == count


def test_detach_is_unconditional_and_idempotent(hello_transcript: Transcript) -> None:
    clock = ManualClock(duration=hello_transcript.duration)
    driver, _, frames = _driver(hello_transcript, clock)

    driver.attach()
    driver.attach()
    clock.play()
    clock.advance(0.25)
    driver.detach()
    driver.detach()
    driver.cancel()

    count = len(frames)
    clock.advance(0.25)
    clock.seek(2.5)
    clock.pause()
    assert len(frames) == count
    assert not driver.attached


def test_reload_during_playback_shows_on_next_advance(gap_transcript: Transcript) -> None:
    clock = ManualClock(duration=10.0)
    driver, sync, frames = _driver(gap_transcript, clock, mode="persist")

    with driver:
        clock.play()
        clock.advance(0.5)
        assert [w.text for w in frames[-1].active] == ["A"]

        sync.load(Transcript([make_word("new", 0.0, 10.0, 0)]))
        count = len(frames)
        clock.advance(0.5)

        assert len(frames) == count + 1
        assert frames[-1].point == 1.0
        assert [w.text for w in frames[-1].active] == ["new"]


def test_driver_load_ticks_while_paused(gap_transcript: Transcript) -> None:
    clock = ManualClock(duration=10.0, position=2.5)
    driver, _, frames = _driver(Transcript([]), clock)

    with driver:
        driver.load(gap_transcript)

    assert [w.text for w in frames[-1].active] == ["B"]


def test_wall_clock_tracks_elapsed_time() -> None:
    fake = FakeTime()
    clock = WallClock(duration=10.0, rate=2.0, time_source=fake)

    fake.now += 1.0
    assert clock.current_position() == 0.0

    clock.play()
    fake.now += 1.5
    assert clock.current_position() == pytest.approx(3.0)

    clock.pause()
    fake.now += 5.0
    assert clock.current_position() == pytest.approx(3.0)

    clock.seek(9.0)
    clock.play()
    fake.now += 5.0
    assert clock.current_position() == 10.0


def test_wall_clock_rejects_bad_rate() -> None:
    with pytest.raises(ValueError):
        WallClock(duration=1.0, rate=0.0)


def test_run_drives_wall_clock_until_end(hello_transcript: Transcript) -> None:
    fake = FakeTime()
    clock = WallClock(duration=hello_transcript.duration, time_source=fake)
    driver, _, frames = _driver(hello_transcript, clock)

    def sleep(seconds: float) -> None:
        fake.now += seconds

    with driver:
        clock.play()
        driver.run(fps=10, sleep=sleep)

    assert not clock.is_playing
    assert frames[-1].point == pytest.approx(3.0)
    seen = {w.text for f in frames for w in f.active}
    assert seen == {"hello", "there", "world"}


def test_run_stops_at_until(hello_transcript: Transcript) -> None:
    fake = FakeTime()
    clock = WallClock(duration=hello_transcript.duration, time_source=fake)
    driver, _, frames = _driver(hello_transcript, clock)

    def sleep(seconds: float) -> None:
        fake.now += seconds

    with driver:
        clock.play()
        driver.run(fps=4, until=1.0, sleep=sleep)

    assert not clock.is_playing
    assert clock.current_position() == pytest.approx(1.0)


def test_run_rejects_bad_fps(hello_transcript: Transcript) -> None:
    driver, _, _ = _driver(hello_transcript, ManualClock())
    with pytest.raises(ValueError):
        driver.run(fps=0)
