"""
Playback Clocks

A Clock tells the sync engine where playback is. The engine does not
care whether time comes from an audio device, a timer or a test; it only
listens for advance, seek and play/pause notifications.

PlaybackDriver wires a Clock to a PlaybackSync for the lifetime of one
playback session.
"""

import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from syncreader.readalong.playback_sync import PlaybackSync
from syncreader.readalong.word_interval import SyncFrame, Transcript
from syncreader.utils import logger

PositionListener = Callable[[float], None]
PlayStateListener = Callable[[bool], None]
Unsubscribe = Callable[[], None]


class Clock(ABC):
    """Source of playback position and play-state notifications."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Callable]] = {
            "advance": [],
            "seek": [],
            "play_state": [],
        }

    @abstractmethod
    def current_position(self) -> float:
        """Playback position in seconds."""

    @property
    @abstractmethod
    def is_playing(self) -> bool:
        """Whether playback is running."""

    def on_advance(self, listener: PositionListener) -> Unsubscribe:
        return self._subscribe("advance", listener)

    def on_seek(self, listener: PositionListener) -> Unsubscribe:
        return self._subscribe("seek", listener)

    def on_play_state_change(self, listener: PlayStateListener) -> Unsubscribe:
        return self._subscribe("play_state", listener)

    def poll(self) -> float:
        """Report the current position to advance listeners (one frame)."""
        position = self.current_position()
        self._emit("advance", position)
        return position

    def _subscribe(self, kind: str, listener: Callable) -> Unsubscribe:
        listeners = self._listeners[kind]
        listeners.append(listener)

        def unsubscribe() -> None:
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: str, value) -> None:
        # Copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners[kind]):
            listener(value)


class ManualClock(Clock):
    """Clock moved by hand. Used for tests and offline replay."""

    def __init__(self, duration: Optional[float] = None, position: float = 0.0):
        super().__init__()
        self.duration = duration
        self._position = self._clamp(position)
        self._playing = False

    def _clamp(self, position: float) -> float:
        position = max(0.0, position)
        if self.duration is not None:
            position = min(position, self.duration)
        return position

    def current_position(self) -> float:
        return self._position

    @property
    def is_playing(self) -> bool:
        return self._playing

    def play(self) -> None:
        if not self._playing:
            self._playing = True
            self._emit("play_state", True)

    def pause(self) -> None:
        if self._playing:
            self._playing = False
            self._emit("play_state", False)

    def seek(self, position: float) -> float:
        self._position = self._clamp(position)
        self._emit("seek", self._position)
        return self._position

    def advance(self, seconds: float) -> float:
        """Move playback forward; does nothing while paused."""
        if not self._playing:
            return self._position
        self._position = self._clamp(self._position + seconds)
        self._emit("advance", self._position)
        return self._position


class WallClock(Clock):
    """
    Real-time playback clock based on a monotonic timer.

    Position = anchor position + elapsed time * rate, clamped to duration.
    Playback pauses itself when it reaches the end.
    """

    def __init__(
        self,
        duration: float,
        rate: float = 1.0,
        time_source: Callable[[], float] = time.monotonic,
    ):
        super().__init__()
        if rate <= 0:
            raise ValueError(f"Playback rate must be positive, got {rate}")
        self.duration = max(0.0, duration)
        self.rate = rate
        self._time = time_source
        self._anchor_position = 0.0
        self._anchor_time = self._time()
        self._playing = False

    def current_position(self) -> float:
        if not self._playing:
            return self._anchor_position
        elapsed = (self._time() - self._anchor_time) * self.rate
        return min(self._anchor_position + elapsed, self.duration)

    @property
    def is_playing(self) -> bool:
        return self._playing

    def play(self) -> None:
        if self._playing:
            return
        self._anchor_time = self._time()
        self._playing = True
        self._emit("play_state", True)

    def pause(self) -> None:
        if not self._playing:
            return
        self._anchor_position = self.current_position()
        self._playing = False
        self._emit("play_state", False)

    def seek(self, position: float) -> float:
        self._anchor_position = min(max(0.0, position), self.duration)
        self._anchor_time = self._time()
        self._emit("seek", self._anchor_position)
        return self._anchor_position

    def poll(self) -> float:
        position = super().poll()
        if self._playing and position >= self.duration:
            self.pause()
        return position


class PlaybackDriver:
    """
    Scoped subscription connecting a Clock to a PlaybackSync.

    While playing, every clock advance produces a tick. While paused, a
    tick is issued once per seek, pause and transcript load. A reload
    during playback shows on the next advance, since PlaybackSync swaps
    its index only once it is fully built. Detaching (or leaving the
    context manager) stops ticking unconditionally.

    Usage:
        with PlaybackDriver(clock, sync, on_frame=render) as driver:
            clock.play()
            driver.run(fps=60)
    """

    def __init__(
        self,
        clock: Clock,
        sync: PlaybackSync,
        on_frame: Optional[Callable[[SyncFrame], None]] = None,
    ):
        self.clock = clock
        self.sync = sync
        self.on_frame = on_frame
        self._unsubscribers: List[Unsubscribe] = []
        self._scheduled = False

    @property
    def attached(self) -> bool:
        return bool(self._unsubscribers)

    @property
    def scheduled(self) -> bool:
        """Whether ticks are issued on clock advances."""
        return self._scheduled

    def attach(self) -> "PlaybackDriver":
        """Subscribe to the clock. Safe to call twice."""
        if self.attached:
            return self
        self._unsubscribers = [
            self.clock.on_advance(self._handle_advance),
            self.clock.on_seek(self._handle_seek),
            self.clock.on_play_state_change(self._handle_play_state),
        ]
        if self.clock.is_playing:
            self._schedule()
        logger.debug("Playback driver attached")
        return self

    def detach(self) -> None:
        """Unsubscribe and stop ticking. Safe to call when already detached."""
        self.cancel()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        if self._unsubscribers:
            logger.debug("Playback driver detached")
        self._unsubscribers = []

    def cancel(self) -> None:
        """Stop scheduling ticks. Idempotent."""
        self._scheduled = False

    def __enter__(self) -> "PlaybackDriver":
        return self.attach()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.detach()

    def load(self, transcript: Transcript, duration: Optional[float] = None) -> None:
        """Replace the transcript; ticks once if playback is paused."""
        self.sync.load(transcript, duration=duration)
        if self.attached and not self.clock.is_playing:
            self._tick(self.clock.current_position())

    def run(
        self,
        fps: int = 60,
        until: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Poll the clock once per frame until playback stops.

        Args:
            fps: Frames per second
            until: Stop (and pause the clock) once this position is reached
            sleep: Frame delay function
        """
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        frame_delay = 1.0 / fps

        while self._scheduled and self.clock.is_playing:
            position = self.clock.poll()
            if until is not None and position >= until:
                pause = getattr(self.clock, "pause", None)
                if pause is not None:
                    pause()
                break
            sleep(frame_delay)

    def _schedule(self) -> None:
        self._scheduled = True

    def _tick(self, position: float) -> SyncFrame:
        frame = self.sync.tick(position)
        if self.on_frame is not None:
            self.on_frame(frame)
        return frame

    def _handle_advance(self, position: float) -> None:
        if self._scheduled:
            self._tick(position)

    def _handle_seek(self, position: float) -> None:
        if not self._scheduled:
            self._tick(position)

    def _handle_play_state(self, playing: bool) -> None:
        if playing:
            self._schedule()
            self._tick(self.clock.current_position())
        else:
            self.cancel()
            # One last update at the paused position
            self._tick(self.clock.current_position())
