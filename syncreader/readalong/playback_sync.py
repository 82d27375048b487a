"""
Playback Sync

Drives the interval index from a playback position: on every tick it
finds the active words, applies the activation mode and works out the
sentence being spoken.

Each PlaybackSync owns its own cached state, so independent sessions
never see each other's words.
"""

from dataclasses import dataclass
from typing import Optional, Union

from syncreader.readalong.activation import ActivationMode, resolve_active
from syncreader.readalong.interval_index import DEFAULT_EPSILON, IntervalIndex
from syncreader.readalong.word_interval import SyncFrame, Transcript, WordInterval
from syncreader.utils import logger

_FORWARD_NAMES = {"forward", "next", "+"}
_BACK_NAMES = {"back", "backward", "previous", "prev", "-"}


@dataclass(frozen=True)
class _Loaded:
    """Transcript and its index, replaced together on every load."""

    transcript: Transcript
    index: IntervalIndex
    generation: int


def _direction_step(direction: Union[int, str]) -> int:
    """Normalise a sentence jump direction to +1 or -1."""
    if isinstance(direction, str):
        name = direction.strip().lower()
        if name in _FORWARD_NAMES:
            return 1
        if name in _BACK_NAMES:
            return -1
        raise ValueError(f"Unknown sentence direction {direction!r}")
    if direction == 0:
        raise ValueError("Sentence direction must be non-zero")
    return 1 if direction > 0 else -1


class PlaybackSync:
    """
    Synchronises transcript words with a playback position.

    Usage:
        sync = PlaybackSync()
        sync.load(transcript)
        frame = sync.tick(12.5)
        frame.active, frame.sentence
    """

    def __init__(
        self,
        mode: Union[ActivationMode, str] = ActivationMode.PERSIST,
        epsilon: float = DEFAULT_EPSILON,
        balanced: bool = True,
    ):
        """
        Initialize with an empty transcript.

        Args:
            mode: Activation mode (strict or persist)
            epsilon: Timestamp tolerance in seconds
            balanced: Use a self-balancing index
        """
        if epsilon < 0:
            raise ValueError(f"epsilon must be non-negative, got {epsilon}")
        self.mode = ActivationMode.parse(mode)
        self.epsilon = epsilon
        self.balanced = balanced
        self._loaded = _Loaded(Transcript(()), IntervalIndex(epsilon, balanced), 0)
        self._frame = SyncFrame(0.0)
        self._position = 0.0

    @property
    def transcript(self) -> Transcript:
        return self._loaded.transcript

    @property
    def index(self) -> IntervalIndex:
        return self._loaded.index

    @property
    def generation(self) -> int:
        """Incremented on every load; lets callers detect a replaced transcript."""
        return self._loaded.generation

    @property
    def duration(self) -> float:
        return self._loaded.transcript.duration

    @property
    def position(self) -> float:
        """Point of the most recent tick."""
        return self._position

    @property
    def frame(self) -> SyncFrame:
        """Result of the most recent tick."""
        return self._frame

    def load(self, transcript: Transcript, duration: Optional[float] = None) -> None:
        """
        Replace the transcript and rebuild the index.

        The new index is built completely before it becomes visible, and
        all cached words from the previous transcript are dropped.

        Args:
            transcript: Newly loaded transcript
            duration: Audio length, if known (defaults to the transcript's)
        """
        if duration is not None:
            transcript = Transcript(transcript.words, duration=duration)

        index = IntervalIndex.build(transcript, epsilon=self.epsilon, balanced=self.balanced)
        self._loaded = _Loaded(transcript, index, self._loaded.generation + 1)
        self._frame = SyncFrame(0.0)
        self._position = 0.0

        logger.debug(
            f"Loaded transcript: {len(transcript)} words, "
            f"{len(transcript.sentence_indices())} sentences, {transcript.duration:.3f}s"
        )

    def set_mode(self, mode: Union[ActivationMode, str]) -> None:
        """Switch activation mode; takes effect on the next tick."""
        self.mode = ActivationMode.parse(mode)

    def reset(self) -> None:
        """Forget the cached frame (keeps the transcript)."""
        self._frame = SyncFrame(self._position)

    def tick(self, point: float) -> SyncFrame:
        """
        Work out the active words and sentence at a playback point.

        Args:
            point: Playback position in seconds

        Returns:
            SyncFrame with the active words and their sentence
        """
        loaded = self._loaded
        matches = loaded.index.query(point, self.epsilon)
        active = resolve_active(matches, point, self.mode, self._frame.active)

        # Words without a sentence index have no group
        sentence = loaded.transcript.sentence(active[0].sentence_index) if active else ()

        self._position = point
        self._frame = SyncFrame(point, active, sentence)
        return self._frame

    def jump_by_offset(self, delta: float) -> SyncFrame:
        """Move the position by delta seconds, clamped to [0, duration], and tick."""
        target = min(max(self._position + delta, 0.0), self.duration)
        return self.tick(target)

    def jump_to_adjacent_sentence(self, direction: Union[int, str]) -> Optional[SyncFrame]:
        """
        Jump to the first word of the previous or next sentence.

        Args:
            direction: +1 / "forward" or -1 / "back"

        Returns:
            The new SyncFrame, or None if there is nowhere to go
        """
        step = _direction_step(direction)
        current = self._frame.sentence_index
        if current is None:
            return None

        target = self._loaded.transcript.first_word_of_sentence(current + step)
        if target is None:
            return None
        return self.tick(target.start)

    def seek_to_word(self, word: WordInterval) -> SyncFrame:
        """Tick at the start of a word (click-to-seek)."""
        return self.tick(word.start)
