"""
Word Interval Model

Timestamped words, the transcript that owns them, and the frame a
playback tick produces.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

# Highlight weight used when a word carries no confidence value
DEFAULT_DISPLAY_WEIGHT = 0.5


@dataclass(frozen=True)
class WordInterval:
    """A single word and the span of audio it is spoken in."""

    text: str  # Bare word
    punctuated_text: str  # Word with surrounding punctuation
    start: float  # Start time in seconds
    end: float  # End time in seconds
    sentence_index: Optional[int] = None  # Sentence this word belongs to
    activation_weight: Optional[float] = None  # Confidence in [0, 1]

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(
                f"Word {self.text!r} ends before it starts ({self.start} > {self.end})"
            )
        if self.activation_weight is not None and not 0.0 <= self.activation_weight <= 1.0:
            raise ValueError(
                f"Activation weight for {self.text!r} must be within [0, 1], "
                f"got {self.activation_weight}"
            )

    @property
    def display_text(self) -> str:
        """Text to show on screen."""
        return self.punctuated_text or self.text

    @property
    def display_weight(self) -> float:
        """Highlight intensity for this word."""
        if self.activation_weight is None:
            return DEFAULT_DISPLAY_WEIGHT
        return self.activation_weight

    def contains(self, point: float, epsilon: float = 0.0) -> bool:
        """Check if a point falls inside the word, widened by epsilon on both sides."""
        return self.start - epsilon <= point <= self.end + epsilon


class Transcript:
    """
    Ordered, immutable sequence of words for one loaded recording.

    A new recording gets a new Transcript; existing instances are never
    patched.
    """

    def __init__(self, words: Iterable[WordInterval], duration: Optional[float] = None):
        self._words: Tuple[WordInterval, ...] = tuple(words)
        last_end = max((w.end for w in self._words), default=0.0)
        self._duration = last_end if duration is None else max(0.0, float(duration))

    @property
    def words(self) -> Tuple[WordInterval, ...]:
        return self._words

    @property
    def duration(self) -> float:
        """Playback length in seconds."""
        return self._duration

    def __len__(self) -> int:
        return len(self._words)

    def __iter__(self) -> Iterator[WordInterval]:
        return iter(self._words)

    def __getitem__(self, index: int) -> WordInterval:
        return self._words[index]

    def __bool__(self) -> bool:
        return bool(self._words)

    def __repr__(self) -> str:
        return f"Transcript({len(self._words)} words, duration={self._duration:.3f})"

    def sentence(self, sentence_index: Optional[int]) -> Tuple[WordInterval, ...]:
        """All words of a sentence, in transcript order."""
        if sentence_index is None:
            return ()
        return tuple(w for w in self._words if w.sentence_index == sentence_index)

    def first_word_of_sentence(self, sentence_index: int) -> Optional[WordInterval]:
        """First word (in transcript order) tagged with the given sentence."""
        for word in self._words:
            if word.sentence_index == sentence_index:
                return word
        return None

    def sentence_indices(self) -> List[int]:
        """Distinct sentence indices in order of first appearance."""
        seen: Dict[int, None] = {}
        for word in self._words:
            if word.sentence_index is not None:
                seen.setdefault(word.sentence_index, None)
        return list(seen)


@dataclass(frozen=True)
class SyncFrame:
    """What a playback tick shows: the active words and their sentence."""

    point: float
    active: Tuple[WordInterval, ...] = field(default_factory=tuple)
    sentence: Tuple[WordInterval, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.active

    @property
    def sentence_index(self) -> Optional[int]:
        """Sentence of the first active word, if any."""
        if not self.active:
            return None
        return self.active[0].sentence_index

    def active_text(self) -> str:
        return " ".join(w.display_text for w in self.active)
