"""
Activation Policy

Turns raw overlap results into the words that count as "active".

Two modes:
- strict: a word is active only while the playhead has not passed its end
- persist: the last matched words stay active until something new matches
"""

from enum import Enum
from typing import Sequence, Tuple, Union

from syncreader.readalong.word_interval import WordInterval


class ActivationMode(str, Enum):
    """How words are kept active between matches."""

    STRICT = "strict"
    PERSIST = "persist"

    @classmethod
    def parse(cls, value: Union["ActivationMode", str]) -> "ActivationMode":
        """Accept a mode or its name (case-insensitive)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            names = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown activation mode {value!r} (expected one of: {names})") from None


def filter_live(matches: Sequence[WordInterval], point: float) -> Tuple[WordInterval, ...]:
    """Drop words whose end has already passed, even if within tolerance."""
    return tuple(w for w in matches if point <= w.end)


def resolve_active(
    matches: Sequence[WordInterval],
    point: float,
    mode: ActivationMode,
    previous: Sequence[WordInterval] = (),
) -> Tuple[WordInterval, ...]:
    """
    Decide the active words for one tick.

    Args:
        matches: Raw tolerant-overlap result for the point
        point: Playback position in seconds
        mode: Activation mode
        previous: Active words from the last tick (used by persist mode)

    Returns:
        Tuple of active WordInterval, order preserved from matches
    """
    if mode is ActivationMode.STRICT:
        return filter_live(matches, point)

    if matches:
        return tuple(matches)
    return tuple(previous)
