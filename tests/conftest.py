"""Shared fixtures for read-along sync tests."""

from __future__ import annotations

from typing import Optional

import pytest

from syncreader.readalong import Transcript, WordInterval


def make_word(
    text: str,
    start: float,
    end: float,
    sentence_index: Optional[int] = None,
    weight: Optional[float] = None,
) -> WordInterval:
    return WordInterval(
        text=text,
        punctuated_text=text,
        start=start,
        end=end,
        sentence_index=sentence_index,
        activation_weight=weight,
    )


@pytest.fixture
def hello_transcript() -> Transcript:
    """Two sentences with a gap between them."""
    return Transcript(
        [
            make_word("hello", 0.0, 0.5, 0),
            make_word("there", 0.5, 1.0, 0),
            make_word("world", 2.0, 3.0, 1),
        ]
    )


@pytest.fixture
def gap_transcript() -> Transcript:
    """A=[0,1], B=[2,3] with nothing at t=1.5."""
    return Transcript([make_word("A", 0.0, 1.0, 0), make_word("B", 2.0, 3.0, 1)])
