"""
Read-Along Module

Synchronises transcript words with audio playback, word by word.
Builds an interval index over word timings and answers which words
(and which sentence) are active at any playback position.
"""

from syncreader.readalong.activation import ActivationMode, filter_live, resolve_active
from syncreader.readalong.clock import Clock, ManualClock, PlaybackDriver, WallClock
from syncreader.readalong.interval_index import DEFAULT_EPSILON, IntervalIndex
from syncreader.readalong.playback_sync import PlaybackSync
from syncreader.readalong.transcript_source import (
    TranscriptError,
    extract_audio_key,
    load_transcript,
    parse_transcript,
    words_from_data,
)
from syncreader.readalong.word_interval import SyncFrame, Transcript, WordInterval

__all__ = [
    "ActivationMode",
    "filter_live",
    "resolve_active",
    "Clock",
    "ManualClock",
    "PlaybackDriver",
    "WallClock",
    "DEFAULT_EPSILON",
    "IntervalIndex",
    "PlaybackSync",
    "TranscriptError",
    "extract_audio_key",
    "load_transcript",
    "parse_transcript",
    "words_from_data",
    "SyncFrame",
    "Transcript",
    "WordInterval",
]
