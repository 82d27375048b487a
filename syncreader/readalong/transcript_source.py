"""
Transcript Source

Loads transcript JSON and flattens it into a Transcript of WordInterval.

Several historical layouts are accepted:
- {"dubTranscript": ...} / {"wordTimings": ...} / {"segments": ...} wrappers
- {"sentences": [{"index", "translated": {"words": [...]}}]}
- {"sentences": [{"words": [...]}]}
- [{"word", "start", "end", ...}, ...]
- [{"phrases": [{"original": [...], "translated": [...]}]}, ...]
- [{"words": [...]}, ...]

Malformed input raises TranscriptError here, before anything reaches the
sync engine.
"""

import json
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from syncreader.readalong.word_interval import Transcript, WordInterval
from syncreader.utils import logger

_WRAPPER_KEYS = ("dubTranscript", "wordTimings", "segments")


class TranscriptError(ValueError):
    """Transcript data could not be turned into word timings."""


def load_transcript(path: Union[str, Path], duration: Optional[float] = None) -> Transcript:
    """
    Load a transcript JSON file.

    Args:
        path: Path to the JSON file
        duration: Audio length in seconds, if known

    Returns:
        Transcript
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TranscriptError(f"Cannot read transcript {path}: {e}") from e

    transcript = parse_transcript(text, duration=duration)
    logger.debug(f"Read {len(transcript)} words from {path}")
    return transcript


def parse_transcript(text: str, duration: Optional[float] = None) -> Transcript:
    """Parse transcript JSON text."""
    if not text.strip():
        raise TranscriptError("Transcript is empty")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise TranscriptError(f"Invalid JSON format: {e}") from e

    return Transcript(words_from_data(data), duration=duration)


def words_from_data(data: Any) -> List[WordInterval]:
    """
    Flatten decoded transcript JSON into word intervals.

    Args:
        data: Decoded JSON (dict or list)

    Returns:
        List of WordInterval in document order
    """
    transcript = _unwrap(data)
    words: List[WordInterval] = []

    if isinstance(transcript, dict) and isinstance(transcript.get("sentences"), list):
        for position, sentence in enumerate(transcript["sentences"]):
            words.extend(_sentence_words(sentence, position))

    elif isinstance(transcript, list) and transcript:
        first = transcript[0]
        if not isinstance(first, dict):
            raise TranscriptError("Transcript list entries must be objects")

        if "word" in first:
            words = [_make_word(item) for item in transcript]
        elif "phrases" in first:
            for position, sentence in enumerate(transcript):
                _require_object(sentence, f"Sentence {position}")
                for phrase in _list_field(sentence, "phrases", f"Sentence {position}"):
                    what = f"Phrase in sentence {position}"
                    _require_object(phrase, what)
                    items = _list_field(phrase, "original", what) + _list_field(phrase, "translated", what)
                    words.extend(_make_word(item) for item in items)
        elif "words" in first:
            for position, sentence in enumerate(transcript):
                _require_object(sentence, f"Sentence {position}")
                words.extend(_make_word(item) for item in _list_field(sentence, "words", f"Sentence {position}"))
        else:
            raise TranscriptError("Unrecognised transcript layout")

    else:
        raise TranscriptError("Unrecognised transcript layout")

    if not words:
        raise TranscriptError("No valid word timings found in the JSON data")
    return words


def extract_audio_key(data: Any) -> str:
    """Storage key of the dubbed audio referenced by a transcript, or ""."""
    if isinstance(data, dict):
        location = data.get("dubAudioFileLocation")
        if isinstance(location, dict) and location.get("key"):
            return str(location["key"])
    return ""


def _require_object(value: Any, what: str) -> None:
    if not isinstance(value, dict):
        raise TranscriptError(f"{what} is not an object")


def _list_field(obj: Dict[str, Any], key: str, what: str) -> List[Any]:
    """A list-valued field, treating a missing or null field as empty."""
    value = obj.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise TranscriptError(f"{what}: {key!r} must be a list, got {value!r}")
    return value


def _unwrap(data: Any) -> Any:
    if isinstance(data, dict):
        for key in _WRAPPER_KEYS:
            if data.get(key):
                return data[key]
    return data


def _sentence_words(sentence: Any, position: int) -> List[WordInterval]:
    """Words of one entry in a "sentences" array."""
    if not isinstance(sentence, dict):
        raise TranscriptError(f"Sentence {position} is not an object")

    translated = sentence.get("translated")
    if isinstance(translated, dict) and isinstance(translated.get("words"), list):
        index = sentence.get("index", position)
        logger.debug(f"Sentence {index}: {len(translated['words'])} words")
        return [_make_word(item, sentence_index=index) for item in translated["words"]]

    if isinstance(sentence.get("words"), list):
        return [_make_word(item) for item in sentence["words"]]

    return []


def _make_word(item: Any, sentence_index: Optional[int] = None) -> WordInterval:
    """Build a WordInterval from one word object."""
    if not isinstance(item, dict):
        raise TranscriptError(f"Word entry must be an object, got {item!r}")

    text = item.get("word")
    if text is None:
        raise TranscriptError(f"Word entry has no text: {item!r}")
    text = str(text)

    start = _seconds(item, "start")
    end = _seconds(item, "end")
    if start > end:
        raise TranscriptError(f"Word {text!r} ends before it starts ({start} > {end})")

    if sentence_index is None:
        sentence_index = item.get("sentenceIndex")
    if sentence_index is not None:
        try:
            sentence_index = int(sentence_index)
        except (TypeError, ValueError, OverflowError) as e:
            raise TranscriptError(f"Bad sentence index for {text!r}: {sentence_index!r}") from e

    return WordInterval(
        text=text,
        punctuated_text=str(item.get("punctuatedWord") or text),
        start=start,
        end=end,
        sentence_index=sentence_index,
        activation_weight=_weight(item),
    )


def _seconds(item: Dict[str, Any], key: str) -> float:
    value = item.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TranscriptError(f"Word {item.get('word')!r} has no numeric {key!r}: {value!r}")
    if not math.isfinite(value):
        raise TranscriptError(f"Word {item.get('word')!r} has a non-finite {key!r}: {value!r}")
    return float(value)


def _weight(item: Dict[str, Any]) -> Optional[float]:
    """Confidence (or probability) clamped to [0, 1]."""
    value = item.get("confidence") or item.get("probability")
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return min(max(float(value), 0.0), 1.0)
