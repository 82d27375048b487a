#!/usr/bin/env python3
"""
Read-Along Sync - Main CLI

Inspect word-timed transcripts and preview word-by-word synchronisation
in the terminal.

Features:
- Accepts the historical transcript JSON layouts
- Strict or persist word activation
- Sentence grouping and sentence-to-sentence navigation
- Real-time terminal preview driven by a playback clock
"""

import json
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.live import Live
from rich.markup import escape
from rich.text import Text

from syncreader import __version__
from syncreader.readalong import (
    ActivationMode,
    PlaybackDriver,
    PlaybackSync,
    SyncFrame,
    Transcript,
    TranscriptError,
    WallClock,
    extract_audio_key,
    load_transcript,
)
from syncreader.utils import logger
from syncreader.utils.config import config
from syncreader.utils.timecode import format_duration, format_time

MODE_CHOICE = click.Choice([m.value for m in ActivationMode], case_sensitive=False)


def _load(input_file: str, duration: Optional[float] = None) -> Transcript:
    """Load a transcript, exiting with a message on bad input."""
    try:
        return load_transcript(Path(input_file), duration=duration)
    except TranscriptError as e:
        logger.error(escape(str(e)))
        sys.exit(1)


def _make_sync(mode: Optional[str], epsilon: Optional[float]) -> PlaybackSync:
    return PlaybackSync(
        mode=mode or config.default_mode,
        epsilon=config.epsilon if epsilon is None else epsilon,
        balanced=config.balanced_index,
    )


def render_frame(frame: SyncFrame) -> Text:
    """Sentence line with the active words highlighted."""
    text = Text()
    text.append(f"{format_time(frame.point)}  ", style="dim")

    words = frame.sentence or frame.active
    if not words:
        return text

    active = set(frame.active)
    for i, word in enumerate(words):
        if i:
            text.append(" ")
        if word in active:
            text.append(word.display_text, style="active")
        else:
            text.append(word.display_text)
    return text


@click.group()
@click.version_option(version=__version__)
@click.option("--debug", is_flag=True, help="Print debug messages")
def cli(debug: bool):
    """
    Read-Along Sync

    Show transcript words in step with audio playback.
    """
    logger.set_debug(debug or config.debug or logger.is_debug())


@cli.command()
@click.argument("input_file", type=click.Path(exists=True))
@click.option("-d", "--duration", type=float, default=None, help="Audio length in seconds")
def inspect(input_file: str, duration: Optional[float]):
    """
    Summarise a transcript file.
    """
    input_path = Path(input_file)
    logger.header(f"Transcript: {input_path.name}")

    transcript = _load(input_file, duration)
    sentences = transcript.sentence_indices()

    logger.info(f"Words:     {len(transcript):,}")
    logger.info(f"Sentences: {len(sentences):,}")
    logger.info(f"Duration:  {format_duration(transcript.duration)} ({format_time(transcript.duration)})")

    key = extract_audio_key(json.loads(input_path.read_text(encoding="utf-8")))
    if key:
        logger.info(f"Audio key: {key}")


@cli.command()
@click.argument("input_file", type=click.Path(exists=True))
def sentences(input_file: str):
    """
    List sentences with their start and end times.
    """
    transcript = _load(input_file)
    indices = transcript.sentence_indices()

    if not indices:
        logger.warning("Transcript has no sentence indices")
        return

    for index in indices:
        words = transcript.sentence(index)
        start = min(w.start for w in words)
        end = max(w.end for w in words)
        line = " ".join(w.display_text for w in words)
        logger.console.print(
            f"  {index:4}. [dim]{format_time(start)} - {format_time(end)}[/dim]  {escape(line[:70])}"
        )


@cli.command()
@click.argument("input_file", type=click.Path(exists=True))
@click.argument("time", type=float)
@click.option("-m", "--mode", type=MODE_CHOICE, default=None, help=f"Activation mode (default: {config.default_mode})")
@click.option("-e", "--epsilon", type=float, default=None, help=f"Timestamp tolerance (default: {config.epsilon})")
@click.option(
    "-j", "--jump",
    type=float,
    multiple=True,
    help="Seek by this many seconds after TIME (repeatable, may be negative)",
)
@click.option(
    "--sentence",
    type=click.Choice(["forward", "back"], case_sensitive=False),
    multiple=True,
    help="Then move to the next or previous sentence (repeatable)",
)
def query(
    input_file: str,
    time: float,
    mode: Optional[str],
    epsilon: Optional[float],
    jump: Tuple[float, ...],
    sentence: Tuple[str, ...],
):
    """
    Show the active words and sentence at TIME seconds.

    Jumps and sentence moves are applied in order after the first tick,
    the way the player buttons would.
    """
    transcript = _load(input_file)
    sync = _make_sync(mode, epsilon)
    sync.load(transcript)
    frame = sync.tick(time)

    for offset in jump:
        frame = sync.jump_by_offset(offset)

    for direction in sentence:
        moved = sync.jump_to_adjacent_sentence(direction)
        if moved is None:
            logger.warning(f"No {direction.lower()} sentence from {format_time(sync.position)}")
        else:
            frame = moved

    if frame.is_empty:
        logger.warning(f"No active words at {format_time(frame.point)}")
        return

    logger.console.print(render_frame(frame))
    logger.info(f"Active: {escape(frame.active_text())}")
    for word in frame.active:
        logger.console.print(
            f"  [highlight]{escape(word.display_text)}[/highlight] "
            f"{word.start:.3f}-{word.end:.3f}  sentence={word.sentence_index}  "
            f"weight={word.display_weight:.2f}"
        )


@cli.command()
@click.argument("input_file", type=click.Path(exists=True))
@click.option("-s", "--start", type=float, default=0.0, help="Start position in seconds")
@click.option("-u", "--until", type=float, default=None, help="Stop position in seconds")
@click.option("-r", "--rate", type=float, default=None, help=f"Playback rate (default: {config.rate})")
@click.option("--fps", type=int, default=None, help=f"Frames per second (default: {config.fps})")
@click.option("-m", "--mode", type=MODE_CHOICE, default=None, help=f"Activation mode (default: {config.default_mode})")
def play(
    input_file: str,
    start: float,
    until: Optional[float],
    rate: Optional[float],
    fps: Optional[int],
    mode: Optional[str],
):
    """
    Preview word-by-word sync in real time.
    """
    transcript = _load(input_file)
    sync = _make_sync(mode, None)
    clock = WallClock(transcript.duration, rate=rate or config.rate)

    logger.header(f"Playing: {Path(input_file).name} ({sync.mode.value} mode)")

    with Live(Text(), console=logger.console, auto_refresh=False) as live:

        def show(frame: SyncFrame) -> None:
            live.update(render_frame(frame), refresh=True)

        with PlaybackDriver(clock, sync, on_frame=show) as driver:
            driver.load(transcript)
            clock.seek(start)
            clock.play()
            try:
                driver.run(fps=fps or config.fps, until=until)
            except KeyboardInterrupt:
                clock.pause()

    logger.success(f"Stopped at {format_time(clock.current_position())}")


@cli.command()
def info():
    """
    Show configuration.
    """
    logger.header("Read-Along Sync")

    logger.console.print("[bold]Config:[/bold]")
    logger.console.print(f"  Settings file: {config.config_path}")
    logger.console.print(f"  Found:         {'yes' if config.config_path.exists() else 'no (defaults)'}")

    logger.console.print("\n[bold]Sync:[/bold]")
    logger.console.print(f"  Epsilon:       {config.epsilon} s")
    logger.console.print(f"  Mode:          {config.default_mode}")
    logger.console.print(f"  Balanced:      {config.balanced_index}")

    logger.console.print("\n[bold]Playback:[/bold]")
    logger.console.print(f"  FPS:           {config.fps}")
    logger.console.print(f"  Rate:          {config.rate}")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
