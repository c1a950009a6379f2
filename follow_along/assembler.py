"""Render lines into the output transcript."""

from __future__ import annotations

from typing import Sequence

from follow_along.models import AnnotatedWord, Line, Transcript, TranscriptItem


def word_item(word: AnnotatedWord) -> TranscriptItem:
    return TranscriptItem(text=word.text, start=word.start_ms, duration=word.duration_ms)


def line_item(line: Line) -> TranscriptItem:
    """A line item: start of its first word, duration to the end of its last."""
    start = line.first.start_ms
    return TranscriptItem(
        text=line.text,
        start=start,
        duration=line.last.end_ms - start,
        timeline=[word_item(w) for w in line.words],
    )


def assemble_transcript(lines: Sequence[Line]) -> Transcript:
    return Transcript(timeline=[line_item(line) for line in lines])
