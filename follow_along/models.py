"""Data models for follow-along transcript segmentation.

WHY: Speech providers hand over flat word timings in seconds. The segmenter
needs millisecond timings enriched with punctuation, abbreviation, number
and meaning-group metadata, and UI consumers need a nested line/word
timeline. Each stage of the pipeline gets its own well-typed shape so the
stages can be tested independently.

HOW: A small hierarchy of types:
  RawWordTiming  : provider input, seconds-based (frozen dataclass)
  TimedToken     : one token after millisecond normalization
  AnnotatedWord  : a token enriched with break signals (frozen dataclass)
  Line           : an ordered, non-empty run of AnnotatedWords
  TranscriptItem : output item; a line carries a nested word timeline
  Transcript     : output root (pydantic, serializable)

RULES:
- RawWordTiming times are float seconds; everything downstream is integer ms.
- AnnotatedWord and Line are immutable once built.
- TranscriptItem.timeline is None on leaf (word) items.
- Transcript.to_dict() produces the exact wire shape consumed by players.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, Field


class InvalidTimingError(ValueError):
    """Raised in strict mode when word timings are unordered or malformed."""


@dataclass(frozen=True)
class RawWordTiming:
    """A single token as reported by a speech provider.

    Attributes:
        text: The token text, possibly with punctuation attached.
        start_time: Start time in seconds.
        end_time: End time in seconds.
    """

    text: str
    start_time: float
    end_time: float


@dataclass(frozen=True)
class TimedToken:
    """A token with integer millisecond timing and the silence that follows it."""

    text: str
    start_ms: int
    end_ms: int
    gap_after_ms: int = 0


@dataclass(frozen=True)
class AnnotatedWord:
    """A word with timing and every signal the break scorer consumes.

    RULES:
    - gap_after_ms is 0 for the last word of the input.
    - punctuation_after keeps the raw run (e.g. "!!!"); punctuation_weight is
      derived from its representative mark.
    - punctuation_weight is 0 for abbreviations.
    - is_sentence_end is never True for abbreviations or numbers.
    """

    text: str
    start_ms: int
    end_ms: int
    gap_after_ms: int = 0
    punctuation_after: Optional[str] = None
    punctuation_weight: int = 0
    is_abbreviation: bool = False
    is_number: bool = False
    is_sentence_end: bool = False
    is_in_meaning_group: bool = False
    is_at_meaning_group_boundary: bool = False

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms


@dataclass(frozen=True)
class Line:
    """An ordered, non-empty run of consecutive annotated words."""

    words: tuple[AnnotatedWord, ...]

    def __post_init__(self) -> None:
        if not self.words:
            raise ValueError("A line must contain at least one word")

    def __len__(self) -> int:
        return len(self.words)

    @property
    def first(self) -> AnnotatedWord:
        return self.words[0]

    @property
    def last(self) -> AnnotatedWord:
        return self.words[-1]

    @property
    def text(self) -> str:
        return " ".join(w.text for w in self.words)

    def joined(self, other: "Line") -> "Line":
        """Return a new line with other's words appended."""
        return Line(self.words + other.words)


class TranscriptItem(BaseModel):
    """One entry of the output timeline.

    Top-level items are lines and carry the word-level breakdown in
    ``timeline``; word items leave it unset.
    """

    text: str = Field(description="Display text of the line or word.")
    start: int = Field(description="Start time in milliseconds.")
    duration: int = Field(description="Duration in milliseconds.")
    timeline: Optional[List["TranscriptItem"]] = Field(
        default=None,
        description="Word-level timeline of a line; absent on word items.",
    )


TranscriptItem.model_rebuild()


class Transcript(BaseModel):
    """Output root: the ordered list of reading-sized lines."""

    timeline: List[TranscriptItem] = Field(default_factory=list)

    def to_dict(self) -> dict:
        """Render the transcript in its wire shape (leaf items omit timeline)."""
        return self.model_dump(exclude_none=True)
