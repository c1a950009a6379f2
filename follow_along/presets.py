"""Segmentation presets and linguistic constants.

WHY: Different reading contexts want different line shapes. Follow-along
reading for learners prefers short lines that break on every breathing
point, while the older "classic" tuning produced longer lines. Centralizing
the limits, thresholds and scoring weights as importable constants lets
callers select a preset by name without knowing the details, and supports
concurrent segmentation with different presets (no global state).

HOW: Each preset is a frozen SegmentationConfig dataclass holding hard
limits (word counts), pause thresholds and the named scoring weights used
by the break scorer and the long-line splitter. The PRESETS dict maps
preset names to their config values. Word lists are frozensets.

RULES:
- Presets are frozen; never mutate them at runtime. Use
  dataclasses.replace() to derive a custom config.
- Word lists are lowercase and compared against cleaned, lowercased text.
- "default" is an alias for "follow_along".
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


# Punctuation weights (higher = stronger break point)
PUNCTUATION_WEIGHTS: Mapping[str, int] = MappingProxyType({
    # Sentence endings
    ".": 10,
    "!": 10,
    "?": 10,
    "。": 10,
    "！": 10,
    "？": 10,
    "…": 10,
    # Clauses
    ",": 5,
    ";": 6,
    "，": 5,
    "；": 6,
    # Phrases
    ":": 4,
    "：": 4,
    "-": 2,
    "—": 3,
})

SENTENCE_ENDING_MARKS = frozenset({".", "!", "?", "。", "！", "？"})

# Marks that only end a sentence when a sentence-boundary check agrees.
SOFT_SENTENCE_ENDING_MARKS = frozenset({"…"})

CLAUSE_MARKS = frozenset({",", ";", ":", "，", "；", "："})

COMMA_MARKS = frozenset({",", "，"})

# Abbreviations that end with a period but must not cause sentence breaks.
COMMON_ABBREVIATIONS = frozenset({
    # Titles and honorifics
    "mr", "mrs", "ms", "dr", "prof", "sr", "jr", "esq",
    # Time and dates
    "am", "pm", "a.m", "p.m", "bc", "ad", "bce", "ce",
    # Places
    "us", "usa", "uk", "u.s", "u.s.a", "u.k",
    # Generic
    "etc", "vs", "v", "e.g", "i.e", "ex", "inc", "ltd", "corp", "co",
    "st", "ave", "blvd", "rd", "ct", "ln", "pl", "pkwy",
    # Academic degrees
    "ph.d", "m.d", "b.a", "m.a", "b.s", "m.s",
    # Units
    "ft", "in", "lb", "oz", "kg", "g", "mg", "ml", "l",
    # Technical
    "ca", "approx", "max", "min",
})

# Function words whose following pause is usually a disfluency, not a break.
NO_BREAK_WORDS = frozenset({
    # Articles
    "a", "an", "the",
    # Short prepositions that attach to the following noun
    "of", "to", "in", "on", "at", "for", "by", "with", "from", "about",
    # Possessives
    "my", "your", "his", "her", "its", "our", "their",
    # Light conjunctions
    "and", "or", "nor",
})

RELATIVE_CLAUSE_OPENERS = frozenset({"who", "which", "that", "whom", "whose"})

QUESTION_CLAUSE_OPENERS = frozenset({"what", "how", "why", "when", "where"})

MAIN_CLAUSE_OPENERS = frozenset({
    "i", "you", "he", "she", "it", "we", "they",
    "this", "that", "these", "those",
})


@dataclass(frozen=True)
class SegmentationConfig:
    """Immutable tuning for one segmentation run.

    Attributes:
        min_words_per_segment: Lines shorter than this only break on a very
            strong signal.
        max_words_per_segment: Hard upper bound enforced by the long-line
            splitter.
        preferred_words_per_segment: Length at which weak signals start to
            break, and the merge ceiling for short adjacent lines.
        pause_threshold_ms: Gap that counts as a pause.
        long_pause_threshold_ms: Gap that counts as a long pause.
    """

    name: str = "follow_along"

    min_words_per_segment: int = 1
    max_words_per_segment: int = 12
    preferred_words_per_segment: int = 6

    pause_threshold_ms: int = 250
    long_pause_threshold_ms: int = 500

    # Break score weights
    sentence_end_bonus: int = 12
    long_pause_bonus: int = 8
    pause_bonus: int = 4
    preferred_length_bonus: int = 3
    near_max_bonus: int = 2
    near_max_window: int = 2
    meaning_group_boundary_bonus: int = 5
    inside_meaning_group_penalty: int = -3

    # Break score thresholds
    early_break_score: int = 10
    break_score: int = 8
    preferred_break_score: int = 5
    relaxed_break_score: int = 3
    relaxed_window: int = 3

    # Long-line splitting
    split_lookback: int = 5
    split_sentence_end_score: int = 15
    split_punctuation_factor: int = 2
    split_boundary_bonus: int = 8
    split_pause_bonus: int = 3
    split_length_bonus: int = 2
    long_sentence_factor: int = 2
    even_split_slack: int = 2
    min_interior_words: int = 3

    # Merging
    merge_gap_ms: int = 100

    # Meaning groups longer than this are not protected
    max_meaning_group_words: int = 6


PRESET_FOLLOW_ALONG = SegmentationConfig()

# Earlier tuning: longer lines, more tolerant pause detection.
PRESET_CLASSIC = SegmentationConfig(
    name="classic",
    min_words_per_segment=3,
    max_words_per_segment=15,
    preferred_words_per_segment=8,
    pause_threshold_ms=300,
    long_pause_threshold_ms=600,
)

PRESETS: Mapping[str, SegmentationConfig] = MappingProxyType({
    "follow_along": PRESET_FOLLOW_ALONG,
    "classic": PRESET_CLASSIC,
    "default": PRESET_FOLLOW_ALONG,  # Alias
})


def get_preset(name: str) -> SegmentationConfig:
    """Resolve a preset name to its config.

    Raises:
        ValueError: If the preset name is not recognized.
    """
    try:
        return PRESETS[name]
    except KeyError:
        raise ValueError(
            "Unknown preset '{}'. Available: {}".format(
                name, ", ".join(PRESETS.keys())
            )
        ) from None
