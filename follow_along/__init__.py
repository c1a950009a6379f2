"""Follow-along transcript segmentation.

WHY: Reading along with synthesized or recognized speech needs the text cut
into reading-sized lines that change exactly when the audio does. Providers
only return flat word timings in seconds, so this package turns them, plus
the literal text that was spoken, into a millisecond line/word timeline.

HOW: The single public entry point is segment(text, raw_timings, language).
It coerces and validates the timings, annotates every word with its break
signals (punctuation from the source text, abbreviation and number tests,
meaning groups from the optional language capability), cuts lines with the
greedy break scorer, merges short neighbours and renders the Transcript.

RULES:
- segment() is the ONLY public API for producing a transcript.
- Empty timings return an empty transcript without further work.
- Heuristic disagreements never raise; only caller errors do (unknown
  preset, un-coercible timing items, unordered timings in strict mode).
- Each call works on its own data; presets are immutable and shared.
"""

import logging
from typing import Any, Iterable, Mapping, Optional, Union

from . import config as settings
from .annotator import annotate_words
from .assembler import assemble_transcript
from .merger import merge_lines
from .models import (
    AnnotatedWord,
    InvalidTimingError,
    Line,
    RawWordTiming,
    Transcript,
    TranscriptItem,
)
from .nlp import LanguageCapability, NullLanguageCapability, load_capability
from .parsing import parse_timings
from .presets import PRESETS, SegmentationConfig, get_preset
from .segmenter import segment_words
from .timing import validate_timings

logger = logging.getLogger(__name__)

__all__ = [
    "segment",
    "AnnotatedWord",
    "InvalidTimingError",
    "LanguageCapability",
    "Line",
    "NullLanguageCapability",
    "PRESETS",
    "RawWordTiming",
    "SegmentationConfig",
    "Transcript",
    "TranscriptItem",
]


def segment(
    text: str,
    raw_timings: Iterable[Union[RawWordTiming, Mapping[str, Any]]],
    language: Optional[str] = None,
    *,
    preset: Optional[str] = None,
    config: Optional[SegmentationConfig] = None,
    capability: Optional[LanguageCapability] = None,
    strict: Optional[bool] = None,
) -> Transcript:
    """Segment word timings into a follow-along transcript.

    Args:
        text: The literal text that was synthesized or recognized. Used for
            punctuation and position lookups; it need not tokenize like the
            timings.
        raw_timings: Chronological word timings in seconds, as RawWordTiming
            objects or provider dicts ({"text", "startTime", "endTime"}).
        language: Optional language tag hint ("en", "en-US", ...). Never
            inferred.
        preset: Preset name; defaults to FOLLOW_ALONG_PRESET.
        config: Custom SegmentationConfig; overrides preset entirely.
        capability: Language capability; resolved from language if omitted.
        strict: Raise on unordered or negative-duration timings instead of
            processing them best-effort. Defaults to FOLLOW_ALONG_STRICT_TIMINGS.

    Returns:
        The Transcript; its timeline is empty if and only if there are no words.

    Raises:
        ValueError: Unknown preset or a timing item that cannot be read.
        InvalidTimingError: Timing problems found while strict.
    """
    timings = parse_timings(raw_timings)
    if not timings:
        return Transcript(timeline=[])

    if strict is None:
        strict = settings.STRICT_TIMINGS
    problems = validate_timings(timings)
    if problems:
        if strict:
            raise InvalidTimingError("; ".join(problems))
        for problem in problems:
            logger.warning("Timing problem, continuing best-effort: %s", problem)

    cfg = config if config is not None else get_preset(preset or settings.DEFAULT_PRESET)

    if capability is None:
        capability = load_capability(language, max_group_words=cfg.max_meaning_group_words)

    words = annotate_words(text or "", timings, language=language, capability=capability)
    lines = merge_lines(segment_words(words, cfg), cfg)
    return assemble_transcript(lines)
