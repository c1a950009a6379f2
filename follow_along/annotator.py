"""Word annotation: timing, token signals and meaning groups in one pass.

WHY: The break scorer looks at one word at a time and must find every
signal it needs on that word: the silence after it, its punctuation, and
whether it sits inside a span that should not be split (a name, "in the
park", "to go"). This module produces those AnnotatedWords.

HOW:
  1. normalize_timings() converts seconds to ms and computes gaps.
  2. merge_hyphen_continuations() folds "-known" into the preceding "well".
  3. For English, entities and meaning groups are detected once over the
     whole text through the (guarded) language capability.
  4. TokenClassifier aligns each token to the text and classifies it; the
     aligned position is tested against the detected spans.

RULES:
- A token matching ^-\\w is appended to the previous token's text; the
  merged word spans both tokens and keeps the later token's gap.
- Meaning groups are detected for English only; a failing capability means
  "no meaning groups" and never aborts annotation.
- A word that is not found in the text is never in a meaning group.
- A word is at a meaning-group boundary when its end is the end of a group.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Sequence

from follow_along.classifier import TokenClassifier
from follow_along.config import is_english, normalize_language
from follow_along.models import AnnotatedWord, RawWordTiming, TimedToken
from follow_along.nlp import GuardedCapability, LanguageCapability, NullLanguageCapability, TextSpan
from follow_along.timing import normalize_timings

logger = logging.getLogger(__name__)

_HYPHEN_CONTINUATION_RE = re.compile(r"^-\w")


def merge_hyphen_continuations(tokens: Sequence[TimedToken]) -> list[TimedToken]:
    """Fold tokens starting with "-" into the token before them."""
    merged: list[TimedToken] = []
    for token in tokens:
        if merged and _HYPHEN_CONTINUATION_RE.match(token.text):
            prev = merged[-1]
            merged[-1] = TimedToken(
                text=prev.text + token.text,
                start_ms=prev.start_ms,
                end_ms=token.end_ms,
                gap_after_ms=token.gap_after_ms,
            )
        else:
            merged.append(token)
    return merged


def detect_groups(text: str, capability: LanguageCapability) -> list[TextSpan]:
    """Entities and meaning groups over the whole text, as one span list."""
    return capability.detect_entities(text) + capability.detect_meaning_groups(text)


def annotate_words(
    text: str,
    raw_timings: Sequence[RawWordTiming],
    language: Optional[str] = None,
    capability: Optional[LanguageCapability] = None,
) -> list[AnnotatedWord]:
    """Build the annotated word stream the segmenter consumes.

    Args:
        text: The literal text that was synthesized or recognized.
        raw_timings: Provider word timings, chronological.
        language: Optional language tag; only used as a hint.
        capability: Language capability; the no-op one when omitted.

    Returns:
        One AnnotatedWord per token after hyphen merging.
    """
    tokens = merge_hyphen_continuations(normalize_timings(raw_timings))
    guarded = GuardedCapability(capability or NullLanguageCapability())
    english = is_english(language)

    groups: list[TextSpan] = detect_groups(text, guarded) if english and text else []
    if groups:
        logger.debug("Detected %d meaning groups", len(groups))

    classifier = TokenClassifier(
        text,
        capability=guarded,
        english=english,
        check_boundaries=normalize_language(language) is not None,
    )

    words: list[AnnotatedWord] = []
    for token in tokens:
        signals = classifier.classify(token.text)
        in_group = signals.text_start is not None and any(
            g.contains(signals.text_start) for g in groups
        )
        at_boundary = signals.text_end is not None and any(
            g.end == signals.text_end for g in groups
        )
        words.append(AnnotatedWord(
            text=token.text,
            start_ms=token.start_ms,
            end_ms=token.end_ms,
            gap_after_ms=token.gap_after_ms,
            punctuation_after=signals.punctuation_after,
            punctuation_weight=signals.punctuation_weight,
            is_abbreviation=signals.is_abbreviation,
            is_number=signals.is_number,
            is_sentence_end=signals.is_sentence_end,
            is_in_meaning_group=in_group,
            is_at_meaning_group_boundary=at_boundary,
        ))
    return words
