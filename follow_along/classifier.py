"""Token classification: punctuation, abbreviations, numbers, sentence ends.

WHY: A period after "Mr", inside "3.14" or after "etc" is not a sentence
end, and treating it as one produces one-word lines that break reading
flow. Each token needs to know what punctuation really follows it and how
strong a break signal that punctuation is.

HOW: TokenClassifier aligns each token to the source text (TextAligner),
reads the punctuation run after it, then applies the abbreviation and
number tests. The representative mark of the run is looked up in
PUNCTUATION_WEIGHTS. For English, the manual abbreviation table is OR-ed
with the language capability.

RULES:
- Punctuation comes from the source text first, then from the token itself.
- Abbreviation: a period follows and the word (or the dotted compound it
  sits in, e.g. "U.S.A.") is in the abbreviation table.
- Number: cleaned to digits and separators, at least half the word's
  length, matching ^\\d+([.,]\\d+)*$ ("3.14", "1,000"; not "3rd").
- Abbreviations always get punctuation weight 0.
- Sentence end: . ! ? (or CJK equivalents) after a non-abbreviation,
  non-number. An ellipsis ends a sentence only if the capability confirms a
  sentence boundary there.
- A standalone "." right after an abbreviation belongs to it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from follow_along.nlp import LanguageCapability, NullLanguageCapability
from follow_along.presets import (
    COMMON_ABBREVIATIONS,
    PUNCTUATION_WEIGHTS,
    SENTENCE_ENDING_MARKS,
    SOFT_SENTENCE_ENDING_MARKS,
)
from follow_along.text_utils import (
    TextAligner,
    TextMatch,
    is_punctuation_only,
    representative_mark,
    strip_trailing_punctuation,
    trailing_punctuation,
)

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"^\d+([.,]\d+)*$")
_NON_NUMERIC_RE = re.compile(r"[^\d.,]")
_INTRA_WORD_TOKEN_RE = re.compile(r"^[.,:'/\-]+$")


@dataclass(frozen=True)
class TokenSignals:
    """Classification of one token.

    text_start/text_end locate the word in the source text (None when it
    could not be aligned).
    """

    punctuation_after: Optional[str] = None
    punctuation_weight: int = 0
    is_abbreviation: bool = False
    is_number: bool = False
    is_sentence_end: bool = False
    text_start: Optional[int] = None
    text_end: Optional[int] = None


def is_abbreviation_text(word: str, abbreviations: frozenset = COMMON_ABBREVIATIONS) -> bool:
    """Table lookup after stripping trailing periods and lowercasing."""
    stripped = word.rstrip(".").lower()
    return bool(stripped) and stripped in abbreviations


def is_number_text(word: str) -> bool:
    cleaned = _NON_NUMERIC_RE.sub("", word)
    return (
        len(cleaned) > 0
        and bool(_NUMBER_RE.match(cleaned))
        and len(cleaned) >= len(word) * 0.5
    )


def punctuation_weight(punctuation: Optional[str], is_abbreviation: bool = False) -> int:
    if not punctuation or is_abbreviation:
        return 0
    return PUNCTUATION_WEIGHTS.get(representative_mark(punctuation), 0)


class TokenClassifier:
    """Classifies the tokens of one text, in order.

    Holds the alignment cursor, so one instance serves exactly one
    segmentation call.
    """

    def __init__(
        self,
        text: str,
        capability: Optional[LanguageCapability] = None,
        english: bool = False,
        check_boundaries: bool = False,
    ) -> None:
        self.text = text or ""
        self.aligner = TextAligner(self.text)
        self.capability = capability or NullLanguageCapability()
        self.english = english
        self.check_boundaries = check_boundaries
        self._previous: Optional[TokenSignals] = None

    def classify(self, token_text: str) -> TokenSignals:
        """Classify the next token; tokens must be passed in input order."""
        if is_punctuation_only(token_text):
            signals = self._classify_punctuation(token_text)
        else:
            signals = self._classify_word(token_text)
        self._previous = signals
        return signals

    def _classify_word(self, token_text: str) -> TokenSignals:
        clean = strip_trailing_punctuation(token_text)
        match = self.aligner.locate_word(clean)
        if match is None:
            logger.debug("Word %r not found in source text", clean)

        punctuation = match.punctuation if match is not None else None
        if not punctuation:
            punctuation = trailing_punctuation(token_text)

        is_abbreviation = self._is_abbreviation(token_text, clean, punctuation, match)
        is_number = is_number_text(clean)
        mark = representative_mark(punctuation)

        is_sentence_end = False
        if mark is not None and not is_abbreviation and not is_number:
            is_sentence_end = self._ends_sentence(mark, match)

        return TokenSignals(
            punctuation_after=punctuation,
            punctuation_weight=punctuation_weight(punctuation, is_abbreviation),
            is_abbreviation=is_abbreviation,
            is_number=is_number,
            is_sentence_end=is_sentence_end,
            text_start=match.start if match is not None else None,
            text_end=match.end if match is not None else None,
        )

    def _classify_punctuation(self, token_text: str) -> TokenSignals:
        match = self.aligner.locate_punctuation(token_text)

        # "3" "." "14": the separator is part of the number
        if (
            match is not None
            and _INTRA_WORD_TOKEN_RE.match(token_text)
            and self.aligner.is_glued_to_word(match.end)
        ):
            return TokenSignals(text_start=match.start, text_end=match.end)

        previous = self._previous
        if previous is not None and previous.is_abbreviation and token_text.startswith("."):
            return TokenSignals(
                punctuation_after=token_text,
                is_abbreviation=True,
                text_start=match.start if match is not None else None,
                text_end=match.end if match is not None else None,
            )

        mark = representative_mark(token_text)
        return TokenSignals(
            punctuation_after=token_text,
            punctuation_weight=punctuation_weight(token_text),
            is_sentence_end=self._ends_sentence(mark, match, punctuation_end=match.end if match else None),
            text_start=match.start if match is not None else None,
            text_end=match.end if match is not None else None,
        )

    def _is_abbreviation(
        self,
        token_text: str,
        clean: str,
        punctuation: Optional[str],
        match: Optional[TextMatch],
    ) -> bool:
        candidates = [token_text]
        has_period = token_text.endswith(".") or bool(punctuation and punctuation.startswith("."))
        if match is not None:
            compound = self.aligner.dotted_compound(match)
            if compound.endswith("."):
                has_period = True
            candidates.append(compound)

        if has_period and any(is_abbreviation_text(strip_trailing_punctuation(c) or c) for c in candidates):
            return True
        if self.english and match is not None:
            return self.capability.detect_abbreviation(self.text, clean)
        return False

    def _ends_sentence(
        self,
        mark: Optional[str],
        match: Optional[TextMatch],
        punctuation_end: Optional[int] = None,
    ) -> bool:
        if mark in SENTENCE_ENDING_MARKS:
            return True
        if mark in SOFT_SENTENCE_ENDING_MARKS and self.check_boundaries:
            if punctuation_end is None and match is not None:
                punctuation_end = match.punctuation_end
            if punctuation_end is not None:
                return self.capability.is_sentence_boundary(self.text, punctuation_end)
        return False
