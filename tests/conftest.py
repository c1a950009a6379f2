"""Shared test fixtures for the follow_along test suite.

WHY: Most tests need the same few building blocks: word timings laid out on
a regular grid, hand-built AnnotatedWords for the pure scoring functions,
and language capabilities with known answers (or known failures).
Centralizing them keeps every test module focused on the rule it checks.

HOW: Fixtures return factory callables so each test can shape its own data.
Capabilities are small LanguageCapability subclasses defined here.

RULES:
- Timings are in seconds, like provider input; annotated words are in ms.
- Capabilities never import spaCy; spaCy-backed tests live in test_nlp.py.
"""

from typing import List, Optional, Sequence

import pytest

from follow_along.models import AnnotatedWord, RawWordTiming
from follow_along.nlp import LanguageCapability, TextSpan


def _make_timings(
    texts: Sequence[str],
    start: float = 0.0,
    step: float = 0.3,
    length: float = 0.25,
) -> List[RawWordTiming]:
    """One timing per text, each ``step`` seconds after the previous one."""
    return [
        RawWordTiming(text=text, start_time=round(start + i * step, 3), end_time=round(start + i * step + length, 3))
        for i, text in enumerate(texts)
    ]


def _make_word(text: str = "word", start_ms: int = 0, end_ms: int = 200, **signals) -> AnnotatedWord:
    return AnnotatedWord(text=text, start_ms=start_ms, end_ms=end_ms, **signals)


class SpanCapability(LanguageCapability):
    """Capability with fixed answers, located by substring in the text."""

    def __init__(
        self,
        entities: Sequence[str] = (),
        groups: Sequence[str] = (),
        abbreviations: Sequence[str] = (),
        boundaries: Sequence[int] = (),
    ):
        self.entities = list(entities)
        self.groups = list(groups)
        self.abbreviations = {a.lower() for a in abbreviations}
        self.boundaries = set(boundaries)

    @staticmethod
    def _spans(text: str, phrases: Sequence[str], kind: str) -> List[TextSpan]:
        spans = []
        for phrase in phrases:
            index = text.find(phrase)
            if index >= 0:
                spans.append(TextSpan(index, index + len(phrase), kind))
        return spans

    def detect_abbreviation(self, text: str, word: str) -> bool:
        return word.lower() in self.abbreviations

    def detect_entities(self, text: str) -> List[TextSpan]:
        return self._spans(text, self.entities, "entity")

    def detect_meaning_groups(self, text: str) -> List[TextSpan]:
        return self._spans(text, self.groups, "group")

    def is_sentence_boundary(self, text: str, position: int) -> bool:
        return position in self.boundaries


class RaisingCapability(LanguageCapability):
    """Capability whose every query fails."""

    def detect_abbreviation(self, text: str, word: str) -> bool:
        raise RuntimeError("abbreviation model crashed")

    def detect_entities(self, text: str) -> List[TextSpan]:
        raise RuntimeError("entity model crashed")

    def detect_meaning_groups(self, text: str) -> List[TextSpan]:
        raise RuntimeError("parser crashed")

    def is_sentence_boundary(self, text: str, position: int) -> bool:
        raise RuntimeError("sentencizer crashed")


class MalformedCapability(LanguageCapability):
    """Capability returning data of the wrong shape."""

    def detect_abbreviation(self, text: str, word: str) -> bool:
        return False

    def detect_entities(self, text: str):
        return "not a list"

    def detect_meaning_groups(self, text: str):
        return [(0, 5)]

    def is_sentence_boundary(self, text: str, position: int) -> bool:
        return False


@pytest.fixture
def make_timings():
    """Factory for RawWordTiming lists on a regular time grid."""
    return _make_timings


@pytest.fixture
def make_word():
    """Factory for AnnotatedWord with default timing and no signals."""
    return _make_word


@pytest.fixture
def span_capability():
    """Factory for a capability with fixed entity/group/boundary answers."""

    def factory(
        entities: Sequence[str] = (),
        groups: Sequence[str] = (),
        abbreviations: Sequence[str] = (),
        boundaries: Optional[Sequence[int]] = None,
    ) -> SpanCapability:
        return SpanCapability(entities, groups, abbreviations, boundaries or ())

    return factory


@pytest.fixture
def raising_capability():
    return RaisingCapability()


@pytest.fixture
def malformed_capability():
    return MalformedCapability()


def line_texts(transcript) -> List[str]:
    return [item.text for item in transcript.timeline]


def line_sizes(transcript) -> List[int]:
    return [len(item.timeline) for item in transcript.timeline]


@pytest.fixture
def texts_of():
    """Line texts of a Transcript."""
    return line_texts


@pytest.fixture
def sizes_of():
    """Word counts of the lines of a Transcript."""
    return line_sizes
