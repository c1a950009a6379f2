"""Optional language capability: abbreviations, entities, meaning groups, sentences.

WHY: Punctuation and pauses alone split "Mr. Smith" or "in the park" in
awkward places. A real NLP pipeline knows which spans belong together and
where sentences really end, but it is heavy, English-centric for most of
what we need, and may be missing from a deployment. The segmenter must
work without it, so the pipeline is hidden behind a small capability
interface with a no-op default.

HOW: LanguageCapability is an ABC with four queries. NullLanguageCapability
answers "nothing detected" to all of them. SpacyLanguageCapability wraps a
spaCy pipeline: the trained English model (entities, noun chunks,
dependency parse) or a blank pipeline with the rule-based sentencizer for
other languages. load_capability() picks one for a language tag.

RULES:
- Capabilities are pure queries. GuardedCapability wraps them at the call
  site so a pipeline that raises on odd input degrades to "nothing found".
- Spans are character offsets into the text passed in (end exclusive).
- Meaning groups longer than max_group_words tokens are not reported.
- Loaded pipelines are cached per (language, model) and only read after
  loading; capability instances hold per-text state and are not shared.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional

from follow_along import config
from follow_along.presets import RELATIVE_CLAUSE_OPENERS

logger = logging.getLogger(__name__)

# spaCy entity labels that name a person, place or organization-like unit.
ENTITY_LABELS = frozenset({
    "PERSON", "NORP", "FAC", "ORG", "GPE", "LOC", "PRODUCT", "EVENT",
})


@dataclass(frozen=True)
class TextSpan:
    """A character span of the source text, end exclusive."""

    start: int
    end: int
    kind: str = "group"

    def contains(self, position: int) -> bool:
        return self.start <= position < self.end


class LanguageCapability(ABC):
    """Best-effort linguistic queries consumed by the annotator."""

    @abstractmethod
    def detect_abbreviation(self, text: str, word: str) -> bool:
        """True if ``word`` is used as an abbreviation in ``text``."""

    @abstractmethod
    def detect_entities(self, text: str) -> list[TextSpan]:
        """Spans of named entities (people, places, organizations)."""

    @abstractmethod
    def detect_meaning_groups(self, text: str) -> list[TextSpan]:
        """Spans of multi-word units that should stay on one line."""

    @abstractmethod
    def is_sentence_boundary(self, text: str, position: int) -> bool:
        """True if a sentence ends exactly at ``position``."""


class NullLanguageCapability(LanguageCapability):
    """Capability used when no language or no NLP pipeline is available."""

    def detect_abbreviation(self, text: str, word: str) -> bool:
        return False

    def detect_entities(self, text: str) -> list[TextSpan]:
        return []

    def detect_meaning_groups(self, text: str) -> list[TextSpan]:
        return []

    def is_sentence_boundary(self, text: str, position: int) -> bool:
        return False


class SpacyLanguageCapability(LanguageCapability):
    """Capability backed by a spaCy ``Language`` pipeline.

    Entity, abbreviation and meaning-group queries need a trained pipeline
    with a parser; on a blank pipeline they return nothing and only
    sentence boundaries are answered.
    """

    def __init__(self, nlp: Any, max_group_words: int = 6) -> None:
        self.nlp = nlp
        self.max_group_words = max_group_words
        # (text, doc) of the last parse, replaced as one value
        self._cache: Optional[tuple[str, Any]] = None

    def _parse(self, text: str) -> Any:
        cache = self._cache
        if cache is not None and cache[0] == text:
            return cache[1]
        doc = self.nlp(text)
        self._cache = (text, doc)
        return doc

    @property
    def _has_parser(self) -> bool:
        return "parser" in self.nlp.pipe_names

    def detect_abbreviation(self, text: str, word: str) -> bool:
        # The tokenizer keeps known abbreviations together with their period
        # ("Mr.", "e.g."), while a sentence-final period is split off.
        target = word.lower().rstrip(".")
        if not target:
            return False
        for token in self._parse(text):
            token_text = token.text.lower()
            if len(token_text) > 1 and token_text.endswith(".") and token_text.rstrip(".") == target:
                return True
        return False

    def detect_entities(self, text: str) -> list[TextSpan]:
        doc = self._parse(text)
        return [
            TextSpan(ent.start_char, ent.end_char, "entity")
            for ent in doc.ents
            if ent.label_ in ENTITY_LABELS and len(ent) >= 2
        ]

    def detect_meaning_groups(self, text: str) -> list[TextSpan]:
        doc = self._parse(text)
        if not self._has_parser:
            return []

        groups: list[TextSpan] = []
        for chunk in doc.noun_chunks:
            self._add_group(groups, doc, chunk.start, chunk.end - 1, "noun_phrase")

        for token in doc:
            if token.dep_ == "prep":
                self._add_group(groups, doc, token.i, token.right_edge.i, "prepositional")
            elif token.dep_ == "relcl":
                opener = token.left_edge
                if opener.lower_ in RELATIVE_CLAUSE_OPENERS:
                    self._add_group(groups, doc, opener.i, token.right_edge.i, "relative")
            elif token.tag_ == "TO" and token.head.pos_ in ("VERB", "AUX") and token.head.i > token.i:
                self._add_group(groups, doc, token.i, token.head.i, "infinitive")
        return groups

    def _add_group(self, groups: list[TextSpan], doc: Any, first: int, last: int, kind: str) -> None:
        while last > first and doc[last].is_punct:
            last -= 1
        size = last - first + 1
        if size < 2 or size > self.max_group_words:
            return
        groups.append(TextSpan(doc[first].idx, doc[last].idx + len(doc[last].text), kind))

    def is_sentence_boundary(self, text: str, position: int) -> bool:
        doc = self._parse(text)
        return any(sent.end_char == position for sent in doc.sents)


class GuardedCapability(LanguageCapability):
    """Wraps a capability so failures degrade to "nothing detected".

    Every exception and every malformed result is logged as a warning and
    replaced by the Null answer, so the segmenter never sees an error from
    the language layer.
    """

    def __init__(self, inner: LanguageCapability) -> None:
        self.inner = inner

    def detect_abbreviation(self, text: str, word: str) -> bool:
        try:
            return bool(self.inner.detect_abbreviation(text, word))
        except Exception:
            logger.warning("Abbreviation detection failed for %r", word, exc_info=True)
            return False

    def detect_entities(self, text: str) -> list[TextSpan]:
        try:
            return _valid_spans(self.inner.detect_entities(text), "entity detection")
        except Exception:
            logger.warning("Entity detection failed, continuing without it", exc_info=True)
            return []

    def detect_meaning_groups(self, text: str) -> list[TextSpan]:
        try:
            return _valid_spans(self.inner.detect_meaning_groups(text), "meaning group detection")
        except Exception:
            logger.warning("Meaning group detection failed, continuing without it", exc_info=True)
            return []

    def is_sentence_boundary(self, text: str, position: int) -> bool:
        try:
            return bool(self.inner.is_sentence_boundary(text, position))
        except Exception:
            logger.warning("Sentence boundary check failed at %d", position, exc_info=True)
            return False


def _valid_spans(spans: Any, what: str) -> list[TextSpan]:
    if not isinstance(spans, (list, tuple)) or not all(
        isinstance(s, TextSpan) and isinstance(s.start, int) and isinstance(s.end, int) and s.start < s.end
        for s in spans
    ):
        logger.warning("Malformed result from %s ignored: %r", what, spans)
        return []
    return list(spans)


@lru_cache(maxsize=8)
def _load_pipeline(language: str, model: str) -> Any:
    """Load (once) the spaCy pipeline for a base language code.

    Raises whatever spaCy raises for an unsupported language.
    """
    import spacy

    if language == "en":
        try:
            nlp = spacy.load(model, disable=["lemmatizer"])
            logger.debug("Loaded spaCy model %s", model)
            return nlp
        except OSError:
            logger.warning(
                "spaCy model %s is not installed; using a blank English pipeline", model
            )

    nlp = spacy.blank(language)
    nlp.add_pipe("sentencizer")
    return nlp


def load_capability(
    language: Optional[str],
    enabled: Optional[bool] = None,
    model: Optional[str] = None,
    max_group_words: int = 6,
) -> LanguageCapability:
    """Select the capability for a language tag.

    Returns NullLanguageCapability when no language is given, NLP is
    disabled, spaCy is not installed, or spaCy does not know the language.
    """
    base = config.normalize_language(language)
    if base is None:
        return NullLanguageCapability()
    if enabled is None:
        enabled = config.NLP_ENABLED
    if not enabled:
        return NullLanguageCapability()

    try:
        import spacy  # noqa: F401
    except ImportError:
        logger.warning("spaCy is not installed; segmenting without language analysis")
        return NullLanguageCapability()

    try:
        nlp = _load_pipeline(base, model or config.SPACY_ENGLISH_MODEL)
    except Exception as exc:
        logger.debug("No spaCy pipeline for language %s: %s", base, exc)
        return NullLanguageCapability()

    return SpacyLanguageCapability(nlp, max_group_words=max_group_words)
