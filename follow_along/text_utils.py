"""Source-text alignment and punctuation extraction.

WHY: Providers rarely return punctuation reliably: TTS word boundaries
usually come without it, ASR tokens sometimes carry it and sometimes emit
it as separate tokens. The literal text that was synthesized or
recognized is the authority on punctuation, so every token is aligned
back to it.

HOW: TextAligner walks the source text with a cursor. Each word is found
as the first unconsumed, case-insensitive, word-boundary-aware match at or
after the cursor; the cursor then moves to the end of the match so
repeated words align to successive occurrences. The punctuation run that
follows the match (optionally after whitespace) is read as the word's
trailing punctuation.

RULES:
- A word that cannot be found does not move the cursor.
- CJK tokens are matched without word-boundary checks (no spaces in CJK text).
- A run of separators (. , : ' / -) glued to a following word character
  (3.14, U.S.A, 10:30) is an intra-word separator, not trailing punctuation.
- Closing quotes and brackets are skipped when choosing the representative
  mark of a run.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

TRAILING_PUNCT_RE = re.compile(r"[.,!?;:，。！？；：…—]+$")
PUNCTUATION_ONLY_RE = re.compile(r"^[^\w\s]+$")
_PUNCT_RUN_RE = re.compile(r"\s*([^\w\s]+)")
_CJK_RE = re.compile(r"[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uac00-\ud7af]")
_DOTTED_CHARS_RE = re.compile(r"[\w.]")
_INTRA_WORD_RUN_RE = re.compile(r"^[.,:'/\-]+$")
_CLOSERS = frozenset("\"')]}»”’」』")


@dataclass(frozen=True)
class TextMatch:
    """Where a token was found in the source text."""

    start: int
    end: int
    punctuation: Optional[str] = None
    punctuation_end: Optional[int] = None


def strip_trailing_punctuation(word: str) -> str:
    return TRAILING_PUNCT_RE.sub("", word)


def trailing_punctuation(word: str) -> Optional[str]:
    """Punctuation embedded at the end of a raw token, e.g. "world." -> "."."""
    match = TRAILING_PUNCT_RE.search(word)
    if match is None or match.start() == 0:
        return None
    return match.group(0)


def is_punctuation_only(word: str) -> bool:
    return bool(PUNCTUATION_ONLY_RE.match(word))


def representative_mark(punctuation: Optional[str]) -> Optional[str]:
    """First meaningful mark of a run, skipping closing quotes and brackets."""
    if not punctuation:
        return None
    for char in punctuation:
        if char not in _CLOSERS:
            return char
    return punctuation[0]


def clean_word(word: str) -> str:
    """Lowercased word without surrounding punctuation, for list lookups."""
    return re.sub(r"^[^\w]+|[^\w]+$", "", word).lower()


def _word_pattern(word: str) -> re.Pattern:
    escaped = re.escape(word)
    if _CJK_RE.search(word):
        return re.compile(escaped, re.IGNORECASE)
    return re.compile(r"(?<!\w){}(?!\w)".format(escaped), re.IGNORECASE)


class TextAligner:
    """Cursor-based aligner of provider tokens to the source text.

    One aligner is created per segmentation call; it is not shared.
    """

    def __init__(self, text: str) -> None:
        self.text = text or ""
        self.cursor = 0

    def locate_word(self, word: str) -> Optional[TextMatch]:
        """Find the next occurrence of ``word`` and the punctuation after it."""
        if not word:
            return None
        match = _word_pattern(word).search(self.text, self.cursor)
        if match is None:
            return None

        self.cursor = match.end()
        punctuation, punctuation_end = self._punctuation_after(match.end())
        return TextMatch(
            start=match.start(),
            end=match.end(),
            punctuation=punctuation,
            punctuation_end=punctuation_end,
        )

    def locate_punctuation(self, token: str) -> Optional[TextMatch]:
        """Align a standalone punctuation token at the cursor.

        Only whitespace may separate the cursor from the token; otherwise the
        provider emitted punctuation the source text does not have.
        """
        index = self.text.find(token, self.cursor)
        if index < 0 or self.text[self.cursor:index].strip():
            return None
        self.cursor = index + len(token)
        return TextMatch(start=index, end=self.cursor)

    def is_glued_to_word(self, position: int) -> bool:
        """True if a word character immediately follows ``position``."""
        return position < len(self.text) and (
            self.text[position].isalnum() or self.text[position] == "_"
        )

    def dotted_compound(self, match: TextMatch) -> str:
        """The dotted run enclosing a match, e.g. "U.S.A." around "A"."""
        start, end = match.start, match.end
        while start > 0 and _DOTTED_CHARS_RE.match(self.text[start - 1]):
            start -= 1
        while end < len(self.text) and _DOTTED_CHARS_RE.match(self.text[end]):
            end += 1
        return self.text[start:end]

    def _punctuation_after(self, position: int) -> tuple[Optional[str], Optional[int]]:
        run = _PUNCT_RUN_RE.match(self.text, position)
        if run is None:
            return None, None
        if _INTRA_WORD_RUN_RE.match(run.group(1)) and self.is_glued_to_word(run.end(1)):
            return None, None
        return run.group(1), run.end(1)
