"""Greedy line segmentation over the annotated word stream.

WHY: Lines are decided word by word from local signals, but two global
constraints still apply: no line may exceed the maximum word count, and a
very long sentence should become evenly sized lines rather than a long line
followed by a stub.

HOW: GreedySegmenter is an explicit state machine over an arena of words
with an index cursor. In the ACCUMULATING state each step consumes one
sentence: long sentences go to split_evenly(); other sentences are scanned
word by word through decide_break(), with find_best_cut() cutting a pending
line that reached the maximum. When the cursor passes the last word the
machine moves to COMPLETED.

RULES:
- Sentences end at a word flagged is_sentence_end or at the end of input.
- Every word lands in exactly one line, in input order.
- The end of input always closes the pending line, even a single word.
"""

from __future__ import annotations

import enum
import logging
from typing import Sequence

from follow_along.models import AnnotatedWord, Line
from follow_along.presets import SegmentationConfig
from follow_along.scoring import BreakContext, decide_break
from follow_along.splitter import find_best_cut, split_evenly

logger = logging.getLogger(__name__)


class SegmenterState(enum.Enum):
    ACCUMULATING = "accumulating"
    COMPLETED = "completed"


class GreedySegmenter:
    """Single-use segmenter for one word stream."""

    def __init__(self, words: Sequence[AnnotatedWord], config: SegmentationConfig) -> None:
        self.words = list(words)
        self.config = config
        self.cursor = 0
        self.pending: list[AnnotatedWord] = []
        self.lines: list[Line] = []
        self.state = SegmenterState.ACCUMULATING if self.words else SegmenterState.COMPLETED

    def run(self) -> list[Line]:
        while self.state is SegmenterState.ACCUMULATING:
            self.step()
        return self.lines

    def step(self) -> None:
        """Consume the sentence starting at the cursor."""
        end = self._sentence_end(self.cursor)
        size = end - self.cursor
        if size > self.config.long_sentence_factor * self.config.max_words_per_segment:
            self.lines.extend(split_evenly(self.words[self.cursor:end], self.config))
        else:
            for index in range(self.cursor, end):
                self._accumulate(index)
            self._emit(len(self.pending))

        self.cursor = end
        if self.cursor >= len(self.words):
            self.state = SegmenterState.COMPLETED

    def _sentence_end(self, start: int) -> int:
        """Index one past the sentence that begins at ``start``."""
        for index in range(start, len(self.words)):
            if self.words[index].is_sentence_end:
                return index + 1
        return len(self.words)

    def _accumulate(self, index: int) -> None:
        word = self.words[index]
        self.pending.append(word)
        is_last = index == len(self.words) - 1
        ctx = BreakContext(
            word=word,
            current_count=len(self.pending),
            next_word=None if is_last else self.words[index + 1],
            is_last=is_last,
        )
        decision = decide_break(ctx, self.config)
        if decision.should_break:
            self._emit(len(self.pending))
        elif len(self.pending) >= self.config.max_words_per_segment:
            self._emit(find_best_cut(self.pending, self.config))

    def _emit(self, count: int) -> None:
        if count <= 0:
            return
        self.lines.append(Line(tuple(self.pending[:count])))
        self.pending = self.pending[count:]


def segment_words(words: Sequence[AnnotatedWord], config: SegmentationConfig) -> list[Line]:
    """Cut an annotated word stream into lines."""
    lines = GreedySegmenter(words, config).run()
    logger.debug("Segmented %d words into %d lines", len(words), len(lines))
    return lines
