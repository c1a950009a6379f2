"""Merge pass over completed lines.

WHY: The greedy pass sometimes leaves very short neighbours ("So" | "we
went") that read better as one line, and a tokenizer that splits "Mr" from
its "." can leave an abbreviation stranded at a line end.

HOW: merge_lines() walks the lines left to right, folding each line into
the previous result when can_merge() allows it.

RULES:
- A line ending in <abbreviation> "." is always merged with the next line.
- Never merge across a pause (gap >= pause threshold).
- Never merge after a sentence end or clause mark, unless the left line is
  a single word followed by less than merge_gap_ms of silence.
- Otherwise merge only if the result has at most the preferred word count.
"""

from __future__ import annotations

from typing import Sequence

from follow_along.models import Line
from follow_along.presets import CLAUSE_MARKS, SegmentationConfig
from follow_along.text_utils import is_punctuation_only, representative_mark


def ends_with_split_abbreviation(line: Line) -> bool:
    if len(line) < 2:
        return False
    abbreviation, period = line.words[-2], line.words[-1]
    return abbreviation.is_abbreviation and is_punctuation_only(period.text) and period.text.startswith(".")


def can_merge(left: Line, right: Line, config: SegmentationConfig) -> bool:
    if ends_with_split_abbreviation(left):
        return True

    last = left.last
    gap = last.gap_after_ms
    if gap >= config.pause_threshold_ms:
        return False

    mark = representative_mark(last.punctuation_after) or last.text[-1:]
    if last.is_sentence_end or mark in CLAUSE_MARKS:
        if not (len(left) == 1 and gap < config.merge_gap_ms):
            return False

    return len(left) + len(right) <= config.preferred_words_per_segment


def merge_lines(lines: Sequence[Line], config: SegmentationConfig) -> list[Line]:
    merged: list[Line] = []
    for line in lines:
        if merged and can_merge(merged[-1], line, config):
            merged[-1] = merged[-1].joined(line)
        else:
            merged.append(line)
    return merged
