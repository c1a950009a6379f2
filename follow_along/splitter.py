"""Long-line splitting: where to cut a line that has grown too long.

WHY: The greedy scorer only cuts where it sees a signal. Run-on speech
without punctuation or pauses would otherwise grow lines past the maximum
a reader can follow, and a very long sentence cut greedily tends to leave
one long line followed by a stub.

HOW: find_best_cut() scores the last few positions of a pending line and
cuts after the best one, with a fixed fallback order when nothing scores.
split_evenly() handles sentences longer than long_sentence_factor x max
words: it picks the number of lines first, then places each cut near its
ideal even position, preferring the best-scoring candidate within a small
slack window.

RULES:
- A cut index is the number of words kept in the first part (1..len).
- Never cut after an abbreviation, inside a meaning group (except at its
  end) or after a no-break word that carries no punctuation.
- Candidates are scanned backward and only a strictly better score
  replaces the current best, so on ties the latest position wins.
- Even splitting keeps every line within [max(floor(n/k) - slack, 3),
  min(ceil(n/k) + slack, max)] words.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from follow_along.models import AnnotatedWord, Line
from follow_along.presets import SegmentationConfig
from follow_along.scoring import has_pause, is_no_break_word

logger = logging.getLogger(__name__)


def is_cut_allowed(word: AnnotatedWord) -> bool:
    if word.is_abbreviation:
        return False
    if word.is_in_meaning_group and not word.is_at_meaning_group_boundary:
        return False
    return not (is_no_break_word(word) and not word.punctuation_after)


def cut_score(
    words: Sequence[AnnotatedWord],
    index: int,
    config: SegmentationConfig,
    length_bonus: bool = True,
) -> Optional[int]:
    """Score of cutting after words[index]; None if the cut is not allowed.

    length_bonus rewards a first part of min..preferred words, which only
    makes sense when words[0] starts the line being cut.
    """
    word = words[index]
    if not is_cut_allowed(word):
        return None

    if word.is_sentence_end:
        score = config.split_sentence_end_score
    else:
        score = word.punctuation_weight * config.split_punctuation_factor
    if word.is_at_meaning_group_boundary:
        score += config.split_boundary_bonus
    if has_pause(word, config):
        score += config.split_pause_bonus
    if length_bonus and config.min_words_per_segment <= index + 1 <= config.preferred_words_per_segment:
        score += config.split_length_bonus
    return score


def _has_cut_signal(word: AnnotatedWord, config: SegmentationConfig) -> bool:
    return (
        word.is_at_meaning_group_boundary
        or word.punctuation_weight > 0
        or has_pause(word, config)
    )


def find_best_cut(words: Sequence[AnnotatedWord], config: SegmentationConfig) -> int:
    """Choose how many words of an over-long pending line to emit.

    Args:
        words: The pending line, at least one word.
        config: Segmentation settings.

    Returns:
        The cut index: words[:cut] becomes a line, words[cut:] stays pending.
    """
    n = len(words)
    if n <= 1:
        return n

    lookback = min(config.split_lookback, n - 1)
    best_index, best_score = None, 0
    for index in range(n - 2, n - 2 - lookback, -1):
        score = cut_score(words, index, config)
        if score is not None and score > best_score:
            best_index, best_score = index, score

    if best_index is not None:
        logger.debug("Long line of %d words cut after word %d (score %d)", n, best_index + 1, best_score)
        return best_index + 1

    # Nothing in the window: a signal further back that still leaves at
    # least the preferred length, then a fixed length
    for index in range(n - 2 - lookback, config.preferred_words_per_segment - 2, -1):
        if is_cut_allowed(words[index]) and _has_cut_signal(words[index], config):
            return index + 1

    if n >= config.preferred_words_per_segment + 3:
        return config.preferred_words_per_segment
    return n


def split_evenly(words: Sequence[AnnotatedWord], config: SegmentationConfig) -> list[Line]:
    """Split a very long sentence into lines of similar length.

    The line count is chosen so the average line sits between the preferred
    and maximum length; each cut then moves at most even_split_slack words
    from its ideal position towards a better break point.
    """
    n = len(words)
    target = (config.preferred_words_per_segment + config.max_words_per_segment) // 2
    parts = max(1, math.ceil(n / target))
    while parts < n and math.ceil(n / parts) > config.max_words_per_segment:
        parts += 1
    if parts == 1:
        return [Line(tuple(words))]

    slack = config.even_split_slack
    lo = max(n // parts - slack, min(config.min_interior_words, n // parts), 1)
    hi = min(math.ceil(n / parts) + slack, config.max_words_per_segment)

    cuts: list[int] = []
    prev = 0
    for i in range(1, parts):
        ideal = (2 * i * n + parts) // (2 * parts)
        remaining_parts = parts - i
        best_cut, best_rank = None, None
        for offset in _offsets(slack):
            cut = ideal + offset
            size = cut - prev
            rest = n - cut
            if not (lo <= size <= hi and remaining_parts * lo <= rest <= remaining_parts * hi):
                continue
            score = cut_score(words, cut - 1, config, length_bonus=False)
            # Allowed cuts outrank disallowed ones; offsets come nearest first
            rank = (score is not None, score if score is not None else 0)
            if best_rank is None or rank > best_rank:
                best_cut, best_rank = cut, rank
        if best_cut is None:
            best_cut = prev + min(max(ideal - prev, lo), hi)
            best_cut = min(best_cut, n - remaining_parts)
        cuts.append(best_cut)
        prev = best_cut

    logger.debug("Evenly split %d-word sentence into %d lines at %s", n, parts, cuts)
    bounds = [0] + cuts + [n]
    return [Line(tuple(words[a:b])) for a, b in zip(bounds, bounds[1:]) if b > a]


def _offsets(slack: int) -> list[int]:
    """0, -1, +1, -2, +2, ... up to the slack."""
    offsets = [0]
    for step in range(1, slack + 1):
        offsets.extend((-step, step))
    return offsets
