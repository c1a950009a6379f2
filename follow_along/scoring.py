"""Break scoring: should the current line end after this word?

WHY: Learners follow along line by line, so a line should end where a
reader would pause: sentence ends, clause punctuation, breathing pauses,
the end of a meaning group. No single signal is reliable on its own
(a comma in "1,000", a hesitation after "the"), so the decision combines
weighted signals with a fixed precedence of hard rules.

HOW: BreakContext is an immutable window: the word, the next word, the
length of the line so far and whether this is the last word. break_score()
sums the weighted signals; decide_break() applies the precedence rules and
returns a BreakDecision naming the rule that fired, so each rule can be
tested in isolation.

RULES (precedence, first match wins):
  1. last word                                   -> break
  2. inside a meaning group (not its end, not a sentence end) -> no break
  3. one-word line ending a sentence             -> break
  4. <=2-word line ending a sentence, then a pause -> break
  5. (score)
  6. below min words and score < 10              -> no break
  7. meaning-group boundary at >= min words      -> break
  8. look-ahead: relative/question/main-clause openers -> break
  9. at >= preferred words: any signal or score >= 5 -> break;
     within 3 of max: score >= 3                 -> break
 10. below preferred words: no signal and score < 8 -> no break
 11. score >= 8                                 -> break;
     comma/semicolon at >= min + 2 words, or followed by a pause,
     unless the mark arrives as the next token  -> break
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from follow_along.models import AnnotatedWord
from follow_along.presets import (
    COMMA_MARKS,
    MAIN_CLAUSE_OPENERS,
    NO_BREAK_WORDS,
    QUESTION_CLAUSE_OPENERS,
    RELATIVE_CLAUSE_OPENERS,
    SegmentationConfig,
)
from follow_along.text_utils import clean_word, is_punctuation_only, representative_mark


@dataclass(frozen=True)
class BreakContext:
    """Everything the break decision may look at."""

    word: AnnotatedWord
    current_count: int
    next_word: Optional[AnnotatedWord] = None
    is_last: bool = False


@dataclass(frozen=True)
class BreakDecision:
    should_break: bool
    score: int
    rule: str


def is_no_break_word(word: AnnotatedWord) -> bool:
    return clean_word(word.text) in NO_BREAK_WORDS


def has_pause(word: AnnotatedWord, config: SegmentationConfig) -> bool:
    """A pause that counts as a break signal.

    Pauses after no-break words ("the", "of", ...) only count when long.
    """
    if word.gap_after_ms >= config.long_pause_threshold_ms:
        return True
    return word.gap_after_ms >= config.pause_threshold_ms and not is_no_break_word(word)


def pause_score(word: AnnotatedWord, config: SegmentationConfig) -> int:
    if word.gap_after_ms >= config.long_pause_threshold_ms:
        return config.long_pause_bonus
    if word.gap_after_ms >= config.pause_threshold_ms and not is_no_break_word(word):
        return config.pause_bonus
    return 0


def has_signal(word: AnnotatedWord, config: SegmentationConfig) -> bool:
    """Punctuation, a pause, a meaning-group end or a sentence end."""
    return (
        word.punctuation_weight > 0
        or has_pause(word, config)
        or word.is_at_meaning_group_boundary
        or word.is_sentence_end
    )


def ends_with_comma(word: AnnotatedWord) -> bool:
    if representative_mark(word.punctuation_after) in COMMA_MARKS:
        return True
    return word.text[-1:] in COMMA_MARKS


def ends_with_clause_mark(word: AnnotatedWord) -> bool:
    mark = representative_mark(word.punctuation_after) or word.text[-1:]
    return mark in COMMA_MARKS or mark in (";", "；")


def break_score(ctx: BreakContext, config: SegmentationConfig) -> int:
    """Weighted sum of the break signals on the context's word."""
    word = ctx.word
    score = 0

    if word.punctuation_weight > 0 and not word.is_abbreviation:
        score += word.punctuation_weight

    if word.is_sentence_end:
        score += config.sentence_end_bonus

    score += pause_score(word, config)

    # Length only ever reinforces a real signal
    if has_signal(word, config):
        if ctx.current_count >= config.preferred_words_per_segment:
            score += config.preferred_length_bonus
        if ctx.current_count >= config.max_words_per_segment - config.near_max_window:
            score += config.near_max_bonus

    if word.is_at_meaning_group_boundary:
        score += config.meaning_group_boundary_bonus
    elif word.is_in_meaning_group:
        score += config.inside_meaning_group_penalty

    return score


def _lookahead_break(ctx: BreakContext, config: SegmentationConfig) -> bool:
    if ctx.next_word is None:
        return False
    next_clean = clean_word(ctx.next_word.text)
    minimum = config.min_words_per_segment

    if next_clean in RELATIVE_CLAUSE_OPENERS and ctx.current_count >= minimum:
        return True
    if next_clean in QUESTION_CLAUSE_OPENERS and ctx.current_count >= minimum + 1:
        return True
    return ends_with_comma(ctx.word) and next_clean in MAIN_CLAUSE_OPENERS


def _next_is_punctuation(ctx: BreakContext) -> bool:
    return ctx.next_word is not None and is_punctuation_only(ctx.next_word.text)


def decide_break(ctx: BreakContext, config: SegmentationConfig) -> BreakDecision:
    """Apply the break rules in precedence order."""
    word = ctx.word
    count = ctx.current_count

    if ctx.is_last:
        return BreakDecision(True, 0, "last_word")

    if word.is_in_meaning_group and not word.is_sentence_end and not word.is_at_meaning_group_boundary:
        return BreakDecision(False, 0, "inside_meaning_group")

    if count == 1 and word.is_sentence_end:
        return BreakDecision(True, 0, "one_word_sentence")

    if count <= 2 and word.is_sentence_end and word.gap_after_ms >= config.pause_threshold_ms:
        return BreakDecision(True, 0, "short_sentence_with_pause")

    score = break_score(ctx, config)

    if count < config.min_words_per_segment and score < config.early_break_score:
        return BreakDecision(False, score, "below_min_words")

    if word.is_at_meaning_group_boundary and count >= config.min_words_per_segment:
        return BreakDecision(True, score, "meaning_group_boundary")

    if _lookahead_break(ctx, config):
        return BreakDecision(True, score, "clause_lookahead")

    signal = (
        word.punctuation_weight > 0
        or has_pause(word, config)
        or word.is_at_meaning_group_boundary
    )

    if count >= config.preferred_words_per_segment:
        if signal or score >= config.preferred_break_score:
            return BreakDecision(True, score, "preferred_length")
        if (
            count >= config.max_words_per_segment - config.relaxed_window
            and score >= config.relaxed_break_score
        ):
            return BreakDecision(True, score, "near_max_length")
    elif not signal and score < config.break_score:
        return BreakDecision(False, score, "below_preferred_length")

    if score >= config.break_score:
        return BreakDecision(True, score, "score_threshold")

    # A standalone "," token still to come carries the break itself
    if ends_with_clause_mark(word) and not _next_is_punctuation(ctx):
        if count >= config.min_words_per_segment + 2:
            return BreakDecision(True, score, "clause_punctuation")
        if word.gap_after_ms >= config.pause_threshold_ms:
            return BreakDecision(True, score, "clause_punctuation_pause")

    return BreakDecision(False, score, "accumulate")
