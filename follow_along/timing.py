"""Timing normalization: provider seconds to integer milliseconds.

WHY: Providers report float seconds. Players and the break scorer work in
integer milliseconds, and the silence after each word is the strongest
audio signal for a line break.

HOW: Each start/end is rounded half away from zero via Decimal so that
binary float noise (0.1235 stored as 0.12349999...) cannot flip a
millisecond. gap_after_ms is the next token's start minus this token's end.

RULES:
- start_ms = round(start_time * 1000), end_ms = round(end_time * 1000)
- gap_after_ms[i] = start_ms[i+1] - end_ms[i]; 0 for the final token
- Negative gaps and durations pass through unmodified
- Tokens are never re-sorted; validate_timings() reports ordering problems
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from follow_along.models import RawWordTiming, TimedToken


def seconds_to_ms(seconds: float) -> int:
    """Convert seconds to integer milliseconds, rounding half away from zero."""
    return int((Decimal(repr(seconds)) * 1000).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def normalize_timings(raw_timings: Sequence[RawWordTiming]) -> list[TimedToken]:
    """Convert raw timings to millisecond tokens with the gap after each one."""
    spans = [
        (raw.text.strip(), seconds_to_ms(raw.start_time), seconds_to_ms(raw.end_time))
        for raw in raw_timings
    ]

    tokens: list[TimedToken] = []
    for i, (text, start_ms, end_ms) in enumerate(spans):
        gap_after_ms = spans[i + 1][1] - end_ms if i < len(spans) - 1 else 0
        tokens.append(TimedToken(
            text=text,
            start_ms=start_ms,
            end_ms=end_ms,
            gap_after_ms=gap_after_ms,
        ))
    return tokens


def validate_timings(raw_timings: Sequence[RawWordTiming]) -> list[str]:
    """Describe every ordering or duration problem in the input.

    Returns an empty list for well-formed input: chronological,
    non-overlapping tokens with end >= start.
    """
    problems: list[str] = []
    for i, raw in enumerate(raw_timings):
        if raw.end_time < raw.start_time:
            problems.append(
                "token {} ({!r}) ends before it starts ({} < {})".format(
                    i, raw.text, raw.end_time, raw.start_time
                )
            )
        if i == 0:
            continue
        prev = raw_timings[i - 1]
        if raw.start_time < prev.start_time:
            problems.append(
                "token {} ({!r}) starts before token {} ({!r})".format(
                    i, raw.text, i - 1, prev.text
                )
            )
        elif raw.start_time < prev.end_time:
            problems.append(
                "token {} ({!r}) overlaps token {} ({!r})".format(
                    i, raw.text, i - 1, prev.text
                )
            )
    return problems
