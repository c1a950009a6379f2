"""Coerce provider-shaped word timings into RawWordTiming objects.

WHY: Provider adapters hand over word timings as JSON-ish dicts whose field
names differ between services ("startTime" from the TTS adapters, "start"
or "start_time" from ASR exports). The segmenter should accept any of these
without each caller writing its own mapping.

HOW: Each item is either passed through (already a RawWordTiming) or read
from a mapping using a short list of accepted key aliases. Times are
converted with float().

RULES:
- Text is stripped of surrounding whitespace; empty tokens are dropped.
- A dict without a start time raises ValueError; a missing end time
  defaults to the start time (zero-length token).
- Order is preserved exactly; nothing is sorted.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from follow_along.models import RawWordTiming

_TEXT_KEYS = ("text", "word", "t")
_START_KEYS = ("startTime", "start_time", "start", "s")
_END_KEYS = ("endTime", "end_time", "end", "e")


def _first_present(item: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in item and item[key] is not None:
            return item[key]
    return None


def parse_timing(item: RawWordTiming | Mapping[str, Any]) -> RawWordTiming | None:
    """Convert one provider item; returns None for empty tokens."""
    if isinstance(item, RawWordTiming):
        text = item.text.strip()
        if not text:
            return None
        if text == item.text:
            return item
        return RawWordTiming(text=text, start_time=item.start_time, end_time=item.end_time)

    if not isinstance(item, Mapping):
        raise ValueError("Unsupported word timing item: {!r}".format(item))

    text = _first_present(item, _TEXT_KEYS)
    if text is None or not str(text).strip():
        return None

    start = _first_present(item, _START_KEYS)
    if start is None:
        raise ValueError("Word timing {!r} has no start time".format(item))
    end = _first_present(item, _END_KEYS)
    if end is None:
        end = start

    return RawWordTiming(
        text=str(text).strip(),
        start_time=float(start),
        end_time=float(end),
    )


def parse_timings(items: Iterable[RawWordTiming | Mapping[str, Any]]) -> list[RawWordTiming]:
    """Convert a sequence of provider items, dropping empty tokens."""
    timings: list[RawWordTiming] = []
    for item in items:
        timing = parse_timing(item)
        if timing is not None:
            timings.append(timing)
    return timings
