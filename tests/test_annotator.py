"""Tests for word annotation: hyphen merging and meaning groups.

WHY: The annotator is where the optional language capability meets the
deterministic core. A crashing or misbehaving capability must never abort
segmentation, and the meaning-group flags must land on exactly the right
words, because they override almost every other break rule.

HOW: Runs annotate_words() with fixed-answer, raising and malformed
capabilities and inspects the per-word flags.

RULES:
- Meaning groups are consulted for English only.
- A capability failure is logged as a warning and means "no groups".
- Hyphen continuations fold into the previous word before scoring.
"""

import logging

from follow_along.annotator import annotate_words, merge_hyphen_continuations
from follow_along.models import TimedToken


class TestHyphenContinuation:

    def test_merges_into_previous_token(self):
        tokens = [
            TimedToken("well", 0, 200, 0),
            TimedToken("-known", 200, 500, 100),
            TimedToken("fact", 600, 900, 0),
        ]
        merged = merge_hyphen_continuations(tokens)
        assert [t.text for t in merged] == ["well-known", "fact"]
        assert merged[0].start_ms == 0
        assert merged[0].end_ms == 500
        assert merged[0].gap_after_ms == 100

    def test_lone_dash_is_not_a_continuation(self):
        tokens = [TimedToken("wait", 0, 200, 0), TimedToken("-", 200, 250, 0)]
        assert len(merge_hyphen_continuations(tokens)) == 2

    def test_leading_continuation_is_kept(self):
        tokens = [TimedToken("-known", 0, 200, 0)]
        assert merge_hyphen_continuations(tokens)[0].text == "-known"

    def test_annotated_count_drops_by_one_per_merge(self, make_timings):
        words = annotate_words("a well-known fact", make_timings(["a", "well", "-known", "fact"]))
        assert [w.text for w in words] == ["a", "well-known", "fact"]


class TestAnnotateWords:

    def test_gaps_and_durations(self, make_timings):
        words = annotate_words("Hello world", make_timings(["Hello", "world"], step=0.95, length=0.25))
        assert words[0].gap_after_ms == 700
        assert words[0].duration_ms == 250
        assert words[1].gap_after_ms == 0

    def test_meaning_group_flags(self, make_timings, span_capability):
        text = "We walked in the park today"
        capability = span_capability(groups=["in the park"])
        words = annotate_words(text, make_timings(text.split()), language="en", capability=capability)
        flags = [(w.text, w.is_in_meaning_group, w.is_at_meaning_group_boundary) for w in words]
        assert flags == [
            ("We", False, False),
            ("walked", False, False),
            ("in", True, False),
            ("the", True, False),
            ("park", True, True),
            ("today", False, False),
        ]

    def test_entities_count_as_groups(self, make_timings, span_capability):
        text = "I met John Smith yesterday"
        capability = span_capability(entities=["John Smith"])
        words = annotate_words(text, make_timings(text.split()), language="en-US", capability=capability)
        assert words[2].is_in_meaning_group and not words[2].is_at_meaning_group_boundary
        assert words[3].is_at_meaning_group_boundary

    def test_groups_ignored_for_other_languages(self, make_timings, span_capability):
        text = "Wir gehen in den Park"
        capability = span_capability(groups=["in den Park"])
        words = annotate_words(text, make_timings(text.split()), language="de", capability=capability)
        assert not any(w.is_in_meaning_group for w in words)

    def test_unlocated_word_is_never_in_a_group(self, make_timings, span_capability):
        capability = span_capability(groups=["in the park"])
        words = annotate_words("in the park", make_timings(["in", "zzz", "park"]), language="en", capability=capability)
        assert not words[1].is_in_meaning_group

    def test_raising_capability_degrades_to_no_groups(self, make_timings, raising_capability, caplog):
        text = "Mr. Smith went to the store."
        timings = make_timings(["Mr", ".", "Smith", "went", "to", "the", "store"])
        with caplog.at_level(logging.WARNING, logger="follow_along.nlp"):
            words = annotate_words(text, timings, language="en", capability=raising_capability)
        assert len(words) == 7
        assert not any(w.is_in_meaning_group for w in words)
        assert words[0].is_abbreviation
        assert words[-1].is_sentence_end
        assert "failed" in caplog.text

    def test_malformed_capability_results_are_ignored(self, make_timings, malformed_capability, caplog):
        text = "We walked in the park"
        with caplog.at_level(logging.WARNING, logger="follow_along.nlp"):
            words = annotate_words(text, make_timings(text.split()), language="en", capability=malformed_capability)
        assert not any(w.is_in_meaning_group for w in words)
        assert "Malformed" in caplog.text

    def test_without_capability(self, make_timings):
        words = annotate_words("Hi there.", make_timings(["Hi", "there"]), language="en")
        assert words[1].is_sentence_end
        assert not any(w.is_in_meaning_group for w in words)
