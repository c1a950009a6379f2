"""End-to-end tests for segment(), the public entry point.

WHY: Players consume only the final Transcript. These tests pin down the
observable behavior: edge cases (empty input, one-word sentences),
abbreviation and number handling, pauses, long sentences, timing accuracy
and the conservation of words from input to output.

HOW: Calls segment() with literal text plus provider-style timings (as
RawWordTiming or dicts) and inspects the Transcript. Calls with a language
inject a capability explicitly so results do not depend on which spaCy
models happen to be installed.

RULES:
- timeline is empty if and only if there are no words.
- Every annotated word appears exactly once, in order.
- A line's start is its first word's start; its duration runs to the end
  of its last word.
"""

import logging
from dataclasses import replace

import pytest

from follow_along import InvalidTimingError, NullLanguageCapability, segment
from follow_along.annotator import annotate_words
from follow_along.models import RawWordTiming
from follow_along.presets import PRESET_FOLLOW_ALONG


def timings(*items):
    return [RawWordTiming(text, start, end) for text, start, end in items]


class TestEdgeCases:

    def test_empty_input(self):
        result = segment("", [])
        assert result.timeline == []
        assert result.to_dict() == {"timeline": []}

    def test_single_word(self):
        result = segment("Hello", timings(("Hello", 0, 0.5)))
        assert result.timeline[0].text == "Hello"

    @pytest.mark.parametrize("text, word", [
        ("Why?", "Why"),
        ("Yes!", "Yes"),
        ("No.", "No"),
        ("Wow!!!", "Wow"),
        ("Really???", "Really"),
    ])
    def test_single_word_sentence(self, text, word):
        result = segment(text, timings((word, 0, 0.5)))
        assert len(result.timeline) == 1
        assert result.timeline[0].text == word
        assert len(result.timeline[0].timeline) == 1

    def test_blank_tokens_only(self):
        result = segment("", [{"text": " ", "startTime": 0, "endTime": 0.1}])
        assert result.timeline == []


class TestAbbreviations:

    @pytest.mark.parametrize("text, tokens", [
        ("Mr. White", (("Mr", 0, 0.3), (".", 0.3, 0.35), ("White", 0.5, 0.8))),
        ("Dr. Smith", (("Dr", 0, 0.3), (".", 0.3, 0.35), ("Smith", 0.5, 0.9))),
    ])
    def test_title_stays_with_name(self, text, tokens):
        result = segment(text, timings(*tokens))
        first = result.timeline[0].text
        assert tokens[0][0] in first
        assert tokens[2][0] in first

    def test_dotted_abbreviation_stays_together(self):
        result = segment("U.S.A. is", timings(
            ("U", 0, 0.2), (".", 0.2, 0.25), ("S", 0.25, 0.4), (".", 0.4, 0.45),
            ("A", 0.45, 0.6), (".", 0.6, 0.65), ("is", 0.8, 1.0),
        ))
        assert len(result.timeline) == 1

    def test_etc(self):
        result = segment("books etc.", timings(("books", 0, 0.5), ("etc", 0.7, 1.0), (".", 1.0, 1.05)))
        assert len(result.timeline) == 1

    def test_complex_sentence(self):
        result = segment("Mr. Smith, who lives in the U.S.A., is happy.", timings(
            ("Mr", 0, 0.3), (".", 0.3, 0.35), ("Smith", 0.5, 0.9), (",", 0.9, 0.95),
            ("who", 1.1, 1.4), ("lives", 1.5, 1.9), ("in", 2.0, 2.2), ("the", 2.3, 2.5),
            ("U", 2.6, 2.8), (".", 2.8, 2.85), ("S", 2.85, 3.0), (".", 3.0, 3.05),
            ("A", 3.05, 3.2), (".", 3.2, 3.25), (",", 3.25, 3.3), ("is", 3.5, 3.7),
            ("happy", 3.8, 4.2), (".", 4.2, 4.25),
        ))
        first = result.timeline[0].text
        assert "Mr" in first and "Smith" in first
        lines_with_u = [item.text for item in result.timeline if "U . S . A" in item.text]
        assert len(lines_with_u) == 1


class TestNumbers:

    def test_decimal(self):
        result = segment("3.14 is", timings(("3", 0, 0.2), (".", 0.2, 0.25), ("14", 0.25, 0.5), ("is", 0.7, 0.9)))
        assert len(result.timeline) == 1

    def test_year(self):
        result = segment("2024. was", timings(("2024", 0, 0.5), (".", 0.5, 0.55), ("was", 0.8, 1.1)))
        assert len(result.timeline) > 0


class TestPunctuationAndPauses:

    def test_breaks_at_sentence_end(self, texts_of):
        result = segment("Hello world. How are you?", timings(
            ("Hello", 0, 0.5), ("world", 0.6, 1.0), ("How", 1.5, 1.8), ("are", 1.9, 2.1), ("you", 2.2, 2.5),
        ))
        assert texts_of(result) == ["Hello world", "How are you"]

    def test_standalone_period_with_pause(self):
        result = segment("First. Second", timings(("First", 0, 0.5), (".", 0.5, 0.55), ("Second", 0.9, 1.4)))
        assert len(result.timeline) == 2

    def test_commas_with_pauses(self, texts_of):
        result = segment("First, second, third", timings(
            ("First", 0, 0.5), (",", 0.5, 0.55), ("second", 0.8, 1.3), (",", 1.3, 1.35), ("third", 1.6, 2.0),
        ))
        assert texts_of(result) == ["First ,", "second ,", "third"]

    def test_comma_ends_a_line_of_several_words(self, make_timings, texts_of):
        text = "We bought red apples, green pears and yellow bananas today"
        words = [w.strip(",") for w in text.split()]
        result = segment(text, make_timings(words))
        assert texts_of(result) == ["We bought red apples", "green pears and yellow bananas today"]

    def test_long_pause_is_recorded(self):
        raw = timings(("Hello", 0, 0.5), ("world", 1.2, 1.7))
        words = annotate_words("Hello world", raw)
        assert words[0].gap_after_ms == 700
        assert len(segment("Hello world", raw).timeline) == 2

    def test_long_pause_below_classic_minimum(self):
        result = segment("Hello world", timings(("Hello", 0, 0.5), ("world", 1.2, 1.7)), preset="classic")
        assert len(result.timeline) == 1
        assert len(result.timeline[0].timeline) == 2

    def test_dialogue_of_short_responses(self, texts_of):
        result = segment("Why? Yes! No. Maybe.", timings(
            ("Why", 0, 0.4), ("Yes", 1.0, 1.3), ("No", 2.0, 2.3), ("Maybe", 3.0, 3.5),
        ))
        assert texts_of(result) == ["Why", "Yes", "No", "Maybe"]

    def test_mixed_scripts(self):
        result = segment("Hello 世界。How are you?", timings(
            ("Hello", 0, 0.5), ("世界", 0.6, 1.0), ("How", 1.5, 1.8), ("are", 1.9, 2.1), ("you", 2.2, 2.5),
        ))
        assert result.timeline[0].text == "Hello 世界"

    def test_long_sentence_breaks_at_commas(self, make_timings):
        text = ("The quick brown fox jumps over the lazy dog, and then the dog chases "
                "the fox through the forest, but the fox is too fast.")
        words = [w.strip(",.") for w in text.split()]
        result = segment(text, make_timings(words, step=0.25, length=0.2))
        assert len(result.timeline) > 1
        assert any(item.text.endswith("dog") for item in result.timeline)


class TestLineLength:

    def test_seventeen_words_without_punctuation(self, make_timings, sizes_of):
        words = ["The", "quick", "brown", "fox", "jumps", "over", "the", "lazy", "dog",
                 "and", "then", "runs", "very", "fast", "through", "the", "forest"]
        result = segment(" ".join(words), make_timings(words, step=0.3, length=0.25))
        assert len(result.timeline) > 1
        assert all(size <= 12 for size in sizes_of(result))

    def test_learning_sentence(self, make_timings, sizes_of):
        text = "The weather is nice today, so we decided to go for a walk in the park."
        words = [w.strip(",.") for w in text.split()]
        result = segment(text, make_timings(words))
        assert all(1 <= size <= 12 for size in sizes_of(result))
        assert result.timeline[0].text == "The weather is nice today"

    @pytest.mark.parametrize("count", [25, 30, 41, 60])
    def test_very_long_sentence_is_even(self, make_timings, sizes_of, count):
        words = ["word{}".format(i) for i in range(count)]
        text = " ".join(words) + "."
        sizes = sizes_of(segment(text, make_timings(words)))
        assert all(size >= 3 for size in sizes[1:-1])
        assert max(sizes) - min(sizes) <= 6
        assert max(sizes) <= 12

    def test_custom_config(self, make_timings, sizes_of):
        cfg = replace(PRESET_FOLLOW_ALONG, max_words_per_segment=5, preferred_words_per_segment=3)
        words = ["w{}".format(i) for i in range(17)]
        result = segment(" ".join(words), make_timings(words), config=cfg)
        assert all(size <= 5 for size in sizes_of(result))


class TestTiming:

    def test_seconds_to_milliseconds(self):
        result = segment("Hello world", timings(("Hello", 0.123, 0.456), ("world", 0.5, 0.789)))
        first_word = result.timeline[0].timeline[0]
        assert first_word.start == 123
        assert first_word.duration == 333

    def test_line_duration(self):
        result = segment("Hello world", timings(("Hello", 0, 0.5), ("world", 0.6, 1.1)))
        line = result.timeline[0]
        assert line.start == 0
        assert line.duration == 1100

    def test_line_timing_matches_words(self, make_timings):
        text = "One two three. Four five six seven, eight nine."
        words = [w.strip(",.") for w in text.split()]
        for item in segment(text, make_timings(words, start=1.0)).timeline:
            assert item.start == item.timeline[0].start
            last = item.timeline[-1]
            assert item.duration == last.start + last.duration - item.start


class TestConservation:

    def test_every_word_once_in_order(self, make_timings):
        text = "Mr. Smith said, well-known facts are 3.14 times better... Really? Yes!"
        tokens = ["Mr", ".", "Smith", "said", "well", "-known", "facts", "are", "3", ".", "14",
                  "times", "better", "Really", "Yes"]
        raw = make_timings(tokens)
        expected = [w.text for w in annotate_words(text, raw)]
        result = segment(text, raw)
        produced = [w.text for item in result.timeline for w in item.timeline]
        assert produced == expected
        assert sum(len(item.timeline) for item in result.timeline) == len(tokens) - 1

    def test_line_text_is_its_words(self, make_timings):
        text = "The weather is nice today, so we decided to go for a walk in the park."
        words = [w.strip(",.") for w in text.split()]
        for item in segment(text, make_timings(words)).timeline:
            assert item.text == " ".join(w.text for w in item.timeline)

    def test_leaf_items_have_no_timeline(self):
        result = segment("Hi there.", timings(("Hi", 0, 0.2), ("there", 0.3, 0.6)))
        data = result.to_dict()
        assert data == {"timeline": [{
            "text": "Hi there",
            "start": 0,
            "duration": 600,
            "timeline": [
                {"text": "Hi", "start": 0, "duration": 200},
                {"text": "there", "start": 300, "duration": 300},
            ],
        }]}


class TestInputsAndOptions:

    def test_provider_dicts(self):
        result = segment("Hello world", [
            {"text": "Hello", "startTime": 0, "endTime": 0.5},
            {"text": "world", "startTime": 0.6, "endTime": 1.0},
        ])
        assert result.timeline[0].text == "Hello world"

    def test_unknown_preset(self):
        with pytest.raises(ValueError, match="Unknown preset"):
            segment("Hi", timings(("Hi", 0, 0.2)), preset="karaoke")

    def test_unordered_timings_best_effort(self, caplog):
        raw = timings(("one", 1.0, 1.2), ("two", 0.0, 0.2))
        with caplog.at_level(logging.WARNING, logger="follow_along"):
            result = segment("one two", raw, strict=False)
        assert sum(len(item.timeline) for item in result.timeline) == 2
        assert "Timing problem" in caplog.text

    def test_unordered_timings_strict(self):
        raw = timings(("one", 1.0, 1.2), ("two", 0.0, 0.2))
        with pytest.raises(InvalidTimingError):
            segment("one two", raw, strict=True)

    def test_negative_duration_passes_through(self):
        result = segment("odd", timings(("odd", 1.0, 0.8)), strict=False)
        assert result.timeline[0].duration == -200

    def test_meaning_group_is_not_split(self, make_timings, span_capability):
        text = "we all walked slowly past the big red barn and then went home again tonight"
        words = text.split()
        capability = span_capability(groups=["the big red barn"])
        result = segment(text, make_timings(words), language="en", capability=capability)
        assert any("the big red barn" in item.text for item in result.timeline)

    def test_failing_capability_still_segments(self, make_timings, raising_capability):
        text = "We walked in the park. It was nice."
        words = [w.strip(".") for w in text.split()]
        result = segment(text, make_timings(words), language="en", capability=raising_capability)
        assert [item.text for item in result.timeline] == ["We walked in the park", "It was nice"]

    def test_null_capability_for_other_language(self, make_timings):
        text = "Hola mundo. Adiós."
        result = segment(text, make_timings(["Hola", "mundo", "Adiós"]), language="es",
                         capability=NullLanguageCapability())
        assert [item.text for item in result.timeline] == ["Hola mundo", "Adiós"]
