"""Environment-driven defaults and language-tag normalization.

WHY: Services embedding the segmenter need to pick the preset, toggle the
optional NLP capability and choose a spaCy model without code changes.
Language tags arrive in many shapes ("en", "en-US", "pt_BR") and must be
reduced to the base language the capability understands.

HOW: python-dotenv loads the .env file on import. Defaults are module-level
constants read from the environment. LANGUAGE_MAP is plain data so new
regional tags can be added without touching logic.

RULES:
- FOLLOW_ALONG_PRESET selects the default preset (see presets.PRESETS)
- FOLLOW_ALONG_NLP=false disables the spaCy capability entirely
- FOLLOW_ALONG_SPACY_MODEL names the trained English pipeline
- FOLLOW_ALONG_STRICT_TIMINGS=true rejects unordered timings
- Unknown language tags fall back to their primary subtag
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


DEFAULT_PRESET = os.getenv("FOLLOW_ALONG_PRESET", "follow_along")
NLP_ENABLED = _env_flag("FOLLOW_ALONG_NLP", "true")
SPACY_ENGLISH_MODEL = os.getenv("FOLLOW_ALONG_SPACY_MODEL", "en_core_web_sm")
STRICT_TIMINGS = _env_flag("FOLLOW_ALONG_STRICT_TIMINGS", "false")

# ---------------------------------------------------------------------------
# Language tags → base language
# ---------------------------------------------------------------------------

LANGUAGE_MAP: dict[str, str] = {
    "en": "en",
    "en-us": "en",
    "en-gb": "en",
    "zh": "zh",
    "zh-cn": "zh",
    "zh-tw": "zh",
    "ja": "ja",
    "ko": "ko",
    "es": "es",
    "fr": "fr",
    "de": "de",
    "pt": "pt",
    "pt-br": "pt",
    "pt-pt": "pt",
}


def normalize_language(language: str | None) -> str | None:
    """Reduce a language tag to its base code.

    Returns None for a missing or blank tag; the segmenter never guesses a
    language.
    """
    if not language or not language.strip():
        return None
    tag = language.strip().lower().replace("_", "-")
    if tag in LANGUAGE_MAP:
        return LANGUAGE_MAP[tag]
    return tag.split("-")[0] or None


def is_english(language: str | None) -> bool:
    return normalize_language(language) == "en"
