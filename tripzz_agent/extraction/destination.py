"""
Destination Extraction
======================
Pull a place name out of a chat message

Strategies (first match wins):
1. Trailing clause after a travel verb: "I want to go to Goa", "visiting Kyoto"
2. Trailing "to <place>": "thinking about a trip to Lisbon"
3. Short answer: "Goa", "New York" (<= 4 words, no travel-intent words)

Every candidate goes through normalize_destination(), which is idempotent:
normalize_destination(normalize_destination(x)) == normalize_destination(x)
"""

import re

from tripzz_agent.extraction.common import (
    MONTH_LOOKUP,
    clean_message,
    first_match,
    is_non_answer,
    is_weather_question,
    title_case,
)

MAX_SHORT_ANSWER_WORDS = 4

_LEADING_TRAVEL_PHRASE = re.compile(
    r"^(?:i\s*(?:want|would\s+like)\s*(?:to\s+)?)?"
    r"(?:go|going|travel|travell?ing|visit|visiting)\b\s*(?:to\s+)?",
    re.IGNORECASE,
)
_SENTENCE_MARKERS = ("want", "would", "like", "going", "travel", "visit", "planning")

_AFTER_TRAVEL_VERB = re.compile(
    r"\b(?:want(?:\s+to)?|go(?:ing)?(?:\s+to)?|visit(?:ing)?(?:\s+to)?|travel(?:l?ing)?(?:\s+to)?)\b"
    r"\s*([a-zA-Z][a-zA-Z\s]{1,30})$",
    re.IGNORECASE,
)
_AFTER_TO = re.compile(r"\bto\s+([a-zA-Z][a-zA-Z\s]{1,30})$", re.IGNORECASE)
_INTENT_WORDS = re.compile(r"\b(?:i|want|would|like|go|going|visit|travel|planning)\b", re.IGNORECASE)

MAX_LOCATION_WORDS = 3

_WEATHER_KEYWORD = re.compile(r"\b(?:weather|forecast|temperature|rain)", re.IGNORECASE)
_LOCATION_PREPOSITION = re.compile(r"\b(?:in|for|at)\s+", re.IGNORECASE)
_PLACE_WORD = re.compile(r"[a-zA-Z][a-zA-Z'.-]*,?")

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

# Words that end a place name inside a weather question
_LOCATION_BOUNDARY_WORDS = frozenset(
    {
        "in", "on", "at", "for", "during", "over", "around", "from", "to", "until", "by",
        "next", "this", "these", "coming", "today", "tonight", "tomorrow", "now", "right",
        "the", "my", "our", "a", "an", "when", "while", "if", "and", "or", "with",
        "week", "weekend", "month", "morning", "afternoon", "evening", "night",
        "like", "be", "is", "will",
        *WEEKDAYS,
        *MONTH_LOOKUP,
    }
)


def normalize_destination(raw: str | None) -> str | None:
    """
    Normalize a raw destination candidate

    Collapse whitespace, strip trailing punctuation and a leading travel
    phrase, keep the last 3 words if it still reads like a sentence, then
    title-case.

    Returns:
        Normalized name, or None when nothing usable remains
    """
    cleaned = clean_message(raw)
    cleaned = _LEADING_TRAVEL_PHRASE.sub("", cleaned)
    cleaned = clean_message(cleaned)
    if not cleaned:
        return None

    words = cleaned.split(" ")
    padded = f" {cleaned.lower()} "
    if any(f" {marker} " in padded for marker in _SENTENCE_MARKERS) or len(words) > MAX_SHORT_ANSWER_WORDS:
        cleaned = " ".join(words[-3:])

    return title_case(cleaned) or None


def _accept(candidate: str) -> str | None:
    normalized = normalize_destination(candidate)
    if not normalized or is_non_answer(normalized):
        return None
    return normalized


def from_travel_verb(message: str) -> str | None:
    match = _AFTER_TRAVEL_VERB.search(message)
    return _accept(match.group(1)) if match else None


def from_trailing_to(message: str) -> str | None:
    match = _AFTER_TO.search(message)
    return _accept(match.group(1)) if match else None


def from_short_answer(message: str) -> str | None:
    if len(message.split()) > MAX_SHORT_ANSWER_WORDS:
        return None
    if _INTENT_WORDS.search(message) or is_weather_question(message):
        return None
    if not re.fullmatch(r"[a-zA-Z][a-zA-Z\s,.'-]*", message):
        return None
    if message.strip().lower() in MONTH_LOOKUP:
        return None
    return _accept(message)


DESTINATION_STRATEGIES = (from_travel_verb, from_trailing_to, from_short_answer)


def extract_destination(message: str | None) -> str | None:
    """
    Extract a destination from a chat message

    Example:
        >>> extract_destination("I want to go to Goa")
        'Goa'
        >>> extract_destination("What should I pack?")
    """
    text = clean_message(message)
    if not text:
        return None
    # A question is never a bare short answer
    if message.strip().endswith("?"):
        return first_match(DESTINATION_STRATEGIES[:2], text)
    return first_match(DESTINATION_STRATEGIES, text)


def _leading_place_words(text: str) -> str:
    """Words up to the first boundary word, at most MAX_LOCATION_WORDS"""
    words: list[str] = []
    for word in text.split():
        if len(words) == MAX_LOCATION_WORDS or not _PLACE_WORD.fullmatch(word):
            break
        if word.strip(",.'").lower() in _LOCATION_BOUNDARY_WORDS:
            break
        words.append(word)
    return " ".join(words).strip(" ,")


def extract_weather_location(message: str | None) -> str | None:
    """
    Location named in a weather question: "weather in Paris", "forecast for Tokyo?"

    The place ends at the first preposition, time word, month or weekday
    ("weather in Goa for next week" -> "Goa").
    """
    text = clean_message(message)
    keyword = _WEATHER_KEYWORD.search(text)
    if not keyword:
        return None
    for preposition in _LOCATION_PREPOSITION.finditer(text, keyword.end()):
        candidate = _leading_place_words(text[preposition.end():])
        if candidate:
            return _accept(candidate)
    return None
