"""
Shared Text Helpers
===================
Vocabulary, regexes and the ordered-strategy runner used by every extractor

An extractor capability is a list of strategies ``Callable[[str], T | None]``
tried in order; the first non-None result wins.
"""

import re
from collections.abc import Callable, Iterable
from typing import TypeVar

T = TypeVar("T")

Extractor = Callable[[str], T | None]

GREETING_PATTERN = re.compile(
    r"^\s*(?:hi|hello|hey|hiya|howdy|greetings|good\s+(?:morning|afternoon|evening))\b",
    re.IGNORECASE,
)
WEATHER_PATTERN = re.compile(
    r"\b(?:weather|temperatures?|forecasts?|rain(?:s|y|ing|fall)?)\b",
    re.IGNORECASE,
)
TRAILING_PUNCTUATION = re.compile(r"[.,!?;:]+$")

# Words that are never a destination or an activity on their own
NON_ANSWERS = frozenset(
    {
        "to", "the", "a", "an", "there", "here", "now", "soon", "today", "tomorrow",
        "yes", "yeah", "yep", "no", "nope", "ok", "okay", "sure", "maybe",
        "thanks", "thank you", "cool", "great", "nice",
    }
)

MONTHS = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)

# Full names plus the abbreviations people type
MONTH_LOOKUP: dict[str, int] = {name: index for index, name in enumerate(MONTHS, start=1)}
MONTH_LOOKUP.update(
    {
        "jan": 1, "feb": 2, "mar": 3, "apr": 4, "jun": 6, "jul": 7,
        "aug": 8, "sep": 9, "sept": 9, "oct": 10, "nov": 11, "dec": 12,
    }
)


def title_case(text: str) -> str:
    """'beach ACTIVITIES' -> 'Beach Activities'"""
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split())


def clean_message(message: str | None) -> str:
    """Collapse whitespace and strip trailing punctuation"""
    text = re.sub(r"\s+", " ", message or "").strip()
    return TRAILING_PUNCTUATION.sub("", text).strip()


def is_greeting(message: str | None) -> bool:
    return bool(GREETING_PATTERN.search(message or ""))


def is_weather_question(message: str | None) -> bool:
    return bool(WEATHER_PATTERN.search(message or ""))


def is_non_answer(text: str) -> bool:
    return text.strip().lower() in NON_ANSWERS


def first_match(strategies: Iterable[Extractor[T]], message: str) -> T | None:
    """Run strategies in order and return the first non-None result"""
    for strategy in strategies:
        result = strategy(message)
        if result is not None:
            return result
    return None
