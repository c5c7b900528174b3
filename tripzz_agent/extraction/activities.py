"""
Activity Extraction
===================
Turn "hiking, museums and food tours" into ["Hiking", "Museums", "Food Tours"]

Rules:
- A weather question is never an activity list
- Quick-pick labels from the chat UI are kept whole ("Museums and cafes")
- Otherwise split on , / and / & / + / "/", title-case, drop tokens shorter
  than 3 characters, deduplicate, cap at 5
"""

import re

from tripzz_agent.extraction.common import clean_message, is_non_answer, is_weather_question, title_case

MAX_ACTIVITIES = 5
MIN_ACTIVITY_LENGTH = 3

QUICK_PICKS = ("sightseeing", "beach activities", "museums and cafes")

_SEPARATORS = re.compile(r",|\band\b|&|\+|/", re.IGNORECASE)


def normalize_activities(labels: list[str]) -> list[str]:
    """Title-case, drop short or empty labels, deduplicate, cap"""
    activities: list[str] = []
    for label in labels:
        label = clean_message(label)
        if len(label) < MIN_ACTIVITY_LENGTH or is_non_answer(label):
            continue
        label = title_case(label)
        if label not in activities:
            activities.append(label)
    return activities[:MAX_ACTIVITIES]


def extract_activities(message: str | None) -> list[str]:
    """
    Extract activity labels from a chat message

    Example:
        >>> extract_activities("hiking, museums & food tours")
        ['Hiking', 'Museums', 'Food Tours']
        >>> extract_activities("will it rain?")
        []
    """
    text = clean_message(message)
    if not text or is_weather_question(text):
        return []

    if text.lower() in QUICK_PICKS:
        return [title_case(text)]

    return normalize_activities(_SEPARATORS.split(text))
