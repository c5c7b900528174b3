"""
Slot Extraction Module
======================
Pure, never-raising extractors for destination, dates, month and activities

Usage:
    from tripzz_agent.extraction import extract_destination, extract_date_range

    extract_destination("I want to go to Goa")   # "Goa"
    extract_date_range("April 10 - 20")          # TravelDates(...)
"""

from tripzz_agent.extraction.activities import extract_activities, normalize_activities
from tripzz_agent.extraction.common import first_match, is_greeting, is_weather_question, title_case
from tripzz_agent.extraction.dates import extract_date_range, extract_day_range, extract_month
from tripzz_agent.extraction.destination import (
    extract_destination,
    extract_weather_location,
    normalize_destination,
)

__all__ = [
    "extract_activities",
    "extract_date_range",
    "extract_day_range",
    "extract_destination",
    "extract_month",
    "extract_weather_location",
    "first_match",
    "is_greeting",
    "is_weather_question",
    "normalize_activities",
    "normalize_destination",
    "title_case",
]
