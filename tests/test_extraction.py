"""
Unit tests - Slot extraction
============================
Destination, date range, month, day range and activity extractors
"""

from datetime import date

import pytest

from tripzz_agent.extraction import (
    extract_activities,
    extract_date_range,
    extract_day_range,
    extract_destination,
    extract_month,
    extract_weather_location,
    first_match,
    is_greeting,
    is_weather_question,
    normalize_destination,
)

TODAY = date(2026, 10, 19)


# ==================== Destination ====================


class TestExtractDestination:
    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("I want to go to Goa", "Goa"),
            ("visiting kyoto", "Kyoto"),
            ("I'm thinking about a trip to Lisbon", "Lisbon"),
            ("Goa", "Goa"),
            ("new york", "New York"),
            ("Paris, France", "Paris, France"),
            ("I would like to travel to   rio de janeiro!", "Rio De Janeiro"),
        ],
    )
    def test_extracts_destination(self, message: str, expected: str):
        assert extract_destination(message) == expected

    @pytest.mark.parametrize(
        "message",
        [
            "",
            "to",
            "there",
            "yes",
            "April",
            "What should I pack?",
            "weather",
            "I want to go there",
            "I want to visit here",
            "I want to go to there",
        ],
    )
    def test_non_destinations(self, message: str):
        assert extract_destination(message) is None

    def test_question_skips_short_answer_only(self):
        assert extract_destination("Goa?") is None
        assert extract_destination("Should we go to Goa?") == "Goa"
        assert extract_destination("   ") is None

    def test_normalization_is_idempotent(self):
        first = extract_destination("I want to go to Goa")

        assert first == extract_destination("Goa")
        assert normalize_destination(first) == first

    def test_leading_travel_phrase_is_stripped(self):
        assert normalize_destination("going to bali.") == "Bali"


class TestWeatherLocation:
    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("What's the weather in Paris?", "Paris"),
            ("weather for tokyo this weekend", "Tokyo"),
            ("Is there rain at Bali right now", "Bali"),
            ("weather in Goa for next week", "Goa"),
            ("will it rain in London on Friday?", "London"),
            ("weather in Paris during my trip", "Paris"),
            ("forecast for new york city this weekend", "New York City"),
            ("weather in Paris, France in April", "Paris, France"),
            ("what is the weather like at the moment in Lisbon", "Lisbon"),
        ],
    )
    def test_location_from_weather_question(self, message: str, expected: str):
        assert extract_weather_location(message) == expected

    def test_month_is_not_a_location(self):
        assert extract_weather_location("how is the weather in April") is None

    def test_question_without_location(self):
        assert extract_weather_location("what's the weather like?") is None


# ==================== Dates ====================


class TestExtractDateRange:
    @pytest.mark.parametrize(
        ("message", "start", "end"),
        [
            ("April 10 - 20", date(2027, 4, 10), date(2027, 4, 20)),
            ("apr 10-20", date(2027, 4, 10), date(2027, 4, 20)),
            ("December 20 to 27", date(2026, 12, 20), date(2026, 12, 27)),
            ("april 10th to the 15th", date(2027, 4, 10), date(2027, 4, 15)),
            ("April 28 to May 3", date(2027, 4, 28), date(2027, 5, 3)),
            ("Dec 28 - Jan 3", date(2026, 12, 28), date(2027, 1, 3)),
            ("10-20 April", date(2027, 4, 10), date(2027, 4, 20)),
            ("from 5 to 9 of november please", date(2026, 11, 5), date(2026, 11, 9)),
        ],
    )
    def test_range_patterns(self, message: str, start: date, end: date):
        travel_dates = extract_date_range(message, TODAY)

        assert travel_dates is not None
        assert (travel_dates.start, travel_dates.end) == (start, end)

    @pytest.mark.parametrize(
        ("message", "year"),
        [
            ("January 5 - 9", 2027),
            ("September 3 - 3", 2027),
            ("October 20 - 25", 2026),
            ("December 1 - 31", 2026),
        ],
    )
    def test_same_month_range_year_rule(self, message: str, year: int):
        travel_dates = extract_date_range(message, TODAY)

        assert travel_dates.start.year == year
        assert travel_dates.start.month == travel_dates.end.month
        assert travel_dates.start <= travel_dates.end

    @pytest.mark.parametrize("message", ["February 30 - 31", "April 20 - 10", "sometime in April", "next week", ""])
    def test_invalid_or_missing_range(self, message: str):
        assert extract_date_range(message, TODAY) is None

    def test_bare_month(self):
        assert extract_month("maybe sometime in april?") == "April"
        assert extract_month("next week") is None

    @pytest.mark.parametrize("message", ["10-20", "from 10 to 20", "10 - 20."])
    def test_day_range_uses_staged_month(self, message: str):
        travel_dates = extract_day_range(message, "April", TODAY)

        assert (travel_dates.start, travel_dates.end) == (date(2027, 4, 10), date(2027, 4, 20))

    def test_day_range_needs_a_month(self):
        assert extract_day_range("10-20", None, TODAY) is None
        assert extract_day_range("10-20", "Someday", TODAY) is None

    def test_day_range_must_be_whole_message(self):
        assert extract_day_range("I have 10-20 friends coming", "April", TODAY) is None


# ==================== Activities ====================


class TestExtractActivities:
    def test_split_and_title_case(self):
        assert extract_activities("hiking, museums & food tours") == ["Hiking", "Museums", "Food Tours"]

    def test_all_separators(self):
        assert extract_activities("surfing and yoga + cycling / diving") == ["Surfing", "Yoga", "Cycling", "Diving"]

    def test_quick_pick_kept_whole(self):
        assert extract_activities("beach activities") == ["Beach Activities"]
        assert extract_activities("Museums and cafes") == ["Museums And Cafes"]

    def test_weather_question_is_not_a_list(self):
        assert extract_activities("will it rain on the hiking days?") == []

    def test_short_tokens_and_duplicates_dropped(self):
        assert extract_activities("ski, hiking, Hiking, go") == ["Ski", "Hiking"]

    def test_capped_at_five(self):
        result = extract_activities("hiking, surfing, diving, yoga, cycling, kayaking")
        assert result == ["Hiking", "Surfing", "Diving", "Yoga", "Cycling"]


# ==================== Helpers ====================


class TestHelpers:
    @pytest.mark.parametrize("message", ["Hi", "hello there", "Hey!", "Good morning", "  howdy"])
    def test_greetings(self, message: str):
        assert is_greeting(message)

    @pytest.mark.parametrize("message", ["Goa", "this is high time", "history museums"])
    def test_not_greetings(self, message: str):
        assert not is_greeting(message)

    def test_weather_vocabulary(self):
        assert is_weather_question("What's the forecast?")
        assert is_weather_question("is it rainy")
        assert not is_weather_question("Ukraine")

    def test_first_match_order(self):
        strategies = [lambda m: None, lambda m: m.upper(), lambda m: "never"]
        assert first_match(strategies, "goa") == "GOA"
