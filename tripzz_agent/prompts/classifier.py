"""
Classifier Prompt - Intent Analysis
===================================
Classify one chat turn and extract any trip details it carries
"""

from datetime import date

from tripzz_agent.state import ConversationContext

HISTORY_TURNS_IN_PROMPT = 3

INTENT_PROMPT = """You are a flexible, intelligent travel planning assistant. You can answer questions at ANY point in the conversation - you don't need complete trip details to be helpful.

**User's Message:** "{message}"

**Current Context:**
- Destination: {destination}
- Travel Dates: {travel_dates}
- Partial Date Info: {partial_date_info}
- Activities: {activities}
- Conversation History: {history}
- Current Date: {today}

**Your Task:**
1. FIRST: Decide whether this is a QUESTION (weather, activities, best time, recommendations) or INFO (providing destination/dates/activities)
2. If it's a QUESTION: extract what you can from the message itself ("How's the weather in Goa?" -> destination "Goa" even if the context has another destination)
3. If it's INFO: extract travel details (destination, dates, activities)
4. Decide whether weather data would help answer the message
5. Be flexible - don't force a linear flow

**Date Extraction Rules:**
- If the user gives only a month ("march", "april"): do NOT create dates; set partialDateInfo to the month and needsMoreDateInfo to true
- Specific dates or ranges are returned as YYYY-MM-DD
- Assume the current year ({year}) unless stated otherwise
- If the month is earlier than the current month ({month}), assume next year
- Handle formats like "April 10 - 20", "April 10-20", "April 10 to 20", "10-20 April", "April 28 to May 3"
- Same-month ranges ("April 10 - 20") use that month for both start and end
- If Partial Date Info is set and the user gives only days ("10-20"), combine them with that month
- Never return a range with only one end

**Respond in JSON format:**
{{
  "intent": "greeting|provide_info|ask_weather|ask_activity|ask_general|other",
  "extractedInfo": {{
    "destination": "city name or null",
    "travelDates": {{"start": "YYYY-MM-DD", "end": "YYYY-MM-DD"}} or null,
    "activities": ["activity1", "activity2"] or null,
    "partialDateInfo": "month name if only a month was mentioned, else null"
  }},
  "needsWeather": true|false,
  "needsMoreDateInfo": true|false,
  "responseType": "conversational|detailed_weather|quick_answer|ask_for_info"
}}

**Examples:**
- "Goa" -> {{"intent": "provide_info", "extractedInfo": {{"destination": "Goa"}}, "needsWeather": false, "needsMoreDateInfo": false, "responseType": "ask_for_info"}}
- "march" -> {{"intent": "provide_info", "extractedInfo": {{"partialDateInfo": "March"}}, "needsWeather": false, "needsMoreDateInfo": true, "responseType": "ask_for_info"}}
- "April 10 - 20" -> {{"intent": "provide_info", "extractedInfo": {{"travelDates": {{"start": "{april_year}-04-10", "end": "{april_year}-04-20"}}}}, "needsWeather": false, "needsMoreDateInfo": false, "responseType": "ask_for_info"}}
- "What's the weather like?" -> {{"intent": "ask_weather", "extractedInfo": {{}}, "needsWeather": true, "needsMoreDateInfo": false, "responseType": "detailed_weather"}}
- "Hi" -> {{"intent": "greeting", "extractedInfo": {{}}, "needsWeather": false, "needsMoreDateInfo": false, "responseType": "conversational"}}"""


def _format_history(context: ConversationContext) -> str:
    recent = context.conversation_history[-HISTORY_TURNS_IN_PROMPT:]
    if not recent:
        return "None"
    return " | ".join(f"{entry.role}: {entry.message}" for entry in recent)


def build_intent_prompt(message: str, context: ConversationContext, today: date) -> str:
    """
    Render the intent prompt

    Args:
        message: raw user message
        context: context snapshot (last 3 history turns are included)
        today: current date, drives the year rule in the instructions
    """
    dates = context.travel_dates
    return INTENT_PROMPT.format(
        message=message,
        destination=context.destination or "Not provided",
        travel_dates=f"{dates.start} to {dates.end}" if dates.is_complete else "Not provided",
        partial_date_info=context.partial_date_info or "None",
        activities=", ".join(context.activities) or "Not provided",
        history=_format_history(context),
        today=today.isoformat(),
        year=today.year,
        month=today.month,
        april_year=today.year + 1 if today.month > 4 else today.year,
    )
