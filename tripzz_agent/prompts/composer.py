"""
Composer Prompt - Reply Generation
==================================
Natural-language reply built from the known slots, weather and analysis
"""

from tripzz_agent.services.weather import WeatherReport
from tripzz_agent.state import ConversationContext, IntentEnvelope, TripAnalysis

FORECAST_DAYS_IN_PROMPT = 5

RESPONSE_PROMPT = """You are a friendly, knowledgeable travel planning assistant. Generate a natural, helpful response.

**User's Message:** "{message}"

**What You Know:**
- Destination: {destination}
- Travel Dates: {travel_dates}
- Activities: {activities}

**Intent:** {intent}
**Needs More Date Info:** {needs_more_date_info}
{weather_section}{analysis_section}{itinerary_section}
**Instructions - BE FLEXIBLE AND HELPFUL:**
1. Answer the user's ACTUAL question first, even without complete trip details
2. Weather/activity/best-time questions: answer from what you know (context OR their message)
3. With weather data, give specific, actionable insights
4. Ask a follow-up question only if it is needed; ask for at most ONE missing detail
5. Don't force a linear "destination -> dates -> activities" flow
6. Use emojis sparingly
7. Keep it concise (150-300 words for questions, longer for complete trip plans)

**IMPORTANT:**
- If the user names a place in a question ("weather in Paris"), the weather below is for that place
- Be genuinely helpful, not a rigid form

Generate your response (plain text, conversational tone):"""

WEATHER_SECTION = """
**Current Weather for {location}:**
- Temperature: {temperature}°C (Feels like {feels_like}°C)
- Conditions: {conditions}
- Humidity: {humidity}%
- Wind: {wind_speed} m/s
- Rain: {rain_mm}mm

**{days}-Day Forecast:**
{forecast}
"""

ANALYSIS_SECTION = """
**Trip Analysis:**
- Conflicts: {conflicts}
- Best times: {recommendations}
- Packing list: {packing_list}
- Overall: {assessment}
"""


def _travel_dates(context: ConversationContext) -> str:
    if context.has_dates:
        return f"{context.travel_dates.start} to {context.travel_dates.end}"
    if context.partial_date_info:
        return f"Partial: {context.partial_date_info}"
    return "Not mentioned yet"


def format_weather_section(weather: WeatherReport | None, weather_error: str | None = None) -> str:
    if weather is None:
        return f"\n**Weather:** unavailable ({weather_error})\n" if weather_error else ""

    current = weather.current
    days = weather.forecast[:FORECAST_DAYS_IN_PROMPT]
    forecast = "\n".join(
        f"Day {i + 1} ({day.date_string}): {day.min_temp:.0f}°C-{day.max_temp:.0f}°C, "
        f"{day.conditions}, Rain: {day.precipitation_probability}%"
        for i, day in enumerate(days)
    )
    return WEATHER_SECTION.format(
        location=weather.location,
        temperature=f"{current.temperature:.0f}",
        feels_like=f"{current.feels_like:.0f}",
        conditions=current.condition_description,
        humidity=current.humidity,
        wind_speed=current.wind_speed,
        rain_mm=current.rain_mm,
        days=len(days),
        forecast=forecast or "Not available",
    )


def format_analysis_section(analysis: TripAnalysis | None) -> str:
    if analysis is None:
        return ""
    return ANALYSIS_SECTION.format(
        conflicts="; ".join(f"{c.activity}: {c.issue} ({c.severity})" for c in analysis.conflicts) or "None",
        recommendations="; ".join(f"{r.activity}: {r.best_time}" for r in analysis.recommendations) or "None",
        packing_list=", ".join(analysis.packing_list) or "None",
        assessment=analysis.overall_assessment or "None",
    )


def build_response_prompt(
    message: str,
    context: ConversationContext,
    intent: IntentEnvelope,
    weather: WeatherReport | None = None,
    weather_error: str | None = None,
    analysis: TripAnalysis | None = None,
    itinerary_preview: str | None = None,
) -> str:
    """Render the reply prompt for the current turn"""
    return RESPONSE_PROMPT.format(
        message=message,
        destination=context.destination or "Not mentioned yet",
        travel_dates=_travel_dates(context),
        activities=", ".join(context.activities) or "Not mentioned yet",
        intent=intent.intent,
        needs_more_date_info=intent.needs_more_date_info,
        weather_section=format_weather_section(weather, weather_error),
        analysis_section=format_analysis_section(analysis),
        itinerary_section=f"\n**Itinerary Draft:**\n{itinerary_preview}\n" if itinerary_preview else "",
    )
