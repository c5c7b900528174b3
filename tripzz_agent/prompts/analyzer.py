"""
Analyzer Prompt - Weather vs. Activities
========================================
"""

from tripzz_agent.prompts.composer import format_weather_section
from tripzz_agent.services.weather import WeatherReport
from tripzz_agent.state import ConversationContext

ANALYSIS_PROMPT = """You are a travel planning assistant. Analyze the weather data and provide intelligent recommendations.

**Destination:** {destination}
**Travel Dates:** {start} to {end}
**Planned Activities:** {activities}
{weather_section}
**Analysis Required:**
1. Identify any weather-related conflicts with planned activities
2. Recommend best days/times for each activity
3. Suggest alternative activities if weather conflicts exist
4. Provide packing recommendations
5. Give an overall trip feasibility assessment

Respond in JSON format:
{{
  "conflicts": [{{"activity": "...", "issue": "...", "severity": "high|medium|low"}}],
  "recommendations": [{{"activity": "...", "bestTime": "...", "reason": "..."}}],
  "alternatives": [{{"original": "...", "suggested": "...", "reason": "..."}}],
  "packingList": ["item1", "item2"],
  "overallAssessment": "...",
  "confidence": 0.0-1.0
}}"""


def build_analysis_prompt(context: ConversationContext, weather: WeatherReport) -> str:
    return ANALYSIS_PROMPT.format(
        destination=context.destination or weather.location,
        start=context.travel_dates.start or "Not specified",
        end=context.travel_dates.end or "Not specified",
        activities=", ".join(context.activities) or "None specified",
        weather_section=format_weather_section(weather),
    )
