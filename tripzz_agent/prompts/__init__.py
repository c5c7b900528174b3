"""
Trip Planner Prompts
====================
Prompt templates for every LLM call site
"""

from tripzz_agent.prompts.analyzer import ANALYSIS_PROMPT, build_analysis_prompt
from tripzz_agent.prompts.classifier import INTENT_PROMPT, build_intent_prompt
from tripzz_agent.prompts.composer import RESPONSE_PROMPT, build_response_prompt

__all__ = [
    "ANALYSIS_PROMPT",
    "INTENT_PROMPT",
    "RESPONSE_PROMPT",
    "build_analysis_prompt",
    "build_intent_prompt",
    "build_response_prompt",
]
