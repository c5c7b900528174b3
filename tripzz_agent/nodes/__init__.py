"""
Trip Planner Nodes
==================
Classifier, stage controller, analyzer and composer used by the turn graph
"""

from tripzz_agent.nodes.analyzer import TripAnalyzer, fallback_analysis
from tripzz_agent.nodes.classifier import IntentClassifier, fallback_intent, parse_intent_response
from tripzz_agent.nodes.composer import ResponseComposer, fallback_text
from tripzz_agent.nodes.stage import determine_stage, missing_fields, step_name, suggestions_for_stage

__all__ = [
    "IntentClassifier",
    "ResponseComposer",
    "TripAnalyzer",
    "determine_stage",
    "fallback_analysis",
    "fallback_intent",
    "fallback_text",
    "missing_fields",
    "parse_intent_response",
    "step_name",
    "suggestions_for_stage",
]
