"""
Middleware Module
=================
Dual-path (LLM or rules) execution shared by classifier, analyzer and composer
"""

from tripzz_agent.middleware.fallback import (
    extract_json_block,
    generate_or_fallback,
    invoke_llm_text,
    message_text,
)

__all__ = [
    "extract_json_block",
    "generate_or_fallback",
    "invoke_llm_text",
    "message_text",
]
