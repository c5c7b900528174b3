"""
LLM Factory Module
==================
Chat models over the OpenAI-compatible protocol

Usage:
    from tripzz_agent.llm import create_llm, get_optional_llm

    # Default provider (LLM_PROVIDER, default gemini)
    llm = create_llm()

    # None when no API key is configured
    llm = get_optional_llm(temperature=0.0)
"""

from tripzz_agent.llm.factory import (
    LLMProvider,
    LLMUnavailableError,
    create_llm,
    get_default_provider,
    get_optional_llm,
    get_provider_config,
)

__all__ = [
    "LLMProvider",
    "LLMUnavailableError",
    "create_llm",
    "get_default_provider",
    "get_optional_llm",
    "get_provider_config",
]
