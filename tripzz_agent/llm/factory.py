"""
LLM Factory Module
==================
Single factory for chat models, every provider spoken to over the
OpenAI-compatible protocol

Design Points:
1. ChatOpenAI is the only client class
2. LLM_PROVIDER selects the provider, <PROVIDER>_* variables configure it
3. Retries and timeouts are owned by the caller (middleware/fallback.py),
   so the client is built with max_retries=0
4. get_optional_llm() returns None instead of raising, which switches the
   assistant onto its rule-based paths
"""

import logging
import os
from typing import Literal

from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI
from pydantic import SecretStr

logger = logging.getLogger(__name__)

LLMProvider = Literal["gemini", "groq", "openai"]
DEFAULT_PROVIDER: LLMProvider = "gemini"

LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "15"))

# Provider configuration
PROVIDER_CONFIG: dict[str, dict[str, str]] = {
    "gemini": {
        "api_key_var": "GEMINI_API_KEY",
        "base_url_var": "GEMINI_BASE_URL",
        "model_var": "GEMINI_MODEL",
        "default_base_url": "https://generativelanguage.googleapis.com/v1beta/openai/",
        "default_model": "gemini-2.5-flash-lite",
    },
    "groq": {
        "api_key_var": "GROQ_API_KEY",
        "base_url_var": "GROQ_BASE_URL",
        "model_var": "GROQ_MODEL",
        "default_base_url": "https://api.groq.com/openai/v1",
        "default_model": "llama-3.3-70b-versatile",
    },
    "openai": {
        "api_key_var": "OPENAI_API_KEY",
        "base_url_var": "OPENAI_BASE_URL",
        "model_var": "OPENAI_MODEL",
        "default_base_url": "",
        "default_model": "gpt-4o-mini",
    },
}


class LLMUnavailableError(ValueError):
    """Raised when the selected provider is unknown or has no API key"""

    pass


def get_default_provider() -> LLMProvider:
    """Provider from LLM_PROVIDER (default gemini)"""
    provider = os.getenv("LLM_PROVIDER", DEFAULT_PROVIDER).lower()
    if provider not in PROVIDER_CONFIG:
        logger.warning(f"Unknown LLM_PROVIDER '{provider}', falling back to '{DEFAULT_PROVIDER}'")
        return DEFAULT_PROVIDER
    return provider  # type: ignore[return-value]


def get_provider_config(provider: LLMProvider) -> dict[str, str]:
    """
    Resolved configuration for a provider

    Args:
        provider: provider name

    Returns:
        Dict with api_key, base_url and model

    Example:
        >>> get_provider_config("groq")["model"]
        'llama-3.3-70b-versatile'
    """
    config = PROVIDER_CONFIG.get(provider)
    if not config:
        raise LLMUnavailableError(f"Unsupported provider: {provider}")

    return {
        "api_key": os.getenv(config["api_key_var"], ""),
        "base_url": os.getenv(config["base_url_var"], config["default_base_url"]),
        "model": os.getenv(config["model_var"], config["default_model"]),
    }


def create_llm(
    provider: LLMProvider | None = None,
    temperature: float = 0.7,
    timeout: float | None = None,
    **kwargs,
) -> BaseChatModel:
    """
    Create a chat model

    Args:
        provider: provider name (default from LLM_PROVIDER)
        temperature: sampling temperature
        timeout: request timeout in seconds (default LLM_TIMEOUT_SECONDS)
        **kwargs: extra ChatOpenAI parameters (e.g. max_tokens)

    Returns:
        BaseChatModel instance

    Raises:
        LLMUnavailableError: unknown provider or missing API key
    """
    provider = provider or get_default_provider()
    config = get_provider_config(provider)

    if not config["api_key"]:
        raise LLMUnavailableError(
            f"{PROVIDER_CONFIG[provider]['api_key_var']} environment variable is not set "
            f"(required for provider '{provider}')"
        )

    logger.debug(f"Creating LLM: provider={provider}, model={config['model']}")

    return ChatOpenAI(
        model=config["model"],
        api_key=SecretStr(config["api_key"]),
        base_url=config["base_url"] or None,
        temperature=temperature,
        timeout=timeout or LLM_TIMEOUT_SECONDS,
        max_retries=0,
        **kwargs,
    )


def get_optional_llm(
    provider: LLMProvider | None = None,
    temperature: float = 0.7,
) -> BaseChatModel | None:
    """
    Like create_llm(), but returns None when the provider is not configured

    The assistant then runs entirely on its rule-based paths.
    """
    try:
        return create_llm(provider=provider, temperature=temperature)
    except LLMUnavailableError as e:
        logger.warning(f"[LLM] {e}; using rule-based fallbacks only")
        return None
