"""
Fallback Middleware
===================
One wrapper for every "ask the LLM, otherwise use the rules" call site

Contract:
- No LLM configured -> fallback() straight away
- LLM call retried with tenacity (LLM_MAX_ATTEMPTS, exponential back-off)
- The whole attempt is bounded by asyncio.wait_for(timeout)
- Any failure (service error, timeout, unparseable or invalid output) is
  logged and replaced by fallback(), whose result has the same type as
  parse() -- callers never learn which path ran
"""

import asyncio
import json
import logging
import os
import re
from collections.abc import Callable
from typing import Any, TypeVar

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from tripzz_agent.llm.factory import LLM_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

T = TypeVar("T")

LLM_MAX_ATTEMPTS = int(os.getenv("LLM_MAX_ATTEMPTS", "2"))

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


def extract_json_block(text: str | None) -> dict[str, Any]:
    """
    Parse the outermost {...} block of a model reply

    Raises:
        ValueError: no object found, invalid JSON, or not a JSON object
    """
    match = _JSON_BLOCK.search(text or "")
    if not match:
        raise ValueError("No JSON object found in model output")
    data = json.loads(match.group(0))
    if not isinstance(data, dict):
        raise ValueError("Model output is not a JSON object")
    return data


def message_text(content: Any) -> str:
    """Flatten LangChain message content (str or list of parts) to text"""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts)
    return str(content or "")


async def invoke_llm_text(llm: BaseChatModel, prompt: str) -> str:
    """Send one prompt, retrying transient failures; returns the reply text"""
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max(1, LLM_MAX_ATTEMPTS)),
        wait=wait_exponential(multiplier=0.5, max=4),
        reraise=True,
    ):
        with attempt:
            response = await llm.ainvoke([HumanMessage(content=prompt)])
    return message_text(response.content)


async def generate_or_fallback(
    llm: BaseChatModel | None,
    *,
    prompt: str,
    parse: Callable[[str], T],
    fallback: Callable[[], T],
    label: str,
    timeout: float | None = None,
) -> T:
    """
    Run the primary LLM path, substituting the deterministic fallback on any failure

    Args:
        llm: chat model, or None when no provider is configured
        prompt: fully rendered prompt
        parse: turns the reply text into the result; raises on bad output
        fallback: deterministic producer of the same result type
        label: component tag for logs (e.g. "Classifier")
        timeout: seconds allowed for the LLM path (default LLM_TIMEOUT_SECONDS)

    Returns:
        parse(reply) on success, otherwise fallback()
    """
    if llm is None:
        logger.debug("[Fallback] %s: no LLM configured, using rules", label)
        return fallback()

    try:
        text = await asyncio.wait_for(invoke_llm_text(llm, prompt), timeout=timeout or LLM_TIMEOUT_SECONDS)
        result = parse(text)
    except Exception as e:
        logger.warning("[Fallback] %s: primary path failed (%s: %s), using rules", label, type(e).__name__, e)
        return fallback()

    logger.debug("[Fallback] %s: primary path succeeded", label)
    return result
