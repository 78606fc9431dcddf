"""Shared parsing and LLM-call utilities for agent responses."""

import json
import logging
import re

import anthropic
import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)

TRANSIENT_STATUS_CODES = (429, 500, 502, 503, 529)


def strip_fences(text: str) -> str:
    """Strip markdown code fences from LLM output if present."""
    match = _FENCE_RE.search(text)
    return match.group(1).strip() if match else text.strip()


def parse_json_object(text: str) -> dict:
    """Parse fenced or bare JSON and insist on an object at the top level."""
    data = json.loads(strip_fences(text))
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}.")
    return data


def response_text(response) -> str:
    """Extract the text of a chat model response.

    Chat models return either a plain string or a list of content blocks.
    Only a textual first block counts; anything else (tool use, images)
    yields an empty string.
    """
    content = response.content
    if isinstance(content, str):
        return content
    if not content:
        return ""
    first = content[0]
    if isinstance(first, str):
        return first
    if isinstance(first, dict) and first.get("type") == "text":
        return first.get("text", "")
    return ""


def _is_transient(exc: BaseException) -> bool:
    """Return True if the exception is a transient HTTP/network error worth retrying."""
    if isinstance(exc, httpx.TimeoutException):
        return True
    if isinstance(exc, httpx.ConnectError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in TRANSIENT_STATUS_CODES
    if isinstance(exc, anthropic.APIConnectionError):
        return True
    if isinstance(exc, anthropic.APIStatusError):
        return exc.status_code in TRANSIENT_STATUS_CODES
    return False


def invoke_with_retry(llm, messages, max_retries: int = 3):
    """Call llm.invoke(messages) with exponential backoff on transient errors.

    Retries on HTTP 429/500/502/503/529, connection errors, and timeouts.
    Non-transient errors (auth failures, bad requests) are raised immediately.
    """
    from objproof.config import get_config

    config = get_config()
    retries = config.get("llm_max_retries", max_retries)

    @retry(
        stop=stop_after_attempt(retries + 1),  # +1 because first attempt counts
        wait=wait_exponential(multiplier=1, min=2, max=16),
        retry=retry_if_exception(_is_transient),
        reraise=True,
        before_sleep=lambda state: logger.warning(
            "Transient error: %r. Retrying in %.0fs (attempt %d/%d)...",
            state.outcome.exception(),
            state.next_action.sleep,
            state.attempt_number,
            retries,
        ),
    )
    def _invoke():
        return llm.invoke(messages)

    return _invoke()
