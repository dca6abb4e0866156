"""Best-effort recovery of a Decision from free-form model text."""

from __future__ import annotations

import logging
import re

from ..types import Decision, MalformedOutputError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL)

# Marker that only appears in the instruction text; a brace span containing it
# is the model echoing the prompt, not an answer.
INSTRUCTIONS_MARKER = "JSON SCHEMA"


def extract_json(text: str) -> str | None:
    """Pull the JSON object candidate out of a model response.

    Tried in order:
      1. content of the first fenced code block (```json ... ``` or ``` ... ```)
      2. the span from the first ``{`` to the last ``}``, unless it looks
         like the echoed instructions
      3. the whole response
    Returns None for an empty response.
    """
    if not text or not text.strip():
        return None

    match = _FENCE_RE.search(text)
    if match:
        logger.debug("Extracted JSON from markdown block")
        return match.group(1).strip()

    start = text.find("{")
    end = text.rfind("}")
    if start >= 0 and end > start:
        candidate = text[start:end + 1]
        if INSTRUCTIONS_MARKER not in candidate:
            logger.debug("Extracted JSON from brace matching")
            return candidate

    return text


def clean_json_text(text: str) -> str:
    """Remove leftover fence markers and one stray leading backslash."""
    text = text.replace("```json", "").replace("```", "")
    text = text.strip()
    if text.startswith("\\"):
        text = text[1:]
    return text


def parse_decision(response: str) -> Decision:
    """Parse model text into a Decision. Raises MalformedOutputError."""
    if not isinstance(response, str):
        raise MalformedOutputError(f"expected text, got {type(response).__name__}")
    # qwen3-style models may wrap reasoning in <think>...</think>
    if "<think>" in response:
        response = _THINK_RE.sub("", response).strip()

    candidate = extract_json(response)
    if candidate is None:
        raise MalformedOutputError("empty model response")

    cleaned = clean_json_text(candidate)
    try:
        return Decision.from_json(cleaned)
    except MalformedOutputError:
        logger.debug("Attempted to decode: %s", cleaned)
        raise
