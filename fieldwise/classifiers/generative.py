"""GenerativeClassifier: LLM-driven field analysis with schema recovery."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Sequence

from ..core.agent import Agent, AgentTool
from ..core.output_parser import parse_decision
from ..types import (
    ClassifierUnavailableError,
    Decision,
    FieldDescriptor,
    GenerativeConfig,
    LLMProvider,
    MalformedOutputError,
    TurnBudgetExceededError,
    fallback_decision,
)
from .base import Classifier

logger = logging.getLogger(__name__)

CLASSIFIER_INSTRUCTIONS = """\
You are an expert UI engineer. Analyze the input field and return a JSON configuration.

STRATEGIES (Choose the BEST fit):

1. "keyboard": For standard text input.
   Config: { "type": "default"|"email"|"phone"|"number"|"decimal"|"url",
             "contentType": "givenName"|"emailAddress"|...,
             "autocapitalization": "none"|"sentences"|"words" }

2. "native": PREFERRED for specific controls.
   PRIORITY: If a native control fits, USE IT. Do NOT use webview.
   - Date/Time: { "control": "datePicker" }
   - Color: { "control": "colorPicker" }
   - Selection: { "control": "picker", "options": ["A", "B"] }
   - Toggle/Boolean: { "control": "toggle" }
   - Quantity: { "control": "stepper", "range": [0, 10, 1] }
   - Rating/Star: { "control": "slider", "range": [1, 5, 1], "unit": "stars" }
     (e.g., "Rate 1-5", "How many stars") -> ALWAYS use "slider".

3. "map": MANDATORY for Address, Location, or Geo-coordinates.
   - "Where do you live?", "Select delivery address", "City"
   Config: { "showUserLocation": true, "initialRegion": [lat, long, spanLat, spanLong] }

4. "signature": Only for physical signature requests. No config.

5. "webview": LAST RESORT.
   - Use ONLY for complex Visual HTML layouts that generic native controls cannot handle.
   - Do NOT use for simple forms, ratings, or selections.
   Config: { "html": "<div...>Content</div>" }

JSON SCHEMA (Strict nesting required):
{
  "strategy": "native",
  "native": { "control": "slider", ... } // MUST be nested inside "native"
}

Example:
{ "strategy": "native", "native": { "control": "datePicker" } }

Full Schema:
{
  "strategy": "keyboard" | "native" | "map" | "signature" | "webview",
  "label": "Display Label",
  "placeholder": "Placeholder",
  "keyboard": { ... },
  "native": { ... },
  "map": { ... },
  "webview": { ... }
}

Return ONLY valid JSON.
"""


def build_field_prompt(descriptor: FieldDescriptor) -> str:
    return (
        "ANALYZING FIELD:\n"
        f'Name: "{descriptor.name}"\n'
        f"Type: {descriptor.kind}\n"
        f'Context: "{descriptor.nearby_context}"\n'
        "\n"
        "Return ONLY valid JSON, no markdown, no explanation."
    )


class GenerativeClassifier(Classifier):
    """Ask a language model to pick the input strategy.

    Raises only ClassifierUnavailableError (before any inference) and
    TurnBudgetExceededError; every other failure becomes the keyboard
    fallback decision.
    """

    def __init__(
        self,
        llm_provider: LLMProvider,
        config: GenerativeConfig | None = None,
        tools: Sequence[AgentTool] = (),
        instructions: str = CLASSIFIER_INSTRUCTIONS,
        availability_check: Callable[[], bool] | None = None,
    ) -> None:
        self.llm = llm_provider
        self.config = config or GenerativeConfig()
        self._availability_check = availability_check
        self.agent = Agent(
            name="field-classifier",
            instructions=instructions,
            llm_provider=llm_provider,
            tools=tools,
            max_tokens=self.config.max_tokens,
        )

    @property
    def name(self) -> str:
        return "generative"

    async def is_available(self) -> bool:
        if not self.config.enabled:
            return False
        check = self._availability_check or getattr(self.llm, "is_available", None)
        if check is None:
            return True
        try:
            return bool(await asyncio.to_thread(check))
        except Exception as e:
            logger.error("Availability check failed: %s", e)
            return False

    async def classify(self, descriptor: FieldDescriptor) -> Decision:
        if not await self.is_available():
            logger.error("Generative model not available (enabled=%s)", self.config.enabled)
            raise ClassifierUnavailableError("Generative model is not available")

        prompt = build_field_prompt(descriptor)
        logger.info("Sending prompt for field: %s", descriptor.name)

        try:
            response = await self.agent.run(prompt, max_turns=self.config.max_turns)
        except TurnBudgetExceededError:
            raise
        except Exception as e:
            logger.error("Session error: %s", e)
            logger.warning("Inference failed, using safe fallback.")
            return fallback_decision(descriptor.name)

        logger.debug("Raw response: %s", response)
        try:
            decision = parse_decision(response)
        except MalformedOutputError as e:
            logger.error("Decoding error: %s", e)
            logger.warning("JSON parsing failed, using fallback.")
            return fallback_decision(descriptor.name)
        except Exception as e:
            logger.error("Unexpected error while parsing response: %s", e)
            return fallback_decision(descriptor.name)

        logger.info("Parsed decision: %s", decision.strategy.value)
        return decision
