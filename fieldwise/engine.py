"""FieldwiseEngine: wires config, providers, classifiers and the orchestrator."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .classifiers.base import Classifier
from .classifiers.generative import GenerativeClassifier
from .classifiers.keyword import KeywordClassifier
from .config import load_config
from .core.orchestrator import ClassifierOrchestrator
from .types import (
    ClassificationRun,
    Comparison,
    Decision,
    FieldDescriptor,
    FieldwiseConfig,
    LLMProvider,
)

logger = logging.getLogger(__name__)


def build_provider(provider_name: str, provider_config: dict) -> LLMProvider | None:
    """Build an LLM provider from a providers entry. None when it cannot be built."""
    ptype = provider_config.get("type", provider_name)
    max_retries = provider_config.get("max_retries", 1)

    if ptype == "generic_openai":
        from .providers.generic_openai import GenericOpenAIProvider
        return GenericOpenAIProvider(
            base_url=provider_config.get("base_url", "http://127.0.0.1:11434/v1"),
            model=provider_config.get("model", "qwen3:4b-instruct-2507-fp16"),
            temperature=provider_config.get("temperature", 0.3),
            api_key=provider_config.get("api_key", "not-needed"),
            max_retries=max_retries,
        )

    if ptype == "anthropic":
        api_key_env = provider_config.get("api_key_env", "ANTHROPIC_API_KEY")
        api_key = provider_config.get("api_key") or os.environ.get(api_key_env, "")
        if api_key:
            from .providers.anthropic import AnthropicProvider
            return AnthropicProvider(
                api_key=api_key,
                model=provider_config.get("model", "claude-haiku-4-5"),
                temperature=provider_config.get("temperature", 0.3),
                max_retries=max_retries,
            )

    return None


def build_generative_classifier(
    config: FieldwiseConfig,
    llm_provider: LLMProvider | None = None,
) -> GenerativeClassifier | None:
    """Generative classifier from config, or None if no provider is configured."""
    if llm_provider is None and config.generative.provider:
        provider_config = config.providers.get(config.generative.provider, {})
        llm_provider = build_provider(config.generative.provider, provider_config)
    if llm_provider is None:
        return None
    return GenerativeClassifier(llm_provider=llm_provider, config=config.generative)


def build_orchestrator(
    config: FieldwiseConfig,
    llm_provider: LLMProvider | None = None,
) -> ClassifierOrchestrator:
    return ClassifierOrchestrator(
        rule_based=KeywordClassifier(config.rules),
        generative=build_generative_classifier(config, llm_provider),
        config=config.orchestrator,
    )


class FieldwiseEngine:
    """Entry point for callers: describe a field, get a decision back."""

    def __init__(
        self,
        config: FieldwiseConfig | None = None,
        config_path: str | Path | None = None,
        llm_provider: LLMProvider | None = None,
    ) -> None:
        self.config = config or load_config(config_path)
        self.orchestrator = build_orchestrator(self.config, llm_provider)
        logger.debug(
            "Engine ready: generative=%s, geo_strategy=%s",
            self.orchestrator.generative is not None, self.config.rules.geo_strategy,
        )

    @property
    def rule_based(self) -> Classifier:
        return self.orchestrator.rule_based

    @property
    def generative(self) -> Classifier | None:
        return self.orchestrator.generative

    async def classify(self, descriptor: FieldDescriptor) -> Decision:
        return await self.orchestrator.classify(descriptor)

    async def run(self, descriptor: FieldDescriptor, brain: str = "keyword") -> ClassificationRun:
        """Single timed run with the named classifier ("keyword" or "generative")."""
        if brain == "keyword":
            return await self.orchestrator.run(descriptor, self.rule_based)
        if brain == "generative":
            if self.generative is None:
                raise ValueError("No generative classifier configured")
            return await self.orchestrator.run(descriptor, self.generative)
        raise ValueError(f"Unknown classifier: {brain!r}. Use 'keyword' or 'generative'.")

    async def compare(self, descriptor: FieldDescriptor) -> Comparison:
        return await self.orchestrator.compare(descriptor)
