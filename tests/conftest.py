"""Shared fixtures for fieldwise tests."""

from __future__ import annotations

import threading

import pytest

from fieldwise.classifiers.base import Classifier
from fieldwise.classifiers.keyword import KeywordClassifier
from fieldwise.types import Decision, FieldDescriptor, LLMProviderError


class MockLLMProvider:
    """Mock LLM provider returning canned responses (no API calls).

    ``responses`` are served in order; the last one repeats.
    """

    def __init__(
        self,
        response: str | None = None,
        responses: list[str] | None = None,
        error: Exception | None = None,
        available: bool = True,
    ):
        self.calls: list[dict] = []
        self._responses = responses or [
            response or '{"strategy": "native", "native": {"control": "datePicker"}}'
        ]
        self.error = error
        self.available = available
        self._lock = threading.Lock()

    def complete(self, system: str, user: str, max_tokens: int) -> str:
        with self._lock:
            self.calls.append({"system": system, "user": user, "max_tokens": max_tokens})
            idx = min(len(self.calls) - 1, len(self._responses) - 1)
        if self.error is not None:
            raise self.error
        return self._responses[idx]

    def is_available(self) -> bool:
        return self.available


class FailingClassifier(Classifier):
    """Test double that raises whatever it is given."""

    def __init__(self, error: Exception, name: str = "failing"):
        self.error = error
        self._name = name
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    async def classify(self, descriptor: FieldDescriptor) -> Decision:
        self.calls += 1
        raise self.error


@pytest.fixture
def keyword_classifier() -> KeywordClassifier:
    return KeywordClassifier()


@pytest.fixture
def mock_llm() -> MockLLMProvider:
    return MockLLMProvider()


@pytest.fixture
def transport_error() -> LLMProviderError:
    return LLMProviderError("HTTP 500: boom", provider="mock", status_code=500)
