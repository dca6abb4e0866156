"""Classifier ABC: the one interface every field classifier satisfies."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..types import Decision, FieldDescriptor


class Classifier(ABC):
    """Base class for field classifiers."""

    @abstractmethod
    async def classify(self, descriptor: FieldDescriptor) -> Decision:
        """Return the input strategy decision for a field."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Classifier identifier (e.g. 'keyword', 'generative', 'static')."""

    async def is_available(self) -> bool:
        """Optional: report whether the classifier can run right now."""
        return True
