"""StaticClassifier: canned decisions for UI tests and demos."""

from __future__ import annotations

from typing import Mapping

from ..types import Decision, FieldDescriptor
from .base import Classifier
from .keyword import KeywordClassifier


class StaticClassifier(Classifier):
    """Look up a pre-built decision by descriptor identifier, then by name.

    Unknown fields are delegated to ``fallback`` (a KeywordClassifier by default).
    """

    def __init__(
        self,
        decisions: Mapping[str, Decision],
        fallback: Classifier | None = None,
    ) -> None:
        self.decisions = dict(decisions)
        self.fallback = fallback or KeywordClassifier()

    @property
    def name(self) -> str:
        return "static"

    async def classify(self, descriptor: FieldDescriptor) -> Decision:
        decision = self.decisions.get(descriptor.identifier)
        if decision is None:
            decision = self.decisions.get(descriptor.name)
        if decision is None:
            return await self.fallback.classify(descriptor)
        return decision
