"""Tests for StaticClassifier."""

import pytest

from fieldwise.classifiers.static import StaticClassifier
from fieldwise.types import (
    Decision,
    FieldDescriptor,
    KeyboardType,
    MapConfig,
    Strategy,
)

from conftest import FailingClassifier

HOME = Decision(strategy=Strategy.MAP, label="Home", map=MapConfig())
SIGN = Decision(strategy=Strategy.SIGNATURE, label="Sign")


@pytest.mark.asyncio
async def test_lookup_by_identifier_first():
    descriptor = FieldDescriptor(name="Home")
    classifier = StaticClassifier({descriptor.identifier: SIGN, "Home": HOME})
    assert await classifier.classify(descriptor) == SIGN


@pytest.mark.asyncio
async def test_lookup_by_name():
    classifier = StaticClassifier({"Home": HOME})
    assert await classifier.classify(FieldDescriptor(name="Home")) == HOME


@pytest.mark.asyncio
async def test_unknown_field_uses_keyword_rules():
    classifier = StaticClassifier({"Home": HOME})
    decision = await classifier.classify(FieldDescriptor(name="E-mail"))
    assert decision.keyboard.type == KeyboardType.EMAIL


@pytest.mark.asyncio
async def test_custom_fallback(transport_error):
    fallback = FailingClassifier(transport_error)
    classifier = StaticClassifier({}, fallback=fallback)
    with pytest.raises(Exception, match="boom"):
        await classifier.classify(FieldDescriptor(name="anything"))
    assert fallback.calls == 1


def test_name():
    assert StaticClassifier({}).name == "static"
