"""fieldwise: pick the right input control for a form field."""

from .classifiers import Classifier, GenerativeClassifier, KeywordClassifier, StaticClassifier
from .config import load_config
from .core.orchestrator import ClassifierOrchestrator
from .engine import FieldwiseEngine
from .types import (
    ClassifierError,
    ClassifierUnavailableError,
    Decision,
    FieldDescriptor,
    FieldwiseConfig,
    MalformedOutputError,
    Strategy,
    TurnBudgetExceededError,
)

__version__ = "0.1.0"

__all__ = [
    "FieldwiseEngine",
    "ClassifierOrchestrator",
    "load_config",
    "Classifier",
    "GenerativeClassifier",
    "KeywordClassifier",
    "StaticClassifier",
    "ClassifierError",
    "ClassifierUnavailableError",
    "Decision",
    "FieldDescriptor",
    "FieldwiseConfig",
    "MalformedOutputError",
    "Strategy",
    "TurnBudgetExceededError",
]
