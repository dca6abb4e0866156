from .base import Classifier
from .generative import GenerativeClassifier
from .keyword import KeywordClassifier, clean_label
from .static import StaticClassifier

__all__ = [
    "Classifier",
    "GenerativeClassifier",
    "KeywordClassifier",
    "StaticClassifier",
    "clean_label",
]
