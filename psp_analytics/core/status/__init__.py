"""
Configurable status classification.
"""

from .classifier import StatusClassifier, StatusVocabulary
from .vocabulary_config import StatusVocabularyBuilder, StatusVocabularyLoader

__all__ = [
    "StatusClassifier",
    "StatusVocabulary",
    "StatusVocabularyBuilder",
    "StatusVocabularyLoader",
]
