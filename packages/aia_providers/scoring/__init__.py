from .base import IAnswerScorer
from .mock import MockAnswerScorer

__all__ = ["IAnswerScorer", "MockAnswerScorer"]
