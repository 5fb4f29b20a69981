from abc import ABC, abstractmethod
from packages.aia_core.dto import AnswerScoreDTO

class IAnswerScorer(ABC):
    @abstractmethod
    async def score(self, question: str, answer: str) -> AnswerScoreDTO:
        """
        Grade one answer.
        Returns a score in [0, 100] and a rationale.
        The timeout sentinel answer must score 0.
        """
        pass
