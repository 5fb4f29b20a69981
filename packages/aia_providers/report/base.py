from abc import ABC, abstractmethod
from typing import Sequence
from packages.aia_core.dto import FinalReportDTO
from packages.aia_session.dto import Turn

class IReportGenerator(ABC):
    @abstractmethod
    async def generate(self, history: Sequence[Turn]) -> FinalReportDTO:
        """
        Summarize a finished interview.
        final_score is the rounded mean of the scored interviewer turns.
        """
        pass
