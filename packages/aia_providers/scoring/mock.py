import asyncio
import random
from typing import Optional

from packages.aia_core.config import AIAConfig
from packages.aia_core.dto import AnswerScoreDTO
from packages.aia_session.state import TIMEOUT_RATIONALE
from .base import IAnswerScorer

class MockAnswerScorer(IAnswerScorer):
    """
    Length-based heuristic scorer, clamped to [50, 95] with a +/-10 random adjustment.
    """
    def __init__(self, config: AIAConfig = None, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.latency_ms = 0
        if config and hasattr(config, 'MOCK_LATENCY_MS'):
            self.latency_ms = config.MOCK_LATENCY_MS

    async def score(self, question: str, answer: str) -> AnswerScoreDTO:
        if self.latency_ms > 0:
            await asyncio.sleep(self.latency_ms / 1000.0)

        if "TIMEOUT" in answer:
            return AnswerScoreDTO(score=0, rationale=TIMEOUT_RATIONALE)

        length_score = min(100, 30 + len(answer) / 2)
        adjustment = self.rng.randint(-10, 9)
        final = min(95, max(50, round(length_score + adjustment)))

        if final > 80:
            quality = "strong and concise"
        elif final > 60:
            quality = "adequate but lacked depth"
        else:
            quality = "brief or missed key points"
        return AnswerScoreDTO(score=final, rationale=f"The response was generally {quality}.")
