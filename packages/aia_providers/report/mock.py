import asyncio
from typing import Sequence

from packages.aia_core.config import AIAConfig
from packages.aia_core.dto import FinalReportDTO
from packages.aia_session.catalog import DEFAULT_CATALOG, QuestionCatalog
from packages.aia_session.dto import Turn
from packages.aia_session.scoring import compute_final_score
from .base import IReportGenerator

STRONG_ANSWER_SCORE = 80
# Quick submission: answered in less than this share of the slot time limit
QUICK_ANSWER_RATIO = 0.5

class MockReportGenerator(IReportGenerator):
    """
    Template summary over the scored interviewer turns.
    """
    def __init__(self, config: AIAConfig = None, catalog: QuestionCatalog = DEFAULT_CATALOG):
        self.catalog = catalog
        self.latency_ms = 0
        if config and hasattr(config, 'MOCK_LATENCY_MS'):
            self.latency_ms = config.MOCK_LATENCY_MS

    async def generate(self, history: Sequence[Turn]) -> FinalReportDTO:
        if self.latency_ms > 0:
            await asyncio.sleep(self.latency_ms / 1000.0)

        scored = [turn for turn in history if turn.is_question and turn.score is not None]
        final_score = compute_final_score(history)
        strong = sum(1 for turn in scored if turn.score >= STRONG_ANSWER_SCORE)
        quick = 0
        for turn in scored:
            slot = self.catalog.get(turn.question_id)
            if slot and turn.time_spent < slot.time_limit_seconds * QUICK_ANSWER_RATIO:
                quick += 1

        mastery = "strong mastery" if strong >= 3 else "foundational understanding"
        summary = (
            f"The candidate scored an average of {final_score}/100 across {len(scored)} questions. "
            f"They demonstrated {mastery} in technical areas. "
            f"The timed nature of the interview resulted in {quick} quick submissions, "
            f"indicating confidence in some areas."
        )
        return FinalReportDTO(final_score=final_score, summary=summary)
