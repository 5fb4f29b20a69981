import math
from fractions import Fraction
from typing import Sequence, TYPE_CHECKING

from packages.aia_core.dto import AnswerScoreDTO, FinalReportDTO
from packages.aia_core.errors import CollaboratorError
from packages.aia_core.logging import get_logger
from .dto import Turn
from .state import TIMEOUT_ANSWER, TIMEOUT_RATIONALE

if TYPE_CHECKING:
    from packages.aia_providers.scoring.base import IAnswerScorer
    from packages.aia_providers.report.base import IReportGenerator

logger = get_logger("aia.session.scoring")

def compute_final_score(history: Sequence[Turn]) -> int:
    """
    Rounded (half-up) mean of all scored interviewer questions; 0 if none were scored.
    """
    scores = [turn.score for turn in history if turn.is_question and turn.score is not None]
    if not scores:
        return 0
    return math.floor(Fraction(sum(scores), len(scores)) + Fraction(1, 2))

def _check_range(collaborator: str, value: int) -> None:
    if not 0 <= value <= 100:
        raise CollaboratorError(collaborator, f"score {value} outside [0, 100]")

class ScoringPipeline:
    """
    Glue between the controller and the grading collaborators.
    Wraps collaborator failures in CollaboratorError and enforces the output contract.
    """
    def __init__(self, scorer: "IAnswerScorer", reporter: "IReportGenerator"):
        self.scorer = scorer
        self.reporter = reporter

    async def score_answer(self, question: str, answer: str) -> AnswerScoreDTO:
        try:
            result = await self.scorer.score(question, answer)
        except CollaboratorError:
            raise
        except Exception as e:
            logger.exception("Answer scoring failed")
            raise CollaboratorError("scoreAnswer", str(e)) from e

        if answer == TIMEOUT_ANSWER and result.score != 0:
            logger.warning(f"Scorer returned {result.score} for a timeout answer; forcing 0")
            return AnswerScoreDTO(score=0, rationale=TIMEOUT_RATIONALE)

        _check_range("scoreAnswer", result.score)
        return result

    async def generate_report(self, history: Sequence[Turn]) -> FinalReportDTO:
        try:
            report = await self.reporter.generate(list(history))
        except CollaboratorError:
            raise
        except Exception as e:
            logger.exception("Final report generation failed")
            raise CollaboratorError("generateFinalReport", str(e)) from e

        _check_range("generateFinalReport", report.final_score)
        return report
