import os
import sys
import unittest

# Ensure project root is in path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.append(project_root)

from packages.aia_core.dto import AnswerScoreDTO, FinalReportDTO
from packages.aia_core.errors import CollaboratorError
from packages.aia_session.dto import Turn
from packages.aia_session.scoring import ScoringPipeline, compute_final_score
from packages.aia_session.state import TIMEOUT_ANSWER, TIMEOUT_RATIONALE, TurnRole


def history_with(*scores):
    turns = [Turn(role=TurnRole.INTERVIEWER, question_id=0, content="Welcome")]
    for qid, score in enumerate(scores, start=1):
        turns.append(Turn(role=TurnRole.INTERVIEWER, question_id=qid, content=f"Q{qid}", score=score))
        if score is not None:
            turns.append(Turn(role=TurnRole.CANDIDATE, question_id=qid, content="answer"))
    return turns


class StaticScorer:
    def __init__(self, score=None, error=None):
        self.score_value = score
        self.error = error

    async def score(self, question, answer):
        if self.error:
            raise self.error
        return AnswerScoreDTO(score=self.score_value, rationale="static")


class StaticReporter:
    def __init__(self, final_score=None, error=None):
        self.final_score = final_score
        self.error = error

    async def generate(self, history):
        if self.error:
            raise self.error
        score = self.final_score if self.final_score is not None else compute_final_score(history)
        return FinalReportDTO(final_score=score, summary="static")


class TestFinalScore(unittest.TestCase):
    def test_mean_of_scored_questions(self):
        self.assertEqual(compute_final_score(history_with(80, 90, 70)), 80)

    def test_rounds_half_up(self):
        self.assertEqual(compute_final_score(history_with(70, 71)), 71)  # 70.5
        self.assertEqual(compute_final_score(history_with(0, 1)), 1)     # 0.5
        self.assertEqual(compute_final_score(history_with(70, 70, 71)), 70)  # 70.33

    def test_timeouts_count_as_zero(self):
        self.assertEqual(compute_final_score(history_with(90, 0, 90, 0, 90, 0)), 45)

    def test_unscored_and_welcome_turns_are_ignored(self):
        self.assertEqual(compute_final_score(history_with(60, None)), 60)

    def test_no_scored_questions(self):
        self.assertEqual(compute_final_score(history_with()), 0)
        self.assertEqual(compute_final_score([]), 0)


class TestScoringPipeline(unittest.IsolatedAsyncioTestCase):
    async def test_passes_valid_scores_through(self):
        pipeline = ScoringPipeline(StaticScorer(score=77), StaticReporter())
        result = await pipeline.score_answer("Q", "A")
        self.assertEqual(result.score, 77)

    async def test_timeout_answer_is_forced_to_zero(self):
        pipeline = ScoringPipeline(StaticScorer(score=60), StaticReporter())
        result = await pipeline.score_answer("Q", TIMEOUT_ANSWER)
        self.assertEqual(result.score, 0)
        self.assertEqual(result.rationale, TIMEOUT_RATIONALE)

    async def test_out_of_range_score_is_a_collaborator_error(self):
        pipeline = ScoringPipeline(StaticScorer(score=120), StaticReporter(final_score=-5))
        with self.assertRaises(CollaboratorError) as ctx:
            await pipeline.score_answer("Q", "A")
        self.assertEqual(ctx.exception.collaborator, "scoreAnswer")

        with self.assertRaises(CollaboratorError) as ctx:
            await pipeline.generate_report(history_with(50))
        self.assertEqual(ctx.exception.collaborator, "generateFinalReport")

    async def test_collaborator_exceptions_are_wrapped(self):
        pipeline = ScoringPipeline(
            StaticScorer(error=TimeoutError("slow model")),
            StaticReporter(error=ConnectionError("offline"))
        )
        with self.assertRaises(CollaboratorError) as ctx:
            await pipeline.score_answer("Q", "A")
        self.assertIsInstance(ctx.exception.__cause__, TimeoutError)

        with self.assertRaises(CollaboratorError):
            await pipeline.generate_report([])

    async def test_report_receives_full_history(self):
        pipeline = ScoringPipeline(StaticScorer(score=1), StaticReporter())
        report = await pipeline.generate_report(history_with(85, 95))
        self.assertEqual(report.final_score, 90)


if __name__ == '__main__':
    unittest.main()
