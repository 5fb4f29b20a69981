import os
import sys
import unittest

from pydantic import ValidationError

# Ensure project root is in path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.append(project_root)

from packages.aia_core.errors import InvariantViolationError
from packages.aia_session.catalog import DEFAULT_CATALOG, QuestionCatalog, QuestionSlot
from packages.aia_session.dto import CandidateSession, FinalizedCandidate, FrozenTurn, InterviewSnapshot, Turn
from packages.aia_session.state import CandidateStatus, Difficulty, TurnRole


def question(qid: int, score=None) -> Turn:
    return Turn(role=TurnRole.INTERVIEWER, question_id=qid, content=f"Q{qid}", score=score)


class TestQuestionCatalog(unittest.TestCase):
    def test_default_progression(self):
        plan = [(slot.id, slot.difficulty, slot.time_limit_seconds) for slot in DEFAULT_CATALOG]
        self.assertEqual(plan, [
            (1, Difficulty.EASY, 20),
            (2, Difficulty.EASY, 20),
            (3, Difficulty.MEDIUM, 60),
            (4, Difficulty.MEDIUM, 60),
            (5, Difficulty.HARD, 120),
            (6, Difficulty.HARD, 120),
        ])
        self.assertEqual(len(DEFAULT_CATALOG), 6)
        self.assertEqual(DEFAULT_CATALOG.exhausted_index, 7)

    def test_lookup(self):
        self.assertEqual(DEFAULT_CATALOG.get(3).difficulty, Difficulty.MEDIUM)
        self.assertIsNone(DEFAULT_CATALOG.get(0))
        self.assertIsNone(DEFAULT_CATALOG.get(7))
        with self.assertRaises(KeyError):
            DEFAULT_CATALOG.require(7)

    def test_ids_must_be_contiguous(self):
        with self.assertRaises(ValueError):
            QuestionCatalog([
                QuestionSlot(id=1, difficulty=Difficulty.EASY, time_limit_seconds=10),
                QuestionSlot(id=3, difficulty=Difficulty.HARD, time_limit_seconds=10),
            ])

    def test_slots_are_immutable(self):
        slot = DEFAULT_CATALOG.get(1)
        with self.assertRaises(ValidationError):
            slot.time_limit_seconds = 999


class TestCandidateSession(unittest.TestCase):
    def test_new_sessions_get_distinct_ids(self):
        self.assertNotEqual(CandidateSession().id, CandidateSession().id)

    def test_pending_question(self):
        session = CandidateSession(history=[
            Turn(role=TurnRole.INTERVIEWER, question_id=0, content="Welcome"),
            question(1, score=80),
            Turn(role=TurnRole.CANDIDATE, question_id=1, content="answer"),
            question(2),
        ])
        self.assertEqual(session.pending_question().question_id, 2)
        self.assertEqual([t.question_id for t in session.scored_turns()], [1])
        self.assertTrue(session.has_question_turns())

    def test_welcome_turn_is_never_pending(self):
        session = CandidateSession(history=[
            Turn(role=TurnRole.INTERVIEWER, question_id=0, content="Welcome")
        ])
        self.assertIsNone(session.pending_question())
        self.assertFalse(session.has_question_turns())

    def test_two_pending_questions_break_the_invariant(self):
        session = CandidateSession(history=[question(1), question(2)])
        with self.assertRaises(InvariantViolationError):
            session.pending_question()

    def test_score_range_is_validated(self):
        with self.assertRaises(ValidationError):
            question(1, score=101)
        turn = question(1)
        with self.assertRaises(ValidationError):
            turn.score = -1

    def test_missing_contact_fields(self):
        session = CandidateSession(name="Jamie Doe", email="", phone="")
        self.assertEqual(session.missing_contact_fields(), ["email", "phone"])


class TestFinalizedCandidate(unittest.TestCase):
    def setUp(self):
        self.session = CandidateSession(
            name="Alex Johnson",
            email="alex@example.com",
            phone="555-0101",
            status=CandidateStatus.INTERVIEWING,
            current_question_index=3,
            time_remaining=42,
            history=[question(1, score=70), question(2)]
        )

    def test_freeze_copies_and_overrides(self):
        record = FinalizedCandidate.freeze(
            self.session, CandidateStatus.COMPLETED, score=70, summary="Good.",
            current_question_index=7, time_remaining=0
        )
        self.assertEqual(record.id, self.session.id)
        self.assertEqual(record.status, CandidateStatus.COMPLETED)
        self.assertEqual(record.current_question_index, 7)
        self.assertEqual(record.time_remaining, 0)
        self.assertEqual(len(record.history), 2)
        self.assertIsInstance(record.history, tuple)

        # Later edits to the live session do not leak into the record
        self.session.history[1].score = 50
        self.assertIsNone(record.history[1].score)

    def test_record_is_frozen(self):
        record = FinalizedCandidate.freeze(self.session, CandidateStatus.ABANDONED, score=0, summary="x")
        with self.assertRaises(ValidationError):
            record.score = 100
        self.assertEqual(record.time_remaining, 42)

    def test_record_turns_are_frozen(self):
        record = FinalizedCandidate.freeze(self.session, CandidateStatus.ABANDONED, score=0, summary="x")
        self.assertIsInstance(record.history[0], FrozenTurn)
        with self.assertRaises(ValidationError):
            record.history[0].score = 99
        with self.assertRaises(ValidationError):
            record.history[1].content = "rewritten"
        self.assertEqual(record.history[0].score, 70)
        self.assertEqual(record.history[1].content, "Q2")

    def test_loaded_record_turns_are_frozen(self):
        record = FinalizedCandidate.freeze(self.session, CandidateStatus.COMPLETED, score=70, summary="ok")
        data = InterviewSnapshot(completed_candidates=[record]).model_dump(mode="json", by_alias=True)
        restored = InterviewSnapshot.model_validate(data).completed_candidates[0]
        with self.assertRaises(ValidationError):
            restored.history[0].score = 1

    def test_only_terminal_statuses(self):
        with self.assertRaises(ValueError):
            FinalizedCandidate.freeze(self.session, CandidateStatus.PAUSED, score=0, summary="x")


class TestSnapshotShape(unittest.TestCase):
    def test_camel_case_keys(self):
        snapshot = InterviewSnapshot(current_candidate=CandidateSession(), completed_candidates=[])
        data = snapshot.model_dump(mode="json", by_alias=True)

        self.assertEqual(set(data.keys()), {"currentCandidate", "completedCandidates"})
        current = data["currentCandidate"]
        for key in ("currentQuestionIndex", "timeRemaining", "resumeFileName", "history", "status"):
            self.assertIn(key, current)
        self.assertEqual(current["status"], "UPLOAD")

    def test_round_trip_keeps_history(self):
        session = CandidateSession(history=[question(1, score=90)], status=CandidateStatus.PAUSED)
        data = InterviewSnapshot(current_candidate=session).model_dump(mode="json", by_alias=True)
        restored = InterviewSnapshot.model_validate(data)

        self.assertEqual(restored.current_candidate.status, CandidateStatus.PAUSED)
        self.assertEqual(restored.current_candidate.history[0].score, 90)
        self.assertEqual(data["currentCandidate"]["history"][0]["questionId"], 1)


if __name__ == '__main__':
    unittest.main()
