import asyncio
import os
import sys
import unittest

from pydantic import ValidationError

# Ensure project root is in path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.append(project_root)
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from packages.aia_core.dto import ContactInfoDTO, ResumeUploadDTO
from packages.aia_core.errors import CollaboratorError, InputValidationError
from packages.aia_session.dto import Turn
from packages.aia_session.state import (
    ABANDONED_SUMMARY,
    TIMEOUT_ANSWER,
    CandidateStatus,
    Difficulty,
    SessionEvent,
    TurnRole,
)
from session_fakes import build_controller, pdf_upload, wait_until


class TestIntake(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        (self.controller, self.repo, self.parser,
         self.generator, self.scorer, self.reporter) = build_controller()

    async def asyncTearDown(self):
        self.controller.timer.stop()

    async def test_initial_state(self):
        """A fresh controller holds one UPLOAD session and no finalized records."""
        session = self.controller.session
        self.assertEqual(session.status, CandidateStatus.UPLOAD)
        self.assertEqual(session.current_question_index, 0)
        self.assertEqual(session.history, [])
        self.assertEqual(self.controller.finalized, [])

    async def test_full_contact_upload_starts_interview(self):
        accepted = await self.controller.submit_resume(pdf_upload())

        self.assertTrue(accepted)
        session = self.controller.session
        self.assertEqual(session.status, CandidateStatus.INTERVIEWING)
        self.assertEqual(session.resume_file_name, "resume.pdf")
        self.assertEqual(len(session.history), 2)

        welcome, question = session.history
        self.assertEqual(welcome.question_id, 0)
        self.assertIsNone(welcome.score)
        self.assertIn("Hello, Alex Johnson", welcome.content)
        self.assertEqual(question.question_id, 1)
        self.assertEqual(question.role, TurnRole.INTERVIEWER)
        self.assertIsNone(question.score)
        self.assertEqual(question.time_spent, 20)

        self.assertEqual(session.current_question_index, 1)
        self.assertEqual(session.time_remaining, 20)
        self.assertEqual(self.generator.requested, [Difficulty.EASY])
        self.assertTrue(self.controller.timer.running)

        # Persisted with the camelCase shape
        stored = self.repo.raw["currentCandidate"]
        self.assertEqual(stored["status"], "INTERVIEWING")
        self.assertEqual(stored["timeRemaining"], 20)

    async def test_missing_fields_go_to_missing_info(self):
        self.parser.contact = ContactInfoDTO(name="Jamie Doe", email="jamie@example.com", phone="")

        await self.controller.submit_resume(pdf_upload("missing.pdf"))

        session = self.controller.session
        self.assertEqual(session.status, CandidateStatus.MISSING_INFO)
        self.assertEqual(session.name, "Jamie Doe")
        self.assertEqual(session.phone, "")
        self.assertEqual(session.history, [])
        self.assertEqual(self.generator.requested, [])

    async def test_confirm_missing_info_validates_and_starts(self):
        self.parser.contact = ContactInfoDTO(name="Chris Lee", email="", phone="")
        await self.controller.submit_resume(pdf_upload("no-contact.docx"))

        with self.assertRaises(InputValidationError) as ctx:
            await self.controller.confirm_missing_info({"email": "chris@example.com", "phone": "   "})
        self.assertEqual(ctx.exception.details["missing"], ["phone"])
        self.assertEqual(self.controller.session.status, CandidateStatus.MISSING_INFO)

        accepted = await self.controller.confirm_missing_info(
            {"email": " chris@example.com ", "phone": "555-0199"}
        )
        self.assertTrue(accepted)
        session = self.controller.session
        self.assertEqual(session.status, CandidateStatus.INTERVIEWING)
        self.assertEqual(session.email, "chris@example.com")
        self.assertEqual(session.name, "Chris Lee")
        self.assertIn("Thank you, Chris Lee", session.history[0].content)
        self.assertEqual(session.history[1].question_id, 1)

    async def test_invalid_file_type_is_rejected(self):
        with self.assertRaises(InputValidationError):
            await self.controller.submit_resume(ResumeUploadDTO(file_name="resume.txt"))
        self.assertEqual(self.controller.session.status, CandidateStatus.UPLOAD)
        self.assertEqual(self.parser.calls, [])

    async def test_parse_failure_reverts_to_upload(self):
        self.parser.fail = True
        with self.assertRaises(CollaboratorError) as ctx:
            await self.controller.submit_resume(pdf_upload())
        self.assertEqual(ctx.exception.collaborator, "parseResume")
        self.assertEqual(self.controller.session.status, CandidateStatus.UPLOAD)

        # Same command can be retried
        self.parser.fail = False
        self.assertTrue(await self.controller.submit_resume(pdf_upload()))
        self.assertEqual(self.controller.session.status, CandidateStatus.INTERVIEWING)

    async def test_question_generation_failure_reverts_to_upload(self):
        self.generator.fail = True
        with self.assertRaises(CollaboratorError):
            await self.controller.submit_resume(pdf_upload())
        session = self.controller.session
        self.assertEqual(session.status, CandidateStatus.UPLOAD)
        self.assertEqual(session.history, [])

    async def test_commands_outside_their_state_are_noops(self):
        self.assertFalse(await self.controller.confirm_missing_info({"name": "x"}))
        self.assertFalse(await self.controller.submit_answer("anything"))
        self.assertFalse(await self.controller.pause())
        self.assertFalse(await self.controller.resume())
        self.assertFalse(await self.controller.start_new())

        await self.controller.submit_resume(pdf_upload())
        self.assertFalse(await self.controller.submit_resume(pdf_upload("other.pdf")))
        self.assertEqual(self.parser.calls, ["resume.pdf"])


class TestAnswering(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        (self.controller, self.repo, self.parser,
         self.generator, self.scorer, self.reporter) = build_controller()
        await self.controller.submit_resume(pdf_upload())

    async def asyncTearDown(self):
        self.controller.timer.stop()

    async def test_submit_answer_scores_and_advances(self):
        self.controller.session.time_remaining = 12

        accepted = await self.controller.submit_answer("State is owned, props are passed in.")

        self.assertTrue(accepted)
        session = self.controller.session
        question, answer, next_question = session.history[1:]
        self.assertEqual(question.score, 70)
        self.assertEqual(question.rationale, "ok")
        self.assertEqual(question.time_spent, 8)
        self.assertEqual(answer.role, TurnRole.CANDIDATE)
        self.assertEqual(answer.question_id, 1)
        self.assertEqual(answer.time_spent, 8)
        self.assertEqual(next_question.question_id, 2)
        self.assertIsNone(next_question.score)
        self.assertEqual(session.current_question_index, 2)
        self.assertEqual(session.time_remaining, 20)
        self.assertEqual(self.scorer.calls[0][0], question.content)

    async def test_empty_answer_is_a_validation_error(self):
        with self.assertRaises(InputValidationError):
            await self.controller.submit_answer("   ")
        self.assertEqual(len(self.controller.session.history), 2)
        self.assertEqual(self.scorer.calls, [])

    async def test_stale_question_id_is_ignored(self):
        self.assertFalse(await self.controller.submit_answer("late answer", question_id=2))
        self.assertTrue(await self.controller.submit_answer("answer", question_id=1))
        self.assertFalse(await self.controller.submit_answer("double submit", question_id=1))
        self.assertEqual(len(self.scorer.calls), 1)

    async def test_scoring_failure_leaves_question_pending(self):
        self.scorer.fail = True
        with self.assertRaises(CollaboratorError):
            await self.controller.submit_answer("my answer")

        session = self.controller.session
        self.assertEqual(len(session.history), 2)
        self.assertEqual(session.pending_question().question_id, 1)
        self.assertEqual(session.time_remaining, 20)
        self.assertTrue(self.controller.timer.running)

        self.scorer.fail = False
        self.assertTrue(await self.controller.submit_answer("my answer"))
        self.assertEqual(self.controller.session.current_question_index, 2)

    async def test_history_grows_and_index_is_monotonic(self):
        lengths, indexes = [], []
        for i in range(5):
            await self.controller.submit_answer(f"answer {i}")
            session = self.controller.session
            lengths.append(len(session.history))
            indexes.append(session.current_question_index)
            pending = [t for t in session.history if t.is_pending]
            self.assertEqual(len(pending), 1)

        self.assertEqual(lengths, sorted(lengths))
        self.assertEqual(indexes, [2, 3, 4, 5, 6])
        self.assertEqual(
            self.generator.requested,
            [Difficulty.EASY, Difficulty.EASY, Difficulty.MEDIUM,
             Difficulty.MEDIUM, Difficulty.HARD, Difficulty.HARD]
        )

    async def test_answering_question_six_completes_interview(self):
        events = []
        self.controller.add_listener(lambda event, payload: events.append(event))
        candidate_id = self.controller.session.id

        for i in range(6):
            self.assertTrue(await self.controller.submit_answer(f"answer number {i}"))

        self.assertEqual(len(self.reporter.histories), 1)
        scored = [t for t in self.reporter.histories[0] if t.is_question and t.score is not None]
        self.assertEqual(len(scored), 6)

        finalized = self.controller.finalized
        self.assertEqual(len(finalized), 1)
        record = finalized[0]
        self.assertEqual(record.id, candidate_id)
        self.assertEqual(record.status, CandidateStatus.COMPLETED)
        self.assertEqual(record.score, 70)
        self.assertEqual(record.summary, "Solid candidate.")
        self.assertEqual(record.current_question_index, 7)
        self.assertEqual(len(record.history), 13)

        fresh = self.controller.session
        self.assertNotEqual(fresh.id, candidate_id)
        self.assertEqual(fresh.status, CandidateStatus.UPLOAD)
        self.assertFalse(self.controller.timer.running)
        self.assertEqual(events.count(SessionEvent.SESSION_COMPLETED), 1)

        stored = self.repo.raw
        self.assertEqual(stored["completedCandidates"][0]["status"], "COMPLETED")
        self.assertEqual(stored["currentCandidate"]["id"], fresh.id)

    async def test_report_failure_keeps_question_six_pending(self):
        for i in range(5):
            await self.controller.submit_answer(f"answer {i}")
        self.reporter.fail = True

        with self.assertRaises(CollaboratorError):
            await self.controller.submit_answer("final answer")

        session = self.controller.session
        self.assertEqual(session.status, CandidateStatus.INTERVIEWING)
        self.assertEqual(session.pending_question().question_id, 6)
        self.assertEqual(self.controller.finalized, [])

    async def test_concurrent_submission_for_same_question(self):
        """Only the first of two overlapping submissions is accepted."""
        self.scorer.gate = asyncio.Event()

        first = asyncio.create_task(self.controller.submit_answer("first", question_id=1))
        await asyncio.sleep(0)
        second = await self.controller.submit_answer("second", question_id=1)
        self.assertFalse(second)

        self.scorer.gate.set()
        self.assertTrue(await first)
        answers = [t.content for t in self.controller.session.history if t.role == TurnRole.CANDIDATE]
        self.assertEqual(answers, ["first"])


class TestPauseAndStartNew(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        (self.controller, self.repo, self.parser,
         self.generator, self.scorer, self.reporter) = build_controller()
        await self.controller.submit_resume(pdf_upload())

    async def asyncTearDown(self):
        self.controller.timer.stop()

    async def test_pause_freezes_and_resume_restarts(self):
        self.controller.session.time_remaining = 13

        self.assertTrue(await self.controller.pause())
        session = self.controller.session
        self.assertEqual(session.status, CandidateStatus.PAUSED)
        self.assertEqual(session.time_remaining, 13)
        self.assertFalse(self.controller.timer.running)
        self.assertIsNotNone(self.controller.resume_offer)

        # Paused sessions accept no answers
        self.assertFalse(await self.controller.submit_answer("sneaky"))

        self.assertTrue(await self.controller.resume())
        self.assertEqual(session.status, CandidateStatus.INTERVIEWING)
        self.assertEqual(session.time_remaining, 13)
        self.assertTrue(self.controller.timer.running)
        self.assertIsNone(self.controller.resume_offer)

    async def test_start_new_archives_abandoned_session(self):
        await self.controller.submit_answer("one")
        await self.controller.submit_answer("two")
        old = self.controller.session
        self.assertEqual(old.current_question_index, 3)

        self.assertTrue(await self.controller.start_new())

        record = self.controller.finalized[-1]
        self.assertEqual(record.id, old.id)
        self.assertEqual(record.status, CandidateStatus.ABANDONED)
        self.assertEqual(record.score, 0)
        self.assertEqual(record.summary, ABANDONED_SUMMARY)
        fresh = self.controller.session
        self.assertEqual(fresh.status, CandidateStatus.UPLOAD)
        self.assertNotEqual(fresh.id, old.id)
        self.assertFalse(self.controller.timer.running)

    async def test_start_new_from_paused(self):
        await self.controller.pause()
        self.assertTrue(await self.controller.start_new())
        self.assertEqual(self.controller.finalized[-1].status, CandidateStatus.ABANDONED)

    async def test_welcome_only_session_is_discarded_silently(self):
        await self.controller.start_new()
        welcome = self.controller.finalized[0].history[0]

        # Welcome turn only, no question delivered yet
        session = self.controller.session
        session.status = CandidateStatus.INTERVIEWING
        session.history.append(Turn(role=TurnRole.INTERVIEWER, question_id=0, content=welcome.content))
        session.current_question_index = 1

        self.assertTrue(await self.controller.start_new())
        self.assertEqual(len(self.controller.finalized), 1)
        self.assertNotEqual(self.controller.session.id, session.id)

    async def test_finalized_list_is_a_copy(self):
        await self.controller.start_new()
        self.controller.finalized.clear()
        self.assertEqual(len(self.controller.finalized), 1)

    async def test_archived_turns_cannot_be_rewritten(self):
        await self.controller.submit_answer("one")
        await self.controller.start_new()
        record = self.controller.finalized[0]

        with self.assertRaises(ValidationError):
            record.history[1].score = 99

        self.assertEqual(self.controller.finalized[0].history[1].score, 70)
        self.assertEqual(self.repo.raw["completedCandidates"][0]["history"][1]["score"], 70)

    async def test_clear_all_data(self):
        await self.controller.start_new()
        self.assertTrue(await self.controller.clear_all_data())

        self.assertEqual(self.controller.finalized, [])
        self.assertEqual(self.controller.session.status, CandidateStatus.UPLOAD)
        self.assertIsNone(self.repo.raw)
        self.assertFalse(self.controller.timer.running)

    async def test_view_finalized_candidate(self):
        await self.controller.submit_answer("one")
        candidate_id = self.controller.session.id
        await self.controller.start_new()

        record = self.controller.view_finalized_candidate(candidate_id)
        self.assertEqual(record.id, candidate_id)
        self.assertIsNone(self.controller.view_finalized_candidate("unknown"))


class TestCountdown(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        (self.controller, self.repo, self.parser,
         self.generator, self.scorer, self.reporter) = build_controller(tick_interval=0.001)

    async def asyncTearDown(self):
        self.controller.timer.stop()

    async def test_timeout_submits_sentinel_and_advances(self):
        events = []
        self.controller.add_listener(lambda event, payload: events.append((event, payload)))
        await self.controller.submit_resume(pdf_upload())

        await wait_until(lambda: self.controller.session.current_question_index >= 2)

        session = self.controller.session
        question_one = session.history[1]
        self.assertEqual(question_one.score, 0)
        self.assertEqual(question_one.time_spent, 20)
        candidate_turn = session.history[2]
        self.assertEqual(candidate_turn.content, TIMEOUT_ANSWER)
        self.assertEqual(session.history[3].question_id, 2)

        timeouts = [p for e, p in events if e == SessionEvent.QUESTION_TIMEOUT and p["question_id"] == 1]
        self.assertEqual(len(timeouts), 1)
        self.assertEqual(timeouts[0]["question_id"], 1)
        ticks = [p for e, p in events if e == SessionEvent.TIMER_TICK and p["question_id"] == 1]
        self.assertEqual(ticks[-1]["time_remaining"], 0)
        self.assertEqual(len(ticks), 20)

    async def test_manual_submission_beats_timeout(self):
        await self.controller.submit_resume(pdf_upload())
        self.controller.session.time_remaining = 2
        self.scorer.gate = asyncio.Event()

        submission = asyncio.create_task(self.controller.submit_answer("quick answer", question_id=1))
        await asyncio.sleep(0.02)  # plenty of ticks if the countdown were still running
        self.scorer.gate.set()
        self.assertTrue(await submission)

        answers = [t for t in self.controller.session.history if t.role == TurnRole.CANDIDATE]
        self.assertEqual(len(answers), 1)
        self.assertEqual(answers[0].content, "quick answer")
        self.assertEqual(len(self.scorer.calls), 1)

    async def test_pause_stops_ticking(self):
        await self.controller.submit_resume(pdf_upload())
        await self.controller.pause()
        frozen = self.controller.session.time_remaining

        await asyncio.sleep(0.02)
        self.assertEqual(self.controller.session.time_remaining, frozen)
        self.assertEqual(self.controller.session.status, CandidateStatus.PAUSED)

    async def test_resume_with_expired_question_times_out_immediately(self):
        await self.controller.submit_resume(pdf_upload())
        await self.controller.pause()
        self.controller.session.time_remaining = 0

        self.assertTrue(await self.controller.resume())

        session = self.controller.session
        self.assertEqual(session.history[1].score, 0)
        self.assertEqual(session.history[2].content, TIMEOUT_ANSWER)
        self.assertEqual(session.current_question_index, 2)

    async def test_timeout_beats_late_manual_submission(self):
        self.scorer.gate = asyncio.Event()
        await self.controller.submit_resume(pdf_upload())
        self.controller.session.time_remaining = 1

        # Countdown expired and the timeout submission is waiting on the scorer
        await wait_until(lambda: len(self.scorer.calls) == 1)
        late = await self.controller.submit_answer("late answer", question_id=1)
        self.assertFalse(late)

        self.scorer.gate.set()
        await wait_until(lambda: self.controller.session.current_question_index >= 2)

        question_one_calls = [c for c in self.scorer.calls if c[0] == "Easy question #1"]
        self.assertEqual(len(question_one_calls), 1)
        self.assertEqual(question_one_calls[0][1], TIMEOUT_ANSWER)
        self.assertEqual(self.controller.session.history[2].content, TIMEOUT_ANSWER)
        self.assertEqual(self.controller.session.history[1].score, 0)

    async def test_failed_timeout_submission_is_reported(self):
        events = []
        self.controller.add_listener(lambda event, payload: events.append((event, payload)))
        self.scorer.fail = True
        await self.controller.submit_resume(pdf_upload())
        self.controller.session.time_remaining = 1

        await wait_until(lambda: any(e == SessionEvent.TIMEOUT_SUBMISSION_FAILED for e, _ in events))

        failure = [p for e, p in events if e == SessionEvent.TIMEOUT_SUBMISSION_FAILED][0]
        self.assertEqual(failure["question_id"], 1)
        self.assertEqual(failure["collaborator"], "scoreAnswer")
        session = self.controller.session
        self.assertEqual(session.status, CandidateStatus.INTERVIEWING)
        self.assertEqual(session.pending_question().question_id, 1)
        self.assertEqual(session.time_remaining, 0)
        self.assertFalse(self.controller.timer.running)

        # A manual submission recovers the pending question
        self.scorer.fail = False
        self.assertTrue(await self.controller.submit_answer("recovered", question_id=1))
        self.assertEqual(self.controller.session.current_question_index, 2)


if __name__ == '__main__':
    unittest.main()
