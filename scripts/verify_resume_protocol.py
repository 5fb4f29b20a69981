import os
import shutil
import sys
import tempfile
import unittest

# Ensure project root is in path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.append(project_root)
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from packages.aia_session.dto import CandidateSession, InterviewSnapshot, Turn
from packages.aia_session.infrastructure.file_repo import JsonFileSnapshotRepository
from packages.aia_session.infrastructure.memory_repo import MemorySnapshotRepository
from packages.aia_session.state import CandidateStatus, ResumeChoice, TurnRole
from session_fakes import build_controller, pdf_upload


class TestResumeProtocol(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.repo = MemorySnapshotRepository()
        self.controllers = []

    async def asyncTearDown(self):
        for controller in self.controllers:
            controller.timer.stop()

    def make_controller(self, repository=None):
        controller = build_controller(repository=repository or self.repo)[0]
        self.controllers.append(controller)
        return controller

    async def interview_at_question_three(self):
        first = self.make_controller()
        await first.submit_resume(pdf_upload())
        await first.submit_answer("first answer")
        await first.submit_answer("second answer")
        first.session.time_remaining = 45
        return first

    async def test_fresh_start(self):
        controller = self.make_controller()
        offer = await controller.start()
        self.assertIsNone(offer)
        self.assertEqual(controller.session.status, CandidateStatus.UPLOAD)

    async def test_paused_session_round_trip(self):
        first = await self.interview_at_question_three()
        await first.pause()
        first.timer.stop()
        candidate_id = first.session.id

        # Simulated restart
        second = self.make_controller()
        offer = await second.start()

        self.assertIsNotNone(offer)
        self.assertEqual(offer.candidate_id, candidate_id)
        self.assertEqual(offer.question_index, 3)
        self.assertEqual(offer.time_remaining, 45)
        self.assertEqual(offer.choices, (ResumeChoice.RESUME, ResumeChoice.START_NEW))
        self.assertIn("Q3", offer.message)
        self.assertFalse(second.timer.running)

        self.assertTrue(await second.resume())
        session = second.session
        self.assertEqual(session.id, candidate_id)
        self.assertEqual(session.status, CandidateStatus.INTERVIEWING)
        self.assertEqual(session.time_remaining, 45)
        self.assertEqual(session.pending_question().question_id, 3)
        self.assertEqual(len(session.history), 6)
        self.assertTrue(second.timer.running)

    async def test_interviewing_session_is_downgraded_to_paused(self):
        first = await self.interview_at_question_three()
        first.store.persist()
        first.timer.stop()

        second = self.make_controller()
        offer = await second.start()

        self.assertIsNotNone(offer)
        self.assertEqual(second.session.status, CandidateStatus.PAUSED)
        self.assertEqual(self.repo.raw["currentCandidate"]["status"], "PAUSED")
        self.assertFalse(second.timer.running)

    async def test_start_new_from_offer(self):
        first = await self.interview_at_question_three()
        first.timer.stop()
        old_id = first.session.id

        second = self.make_controller()
        await second.start()
        self.assertTrue(await second.start_new())

        self.assertEqual(second.finalized[0].id, old_id)
        self.assertEqual(second.finalized[0].status, CandidateStatus.ABANDONED)
        self.assertEqual(second.session.status, CandidateStatus.UPLOAD)
        self.assertIsNone(second.resume_offer)

    async def test_processing_reverts_to_upload(self):
        session = CandidateSession(status=CandidateStatus.PROCESSING, resume_file_name="resume.pdf")
        self.repo.save(InterviewSnapshot(current_candidate=session))

        controller = self.make_controller()
        offer = await controller.start()

        self.assertIsNone(offer)
        self.assertEqual(controller.session.status, CandidateStatus.UPLOAD)
        self.assertEqual(self.repo.raw["currentCandidate"]["status"], "UPLOAD")

    async def test_welcome_only_session_gets_first_question(self):
        session = CandidateSession(
            name="Alex Johnson",
            email="alex@example.com",
            phone="555-0101",
            status=CandidateStatus.INTERVIEWING,
            current_question_index=1,
            history=[Turn(role=TurnRole.INTERVIEWER, question_id=0, content="Welcome")]
        )
        self.repo.save(InterviewSnapshot(current_candidate=session))

        controller = self.make_controller()
        offer = await controller.start()

        self.assertIsNone(offer)
        restored = controller.session
        self.assertEqual(restored.status, CandidateStatus.INTERVIEWING)
        self.assertEqual(len(restored.history), 2)
        self.assertEqual(restored.pending_question().question_id, 1)
        self.assertEqual(restored.time_remaining, 20)
        self.assertTrue(controller.timer.running)

    async def test_missing_info_is_restored_as_is(self):
        session = CandidateSession(name="Chris Lee", status=CandidateStatus.MISSING_INFO)
        self.repo.save(InterviewSnapshot(current_candidate=session))

        controller = self.make_controller()
        self.assertIsNone(await controller.start())
        self.assertEqual(controller.session.status, CandidateStatus.MISSING_INFO)
        self.assertEqual(controller.session.name, "Chris Lee")


class TestRestartFromDisk(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.test_dir = tempfile.mkdtemp()

    async def asyncTearDown(self):
        shutil.rmtree(self.test_dir)

    async def test_state_survives_process_restart(self):
        first = build_controller(repository=JsonFileSnapshotRepository(self.test_dir))[0]
        await first.submit_resume(pdf_upload())
        await first.submit_answer("an answer")
        first.timer.stop()
        candidate_id = first.session.id

        second = build_controller(repository=JsonFileSnapshotRepository(self.test_dir))[0]
        offer = await second.start()
        second.timer.stop()

        self.assertEqual(offer.candidate_id, candidate_id)
        self.assertEqual(offer.question_index, 2)
        self.assertEqual(len(second.session.history), 4)
        self.assertEqual(second.session.history[1].score, 70)


if __name__ == '__main__':
    unittest.main()
