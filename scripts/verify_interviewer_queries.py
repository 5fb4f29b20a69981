import os
import sys
import unittest

# Ensure project root is in path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.append(project_root)
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from packages.aia_core.dto import ContactInfoDTO
from packages.aia_service.admin_query import InterviewerQueryService, SortField, SortOrder
from packages.aia_session.state import TIMEOUT_ANSWER
from session_fakes import build_controller, pdf_upload

CANDIDATES = [
    ("Maria Garcia", "maria@example.com", 88),
    ("alex Johnson", "alex@corp.io", 72),
    ("Bo Chen", "bo.chen@example.com", 95),
]


class TestInterviewerQueries(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        (self.controller, _, self.parser, _, self.scorer, _) = build_controller()
        self.ids = {}
        for name, email, score in CANDIDATES:
            self.parser.contact = ContactInfoDTO(name=name, email=email, phone="555-0000")
            self.scorer.default_score = score
            await self.controller.submit_resume(pdf_upload())
            self.ids[name] = self.controller.session.id
            for i in range(6):
                await self.controller.submit_answer(f"{name} answer {i}")

        # One abandoned interview that must stay off the dashboard
        self.parser.contact = ContactInfoDTO(name="Zed Quit", email="zed@example.com", phone="1")
        await self.controller.submit_resume(pdf_upload())
        self.ids["Zed Quit"] = self.controller.session.id
        await self.controller.start_new()

        self.service = InterviewerQueryService(self.controller)

    async def asyncTearDown(self):
        self.controller.timer.stop()

    def names(self, result):
        return [c.name for c in result.candidates]

    async def test_lists_completed_only_best_first(self):
        result = self.service.list_completed()
        self.assertEqual(result.total_count, 3)
        self.assertEqual(self.names(result), ["Bo Chen", "Maria Garcia", "alex Johnson"])
        self.assertEqual([c.score for c in result.candidates], [95, 88, 72])
        self.assertTrue(all(c.status == "COMPLETED" for c in result.candidates))

    async def test_sort_by_name_is_case_insensitive(self):
        result = self.service.list_completed(sort_by=SortField.NAME)
        self.assertEqual(self.names(result), ["alex Johnson", "Bo Chen", "Maria Garcia"])

        result = self.service.list_completed(sort_by=SortField.NAME, order=SortOrder.DESC)
        self.assertEqual(self.names(result), ["Maria Garcia", "Bo Chen", "alex Johnson"])

    async def test_sort_by_email_and_ascending_score(self):
        result = self.service.list_completed(sort_by=SortField.EMAIL)
        self.assertEqual(self.names(result), ["alex Johnson", "Bo Chen", "Maria Garcia"])

        result = self.service.list_completed(sort_by=SortField.SCORE, order=SortOrder.ASC)
        self.assertEqual(self.names(result), ["alex Johnson", "Maria Garcia", "Bo Chen"])

    async def test_search_matches_name_or_email(self):
        self.assertEqual(self.names(self.service.list_completed(search="  MARIA ")), ["Maria Garcia"])
        self.assertEqual(self.names(self.service.list_completed(search="corp.io")), ["alex Johnson"])
        self.assertEqual(self.service.list_completed(search="zed").total_count, 0)
        self.assertEqual(self.service.list_completed(search="nobody").candidates, [])

    async def test_candidate_detail_groups_answers(self):
        detail = self.service.get_candidate_detail(self.ids["Maria Garcia"])

        self.assertEqual(detail.score, 88)
        self.assertEqual(detail.summary, "Solid candidate.")
        self.assertEqual(len(detail.questions), 6)
        first = detail.questions[0]
        self.assertEqual(first.question_id, 1)
        self.assertEqual(first.difficulty, "Easy")
        self.assertEqual(first.time_limit_seconds, 20)
        self.assertEqual(first.answer, "Maria Garcia answer 0")
        self.assertEqual(first.score, 88)
        self.assertEqual(detail.questions[-1].difficulty, "Hard")

    async def test_abandoned_detail_shows_unanswered_question(self):
        detail = self.service.get_candidate_detail(self.ids["Zed Quit"])
        self.assertEqual(detail.status, "ABANDONED")
        self.assertEqual(detail.score, 0)
        self.assertEqual(len(detail.questions), 1)
        self.assertIsNone(detail.questions[0].answer)
        self.assertIsNone(detail.questions[0].score)

    async def test_unknown_candidate(self):
        self.assertIsNone(self.service.get_candidate_detail("missing-id"))


class TestTimeoutInDetail(unittest.IsolatedAsyncioTestCase):
    async def test_timeout_answer_is_reported(self):
        controller, _, _, _, _, _ = build_controller()
        await controller.submit_resume(pdf_upload())
        controller.session.time_remaining = 0
        await controller._dispatch_submission(TIMEOUT_ANSWER, 1, is_timeout=True)
        candidate_id = controller.session.id
        await controller.start_new()
        controller.timer.stop()

        detail = InterviewerQueryService(controller).get_candidate_detail(candidate_id)
        self.assertEqual(detail.questions[0].score, 0)
        self.assertEqual(detail.questions[0].answer, TIMEOUT_ANSWER)
        self.assertEqual(detail.questions[0].time_spent, 20)


if __name__ == '__main__':
    unittest.main()
