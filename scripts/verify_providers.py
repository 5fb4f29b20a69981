import io
import os
import random
import sys
import unittest

from pypdf import PdfWriter

# Ensure project root is in path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.append(project_root)

from packages.aia_core.config import AIAConfig
from packages.aia_core.dto import ResumeUploadDTO
from packages.aia_providers.mock_question import QUESTION_POOL, MockQuestionGenerator
from packages.aia_providers.question import QuestionGenerationResult
from packages.aia_providers.report import MockReportGenerator
from packages.aia_providers.resume import LocalPDFResumeParser, MockResumeParser
from packages.aia_providers.scoring import MockAnswerScorer
from packages.aia_session.dto import Turn
from packages.aia_session.state import TIMEOUT_ANSWER, Difficulty, TurnRole


class TestMockResumeParser(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.parser = MockResumeParser(AIAConfig())

    async def test_complete_resume(self):
        contact = await self.parser.parse(ResumeUploadDTO(file_name="alex.pdf"))
        self.assertEqual(contact.name, "Alex Johnson")
        self.assertEqual(contact.missing_fields(), [])

    async def test_missing_phone(self):
        contact = await self.parser.parse(ResumeUploadDTO(file_name="Resume-MISSING.docx"))
        self.assertEqual(contact.missing_fields(), ["phone"])

    async def test_no_contact(self):
        contact = await self.parser.parse(ResumeUploadDTO(file_name="no-contact.pdf"))
        self.assertEqual(contact.name, "Chris Lee")
        self.assertEqual(contact.missing_fields(), ["email", "phone"])


class TestLocalPDFResumeParser(unittest.IsolatedAsyncioTestCase):
    def test_extract_contact(self):
        text = (
            "Jane Smith\n"
            "Senior Software Engineer\n"
            "jane.smith@mail.com | (555) 123-4567\n"
            "Experience\n"
        )
        contact = LocalPDFResumeParser.extract_contact(text)
        self.assertEqual(contact.name, "Jane Smith")
        self.assertEqual(contact.email, "jane.smith@mail.com")
        self.assertEqual(contact.phone, "(555) 123-4567")

    def test_extract_contact_with_gaps(self):
        contact = LocalPDFResumeParser.extract_contact("jane@mail.com\n\n")
        self.assertEqual(contact.email, "jane@mail.com")
        self.assertEqual(contact.missing_fields(), ["name", "phone"])

    async def test_docx_is_not_extracted(self):
        contact = await LocalPDFResumeParser().parse(ResumeUploadDTO(file_name="cv.docx", content=b"PK"))
        self.assertEqual(contact.missing_fields(), ["name", "email", "phone"])

    async def test_pdf_without_text_layer(self):
        writer = PdfWriter()
        writer.add_blank_page(width=612, height=792)
        buffer = io.BytesIO()
        writer.write(buffer)

        contact = await LocalPDFResumeParser().parse(
            ResumeUploadDTO(file_name="scan.pdf", content=buffer.getvalue())
        )
        self.assertEqual(contact.missing_fields(), ["name", "email", "phone"])


class TestMockQuestionGenerator(unittest.IsolatedAsyncioTestCase):
    async def test_picks_from_pool(self):
        generator = MockQuestionGenerator(rng=random.Random(7))
        for difficulty in Difficulty:
            result = await generator.generate_question(difficulty)
            self.assertTrue(result.success)
            self.assertIn(result.content, QUESTION_POOL[difficulty])
            self.assertEqual(result.metadata["difficulty"], difficulty.value)

    def test_blank_content_is_not_usable(self):
        self.assertTrue(QuestionGenerationResult.ok("What is a closure?").usable)
        self.assertFalse(QuestionGenerationResult.ok("   ").usable)
        self.assertFalse(QuestionGenerationResult.failed("quota exceeded").usable)

    async def test_failure(self):
        result = await MockQuestionGenerator(should_fail=True).generate_question(Difficulty.EASY)
        self.assertFalse(result.success)
        self.assertEqual(result.content, "")
        self.assertIsNotNone(result.error)


class TestMockAnswerScorer(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.scorer = MockAnswerScorer(AIAConfig(), rng=random.Random(42))

    async def test_timeout_scores_zero(self):
        result = await self.scorer.score("Q", TIMEOUT_ANSWER)
        self.assertEqual(result.score, 0)

    async def test_scores_are_clamped(self):
        short = await self.scorer.score("Q", "ok")
        self.assertEqual(short.score, 50)
        self.assertIn("brief", short.rationale)

        long = await self.scorer.score("Q", "x" * 300)
        self.assertGreaterEqual(long.score, 90)
        self.assertLessEqual(long.score, 95)

    async def test_range(self):
        for length in range(1, 200, 7):
            result = await self.scorer.score("Q", "a" * length)
            self.assertTrue(50 <= result.score <= 95)


class TestMockReportGenerator(unittest.IsolatedAsyncioTestCase):
    def history(self, scores_and_times):
        turns = [Turn(role=TurnRole.INTERVIEWER, question_id=0, content="Welcome")]
        for qid, (score, spent) in enumerate(scores_and_times, start=1):
            turns.append(Turn(role=TurnRole.INTERVIEWER, question_id=qid, content="Q",
                              score=score, rationale="r", time_spent=spent))
            turns.append(Turn(role=TurnRole.CANDIDATE, question_id=qid, content="A", time_spent=spent))
        return turns

    async def test_summary_counts_strong_and_quick_answers(self):
        report = await MockReportGenerator(AIAConfig()).generate(self.history([
            (90, 5),    # quick (< 10s of 20s)
            (85, 15),
            (80, 20),
            (40, 10),   # quick (< 30s of 60s)
            (0, 120),
            (60, 100),
        ]))
        self.assertEqual(report.final_score, 59)
        self.assertIn("59/100 across 6 questions", report.summary)
        self.assertIn("strong mastery", report.summary)
        self.assertIn("2 quick submissions", report.summary)

    async def test_weak_interview(self):
        report = await MockReportGenerator().generate(self.history([(50, 20), (55, 20)]))
        self.assertEqual(report.final_score, 53)
        self.assertIn("foundational understanding", report.summary)
        self.assertIn("0 quick submissions", report.summary)


if __name__ == '__main__':
    unittest.main()
