import asyncio
import os
import sys
from typing import List, Optional, Sequence

# Ensure project root is in path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if project_root not in sys.path:
    sys.path.append(project_root)

from packages.aia_core.config import AIAConfig
from packages.aia_core.dto import AnswerScoreDTO, ContactInfoDTO, FinalReportDTO, ResumeUploadDTO
from packages.aia_providers.question import QuestionGenerator, QuestionGenerationResult
from packages.aia_providers.report.base import IReportGenerator
from packages.aia_providers.resume.base import IResumeParser
from packages.aia_providers.scoring.base import IAnswerScorer
from packages.aia_session.dto import Turn
from packages.aia_session.engine import SessionController
from packages.aia_session.infrastructure.memory_repo import MemorySnapshotRepository
from packages.aia_session.scoring import compute_final_score
from packages.aia_session.state import Difficulty, TIMEOUT_ANSWER, TIMEOUT_RATIONALE
from packages.aia_session.store import SessionStateStore

FULL_CONTACT = ContactInfoDTO(name="Alex Johnson", email="alex@example.com", phone="555-0101")

# Mock Implementations
class FakeResumeParser(IResumeParser):
    def __init__(self, contact: ContactInfoDTO = FULL_CONTACT):
        self.contact = contact
        self.fail = False
        self.calls: List[str] = []

    async def parse(self, upload: ResumeUploadDTO) -> ContactInfoDTO:
        self.calls.append(upload.file_name)
        if self.fail:
            raise RuntimeError("OCR service unavailable")
        return self.contact

class FakeQuestionGenerator(QuestionGenerator):
    def __init__(self):
        self.fail = False
        self.requested: List[Difficulty] = []

    async def generate_question(self, difficulty: Difficulty) -> QuestionGenerationResult:
        if self.fail:
            return QuestionGenerationResult.failed("generator down")
        self.requested.append(difficulty)
        return QuestionGenerationResult.ok(f"{difficulty.value} question #{len(self.requested)}")

class FakeScorer(IAnswerScorer):
    """
    Scores every answer with `default_score` (timeouts with 0).
    When `gate` is set, scoring blocks until the event is released.
    """
    def __init__(self, default_score: int = 70):
        self.default_score = default_score
        self.fail = False
        self.gate: Optional[asyncio.Event] = None
        self.calls: List[tuple] = []

    async def score(self, question: str, answer: str) -> AnswerScoreDTO:
        self.calls.append((question, answer))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RuntimeError("grading model timed out")
        if answer == TIMEOUT_ANSWER:
            return AnswerScoreDTO(score=0, rationale=TIMEOUT_RATIONALE)
        return AnswerScoreDTO(score=self.default_score, rationale="ok")

class FakeReporter(IReportGenerator):
    def __init__(self):
        self.fail = False
        self.histories: List[Sequence[Turn]] = []

    async def generate(self, history: Sequence[Turn]) -> FinalReportDTO:
        if self.fail:
            raise RuntimeError("summary service down")
        self.histories.append(list(history))
        return FinalReportDTO(final_score=compute_final_score(history), summary="Solid candidate.")

def build_controller(
    repository: Optional[MemorySnapshotRepository] = None,
    contact: ContactInfoDTO = FULL_CONTACT,
    tick_interval: float = 60.0
):
    repository = repository or MemorySnapshotRepository()
    parser = FakeResumeParser(contact)
    generator = FakeQuestionGenerator()
    scorer = FakeScorer()
    reporter = FakeReporter()
    controller = SessionController(
        store=SessionStateStore(repository),
        resume_parser=parser,
        question_generator=generator,
        scorer=scorer,
        reporter=reporter,
        config=AIAConfig(),
        tick_interval=tick_interval
    )
    return controller, repository, parser, generator, scorer, reporter

def pdf_upload(name: str = "resume.pdf") -> ResumeUploadDTO:
    return ResumeUploadDTO(file_name=name, content=b"%PDF-1.4")

async def wait_until(predicate, timeout: float = 2.0, step: float = 0.005):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(step)
