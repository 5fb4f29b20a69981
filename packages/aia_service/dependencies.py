from functools import lru_cache

from packages.aia_core.config import AIAConfig
from packages.aia_providers.mock_question import MockQuestionGenerator
from packages.aia_providers.question import QuestionGenerator
from packages.aia_providers.report import IReportGenerator, MockReportGenerator
from packages.aia_providers.resume import IResumeParser, MockResumeParser
from packages.aia_providers.scoring import IAnswerScorer, MockAnswerScorer
from packages.aia_service.admin_query import InterviewerQueryService
from packages.aia_session.catalog import DEFAULT_CATALOG
from packages.aia_session.engine import SessionController
from packages.aia_session.infrastructure.file_repo import JsonFileSnapshotRepository
from packages.aia_session.repository import SessionSnapshotRepository
from packages.aia_session.store import SessionStateStore

# --- Providers (External Adapters) ---

@lru_cache
def get_config() -> AIAConfig:
    return AIAConfig.load()

@lru_cache
def get_resume_parser() -> IResumeParser:
    """
    Singleton Resume Parser (Mock for now).
    """
    return MockResumeParser(get_config())

@lru_cache
def get_question_generator() -> QuestionGenerator:
    return MockQuestionGenerator(latency=get_config().MOCK_LATENCY_MS / 1000.0)

@lru_cache
def get_answer_scorer() -> IAnswerScorer:
    return MockAnswerScorer(get_config())

@lru_cache
def get_report_generator() -> IReportGenerator:
    return MockReportGenerator(get_config(), DEFAULT_CATALOG)

# --- Repositories (Persistence) ---

@lru_cache
def get_snapshot_repository() -> SessionSnapshotRepository:
    """
    Singleton Snapshot Repository (File-based, single key).
    """
    config = get_config()
    return JsonFileSnapshotRepository(base_dir=config.DATA_DIR, key=config.PERSIST_KEY)

# --- Session Engine ---

@lru_cache
def get_session_controller() -> SessionController:
    """
    Singleton Session Controller.
    Only one active session exists per process, so the controller is shared.
    Call `await controller.start()` once before issuing commands.
    """
    return SessionController(
        store=SessionStateStore(get_snapshot_repository()),
        resume_parser=get_resume_parser(),
        question_generator=get_question_generator(),
        scorer=get_answer_scorer(),
        reporter=get_report_generator(),
        catalog=DEFAULT_CATALOG,
        config=get_config()
    )

def get_interviewer_query_service() -> InterviewerQueryService:
    """
    Transient dashboard query service over the shared controller.
    """
    return InterviewerQueryService(get_session_controller())
