from typing import Awaitable, Callable, TYPE_CHECKING

from packages.aia_core.errors import CollaboratorError
from packages.aia_core.logging import get_logger
from .catalog import QuestionCatalog
from .dto import CandidateSession, Turn
from .scoring import ScoringPipeline
from .state import TurnRole

if TYPE_CHECKING:
    from packages.aia_providers.question import QuestionGenerator

logger = get_logger("aia.session.sequencer")

# (session, final_score, summary)
CompletionHandler = Callable[[CandidateSession, int, str], Awaitable[None]]

class QuestionSequencer:
    """
    Moves a session through the catalog.
    Either issues the next question, or, once the catalog is exhausted,
    builds the final report and hands the session to the completion handler.
    """
    def __init__(
        self,
        catalog: QuestionCatalog,
        question_generator: "QuestionGenerator",
        pipeline: ScoringPipeline,
        on_complete: CompletionHandler
    ):
        self.catalog = catalog
        self.question_generator = question_generator
        self.pipeline = pipeline
        self.on_complete = on_complete

    async def advance(self, session: CandidateSession, next_question_id: int) -> None:
        """
        Issue question `next_question_id` on `session`, or complete the interview.
        The session is only mutated after the collaborator call succeeded.
        """
        if next_question_id > len(self.catalog):
            logger.info(f"Catalog exhausted for {session.id}; generating final report")
            report = await self.pipeline.generate_report(session.history)
            await self.on_complete(session, report.final_score, report.summary)
            return

        slot = self.catalog.require(next_question_id)
        try:
            result = await self.question_generator.generate_question(slot.difficulty)
        except Exception as e:
            logger.exception(f"Question generation raised for slot {slot.id}")
            raise CollaboratorError("generateQuestion", str(e)) from e
        if not result.usable:
            raise CollaboratorError("generateQuestion", result.error or "empty question")

        session.history.append(Turn(
            role=TurnRole.INTERVIEWER,
            question_id=slot.id,
            content=result.content,
            score=None,
            rationale=None,
            time_spent=slot.time_limit_seconds  # holds the limit until answered
        ))
        session.current_question_index = next_question_id
        session.time_remaining = slot.time_limit_seconds
        logger.info(
            f"Issued question {slot.id}/{len(self.catalog)} ({slot.difficulty.value}, "
            f"{slot.time_limit_seconds}s) to {session.id}"
        )

    def needs_bootstrap(self, session: CandidateSession) -> bool:
        """True when the session is interviewing but no question was ever issued."""
        return not session.question_turns() and session.current_question_index <= 1
